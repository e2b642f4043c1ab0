import pytest

from hydrator.framework.normaliser import Normalisable, get_normaliser, snake_case


@pytest.mark.parametrize(
    "name",
    ["FirstName", "firstName", "first_name", "first-name", "first name", "FIRST_NAME", "__first__name"],
)
def test_equivalent_spellings(name):
    assert snake_case(name) == "first_name"


@pytest.mark.parametrize(
    "name, expected",
    [
        ("HTTPStatus", "http_status"),
        ("userID", "user_id"),
        ("ID", "id"),
        ("address.line1", "address_line1"),
        ("Line2Text", "line2_text"),
        ("name", "name"),
    ],
)
def test_snake_case(name, expected):
    assert snake_case(name) == expected


def test_snake_case_is_idempotent():
    for name in ["HTTPStatus", "first-name", "Line2Text"]:
        assert snake_case(snake_case(name)) == snake_case(name)


class Plain:
    pass


class Prefixed(Normalisable):
    @classmethod
    def normalise_property(cls, name):
        return snake_case(name).removeprefix("crm_")


def test_get_normaliser():
    assert get_normaliser(Plain) is snake_case
    assert get_normaliser(Normalisable)("FirstName") == "first_name"
    assert get_normaliser(Prefixed)("CrmEmail") == "email"
