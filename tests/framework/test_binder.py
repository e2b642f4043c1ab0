import re
from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

import pytest

from hydrator.exceptions import DateCoercionError, NotNullableParameterError
from hydrator.framework import binder as binder_module
from hydrator.framework.binder import coerce_date, compile_binder
from hydrator.framework.extensible import Extensible
from hydrator.framework.introspection import Ref
from hydrator.framework.introspector import Introspector


class Product:
    colour: Optional[str] = None

    def __init__(self, name: str, stock: int = 0):
        self.name = name
        self.stock = stock
        self.price_cents = None

    def _set_price(self, value):
        self.price_cents = round(float(value) * 100)


class Label:
    def __init__(self, text: Optional[str] = None):
        self.text = text

    def _set_text(self, value):
        self.text = value.upper()


class Event(Extensible):
    starts_at: Optional[datetime] = None

    def __init__(self, title: str, day: Optional[date] = None):
        self.title = title
        self.day = day


class Slug:
    def __init__(self, text: Ref[str]):
        self.original = text.value
        text.value = text.value.lower()
        self.cell = text


class Options:
    def __init__(self, name, *, verbose=False, level: int = 1):
        self.name = name
        self.verbose = verbose
        self.level = level


def _binder(entity_class, keys, complete=False):
    return Introspector.get(entity_class).get_binder(keys, complete=complete)


def test_parameters_then_members():
    binder = _binder(Product, ["Name", "Colour", "Price"])
    record = {"Name": "Lamp", "Colour": "red", "Price": "12.5"}
    product = binder(record)
    assert product.name == "Lamp"
    assert product.stock == 0
    assert product.colour == "red"
    assert product.price_cents == 1250
    assert record == {"Name": "Lamp", "Colour": "red", "Price": "12.5"}


def test_magic_method_has_precedence_over_parameter():
    label = _binder(Label, ["text"])({"text": "hi"})
    assert label.text == "HI"


def test_not_nullable_value():
    binder = _binder(Product, ["name", "stock"])
    with pytest.raises(
        NotNullableParameterError,
        match=re.escape(
            "Product: 'name' cannot be None (constructor parameter 'name' is not nullable)"
        ),
    ):
        binder({"name": None, "stock": 1})


def test_keyed_binder_tolerates_missing_optional_keys():
    binder = _binder(Product, ["name", "stock", "colour"])
    product = binder({"name": "Lamp"})
    assert product.stock == 0
    assert product.colour is None

    with pytest.raises(NotNullableParameterError, match="'name' cannot be None"):
        binder({"stock": 3})


def test_positional_binder():
    binder = _binder(Product, ["name", "stock"], complete=True)
    product = binder({"name": "Lamp", "stock": 3})
    assert (product.name, product.stock) == ("Lamp", 3)

    # read by position, not by key
    product = binder({"stock": "Desk", "name": 4})
    assert (product.name, product.stock) == ("Desk", 4)

    # a different number of keys is read by key
    product = binder({"name": "Chair"})
    assert (product.name, product.stock) == ("Chair", 0)


def test_keyword_only_parameters():
    options = _binder(Options, ["level", "name"])({"level": 3, "name": "run"})
    assert (options.name, options.verbose, options.level) == ("run", False, 3)


def test_pass_by_reference():
    record = {"text": "Hello"}
    slug = _binder(Slug, ["text"])(record)
    assert slug.original == "Hello"
    assert slug.cell.value == "hello"
    assert record["text"] == "Hello"


def test_meta_properties_keep_record_spelling():
    event = _binder(Event, ["title", "Room-Number"])({"title": "Talk", "Room-Number": 4})
    assert event.get_meta_properties() == {"Room-Number": 4}
    assert event.get_meta_property("Room-Number") == 4


def test_date_coercion():
    event = _binder(Event, ["title", "day", "startsAt"])(
        {"title": "Talk", "day": "2024-05-01", "startsAt": "2024-05-01T10:30:00"}
    )
    assert event.day == date(2024, 5, 1)
    assert event.starts_at == datetime(2024, 5, 1, 10, 30)
    assert event.starts_at.tzinfo is None

    event = _binder(Event, ["title", "day"])({"title": "Talk", "day": None})
    assert event.day is None


def test_default_timezone(hydration_settings):
    hydration_settings.default_timezone = "Europe/Berlin"
    event = _binder(Event, ["title", "startsAt"])(
        {"title": "Talk", "startsAt": "2024-05-01T10:30:00"}
    )
    assert event.starts_at.tzinfo == ZoneInfo("Europe/Berlin")

    event = _binder(Event, ["title", "starts_at"])(
        {"title": "Talk", "starts_at": "2024-05-01T10:30:00+00:00"}
    )
    assert event.starts_at.utcoffset().total_seconds() == 0


def test_date_coercion_error():
    binder = _binder(Event, ["title", "day"])
    with pytest.raises(
        DateCoercionError, match=re.escape("Event: cannot coerce 'day' value 'soon' to a date")
    ):
        binder({"title": "Talk", "day": "soon"})


def test_coerce_date():
    assert coerce_date("2024-02-29", "date") == date(2024, 2, 29)
    assert coerce_date(date(2024, 2, 29), "date") == date(2024, 2, 29)
    assert coerce_date(None, "datetime") is None
    assert coerce_date("2024-02-29T12:00:00", "datetime", timezone.utc) == datetime(
        2024, 2, 29, 12, tzinfo=timezone.utc
    )
    with pytest.raises(ValueError):
        coerce_date("2024-02-30", "date")


def test_compile_binder_without_cache():
    introspector = Introspector.get(Product)
    targets = introspector.get_key_targets(["name"])
    first = compile_binder(introspector, targets)
    second = compile_binder(introspector, targets)
    assert first is not second
    assert first({"name": "Lamp"}).name == second({"name": "Lamp"}).name == "Lamp"


def test_default_timezone_follows_settings(hydration_settings):
    binder = _binder(Event, ["title", "startsAt"])
    record = {"title": "Talk", "startsAt": "2024-05-01T10:30:00"}
    assert binder(record).starts_at.tzinfo is None

    hydration_settings.default_timezone = "Europe/Berlin"
    assert _binder(Event, ["title", "startsAt"]) is binder
    assert binder(record).starts_at.tzinfo == ZoneInfo("Europe/Berlin")

    hydration_settings.default_timezone = None
    assert binder(record).starts_at.tzinfo is None


def test_timezone_is_not_needed_without_date_targets(hydration_settings, monkeypatch):
    monkeypatch.setattr(binder_module, "_default_tz", _fail)
    product = _binder(Product, ["name"])({"name": "Lamp"})
    assert product.name == "Lamp"


def _fail():
    raise AssertionError("timezone resolved for an entity without date targets")
