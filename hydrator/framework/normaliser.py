"""Key normalisation used to compare record keys with declared members."""

import re
from functools import lru_cache
from typing import Callable

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_SEPARATORS = re.compile(r"[\W_]+")


@lru_cache(maxsize=4096)
def snake_case(name: str) -> str:
    """
    Convert an arbitrary member or key name to lower snake_case.

    Parameters:
    name (str): camelCase, PascalCase, kebab-case, dotted or spaced name.

    Returns:
    str: The normalised name.

    Example:
    >>> snake_case("FirstName"), snake_case("first-name"), snake_case("HTTPStatus")
    ('first_name', 'first_name', 'http_status')
    """
    name = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    name = _CAMEL_BOUNDARY.sub(r"\1_\2", name)
    return _SEPARATORS.sub("_", name).strip("_").lower()


class Normalisable:
    """
    Mixin for entity classes that normalise their own keys.

    Override ``normalise_property`` to change how record keys and declared
    member names are folded before they are compared.
    """

    @classmethod
    def normalise_property(cls, name: str) -> str:
        """Return the comparison form of ``name``."""
        return snake_case(name)


def get_normaliser(entity_class: type) -> Callable[[str], str]:
    """Return the normaliser used for ``entity_class``."""
    normaliser = getattr(entity_class, "normalise_property", None)
    if callable(normaliser):
        return normaliser
    return snake_case
