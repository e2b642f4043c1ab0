"""Custom hydrator exceptions"""

from typing import Optional

from rich.markup import escape

from hydrator.version import __version__

from .log import log


class HydratorError(Exception):
    """Any error in hydrator"""

    def __init__(self, message: str = None):
        """Log just the error message and then raise the Exception."""
        super().__init__(message)
        log.error(escape(f"{message} [hydrator version: {__version__}]"))


class HydratorConfigFileError(HydratorError):
    """Error when reading or validating the user configuration."""


class HydrationConfigError(HydratorError, ValueError):
    """A record cannot be mapped onto an entity class. Not retryable."""

    def __init__(self, message: str, entity_class: Optional[type] = None):
        self.entity_class = entity_class
        super().__init__(message)


class AmbiguousKeyError(HydrationConfigError):
    """Two distinct names normalise to the same key."""

    def __init__(self, entity_class: type, key: str, names: tuple, where: str):
        self.key = key
        self.names = names
        super().__init__(
            f"{entity_class.__qualname__}: {where} {', '.join(repr(n) for n in names)} "
            f"all normalise to '{key}'",
            entity_class,
        )


class UnmappedKeyError(HydrationConfigError):
    """A record key matches no declared member of a non-extensible entity class."""

    def __init__(self, entity_class: type, keys: list):
        self.keys = keys
        super().__init__(
            f"{entity_class.__qualname__} cannot be hydrated with unmapped "
            f"key{'s' if len(keys) > 1 else ''}: {', '.join(repr(k) for k in keys)}",
            entity_class,
        )


class NotNullableParameterError(HydrationConfigError):
    """A not-nullable constructor parameter is unbound or receives None."""

    def __init__(self, entity_class: type, parameter: str, key: Optional[str] = None):
        self.parameter = parameter
        self.key = key
        if key is None:
            message = (
                f"{entity_class.__qualname__}: no value for not-nullable "
                f"constructor parameter '{parameter}'"
            )
        else:
            message = (
                f"{entity_class.__qualname__}: '{key}' cannot be None "
                f"(constructor parameter '{parameter}' is not nullable)"
            )
        super().__init__(message, entity_class)


class DateCoercionError(HydrationConfigError):
    """A value mapped to a date/time member cannot be coerced."""

    def __init__(self, entity_class: type, key: str, value, reason: str = ""):
        self.key = key
        self.value = value
        message = f"{entity_class.__qualname__}: cannot coerce '{key}' value {value!r} to a date"
        if reason:
            message += f": {reason}"
        super().__init__(message, entity_class)


class HydratorStateError(HydratorError, RuntimeError):
    """An operation is not valid in the object's current state."""


class ProviderAlreadySetError(HydratorStateError):
    """An entity is already bound to a different provider."""


class ProviderNotSetError(HydratorStateError):
    """An entity has no provider."""


class ContextNotSetError(HydratorStateError):
    """An entity has no provider context."""
