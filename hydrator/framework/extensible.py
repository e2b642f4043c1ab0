"""Mixins for entities with dynamic ("meta") or method-backed properties."""

from typing import Any, Dict

_META_SLOT = "_hydrator_meta_properties"


class Extensible:
    """
    Entity that accepts record keys it does not declare.

    Unmatched keys are kept, with their original spelling and in arrival
    order, in an auxiliary mapping on the instance. They can be read back
    with :meth:`get_meta_properties` or as ordinary attributes.
    """

    def _meta_slot(self) -> Dict[str, Any]:
        slot = vars(self).get(_META_SLOT)
        if slot is None:
            slot = {}
            object.__setattr__(self, _META_SLOT, slot)
        return slot

    def set_meta_property(self, name: str, value: Any) -> None:
        """Store ``value`` under ``name`` in the meta slot."""
        self._meta_slot()[name] = value

    def get_meta_property(self, name: str, default: Any = None) -> Any:
        """Return the meta value stored under ``name``, or ``default``."""
        return self._meta_slot().get(name, default)

    def unset_meta_property(self, name: str) -> None:
        """Remove ``name`` from the meta slot if present."""
        self._meta_slot().pop(name, None)

    def get_meta_properties(self) -> Dict[str, Any]:
        """Return a copy of the meta slot."""
        return dict(self._meta_slot())

    def __getattr__(self, name: str) -> Any:
        slot = vars(self).get(_META_SLOT)
        if slot is not None and name in slot:
            return slot[name]
        fallback = getattr(super(), "__getattr__", None)
        if fallback is not None:
            return fallback(name)
        raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")


class HasReadableProperties:
    """
    Entity whose properties may be computed by ``_get_<name>()`` methods.

    - If ``_get_<name>()`` is defined, reading ``<name>`` calls it.
    - If ``_isset_<name>()`` is defined and returns False, ``<name>`` reads as
      missing: ``hasattr`` is False and reading it raises ``AttributeError``.
    - ``_set_<name>(value)`` methods are used by hydration in preference to
      assigning ``<name>`` directly.
    """

    def __getattr__(self, name: str) -> Any:
        if not name.startswith("_"):
            isset = getattr(type(self), f"_isset_{name}", None)
            if callable(isset) and not isset(self):
                raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")
            getter = getattr(type(self), f"_get_{name}", None)
            if callable(getter):
                return getter(self)
        fallback = getattr(super(), "__getattr__", None)
        if fallback is not None:
            return fallback(name)
        raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")
