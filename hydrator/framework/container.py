"""Service container with provider-scoped bindings."""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Union

from hydrator.exceptions import HydratorError
from hydrator.log import log


class ServiceNotFoundError(HydratorError, LookupError):
    """Raised when a service cannot be resolved by a container."""


class Container:
    """
    Maps service classes to concrete classes, factories or shared instances.

    Bindings registered with :meth:`bind_for` only apply once the container
    has been narrowed to the provider class they were registered for, via
    :meth:`in_context_of`. Narrowing never changes the original container.

    Example:
        >>> container = Container()
        >>> container.bind_for(CrmProvider, Person, CrmPerson)
        >>> container.in_context_of(CrmProvider).get_name(Person)
        <class 'CrmPerson'>
    """

    def __init__(self):
        self._bindings: Dict[type, Union[type, Callable[[], Any]]] = {}
        self._instances: Dict[type, Any] = {}
        self._contextual: Dict[type, Dict[type, type]] = {}
        self._context_class: Optional[type] = None
        self._derived: Dict[type, Container] = {}
        self._base: Optional[Container] = None

    @property
    def context_class(self) -> Optional[type]:
        """The provider class this container has been narrowed to, if any."""
        return self._context_class

    def bind(self, service: type, concrete: Union[type, Callable[[], Any]]) -> Container:
        """Resolve ``service`` to ``concrete`` (a subclass or a factory)."""
        self._bindings[service] = concrete
        self._derived.clear()
        return self

    def bind_for(self, provider_class: type, service: type, concrete: type) -> Container:
        """Resolve ``service`` to ``concrete`` in the context of ``provider_class``."""
        self._contextual.setdefault(provider_class, {})[service] = concrete
        self._derived.clear()
        return self

    def instance(self, service: type, obj: Any) -> Container:
        """Share ``obj`` whenever ``service`` is requested."""
        self._instances[service] = obj
        self._derived.clear()
        return self

    def in_context_of(self, provider_class: type) -> Container:
        """
        Return a container for services requested on behalf of ``provider_class``.

        Contextual bindings registered for ``provider_class`` or any of its
        base classes are layered over this container's bindings, the most
        derived class last.
        """
        if self._context_class is provider_class:
            return self
        if self._base is not None:
            return self._base.in_context_of(provider_class)
        derived = self._derived.get(provider_class)
        if derived is not None:
            return derived

        # pylint: disable=protected-access
        derived = Container()
        derived._bindings = dict(self._bindings)
        derived._instances = dict(self._instances)
        derived._contextual = self._contextual
        derived._context_class = provider_class
        derived._base = self
        for klass in reversed(provider_class.__mro__):
            derived._bindings.update(self._contextual.get(klass, {}))
        log.debug("Container narrowed to %s", provider_class.__qualname__)
        return self._derived.setdefault(provider_class, derived)

    def _resolve_chain(self, service: type) -> Any:
        seen = set()
        current: Any = service
        while isinstance(current, type) and current in self._bindings and current not in seen:
            seen.add(current)
            target = self._bindings[current]
            if target is current:
                break
            current = target
        return current

    def get_name(self, service: type) -> type:
        """Return the class that will be instantiated when ``service`` is requested."""
        concrete = self._resolve_chain(service)
        if isinstance(concrete, type):
            return concrete
        return service

    def has(self, service: type) -> bool:
        """Whether ``service`` has a binding or a shared instance."""
        return service in self._instances or service in self._bindings

    def get(self, service: type) -> Any:
        """Return an instance of ``service``."""
        if service in self._instances:
            return self._instances[service]
        concrete = self._resolve_chain(service)
        if not self.has(service) and not isinstance(concrete, type):
            raise ServiceNotFoundError(f"Service not bound: {service!r}")
        try:
            return concrete()
        except TypeError as error:
            raise ServiceNotFoundError(
                f"Service {service.__qualname__} cannot be instantiated without arguments: {error}"
            ) from error
