"""
Entities that are hydrated on behalf of a provider.

Deriving from :class:`Providable` gives an entity class the
``hydrate_one`` / ``hydrate_many`` constructors and write-once binding to
the provider (and context) it was hydrated for.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Mapping, Optional, Tuple, Union

from hydrator.exceptions import (
    ContextNotSetError,
    ProviderAlreadySetError,
    ProviderNotSetError,
)
from hydrator.framework.conformity import (
    ListConformity,
    effective_conformity,
    indexes_by_position,
    reuses_binder,
)
from hydrator.framework.container import Container
from hydrator.framework.provider import ProviderContext, ProviderInterface
from hydrator.user_config import UserConfig


def _resolve_context(
    provider: ProviderInterface, context: Optional[ProviderContext]
) -> Tuple[Container, ProviderContext]:
    """Container narrowed to the provider's class, and the context bound to it."""
    if context is None:
        context = provider.get_context()
    container = context.get_container().in_context_of(type(provider))
    return container, context.with_container(container)


class Providable:
    """
    Mixin for entity classes hydrated from records on behalf of a provider.

    Example
    -------
    >>> class Person(Providable):
    ...     def __init__(self, name: str, age: Optional[int] = None):
    ...         self.name = name
    ...         self.age = age
    >>> person = Person.hydrate_one({"Name": "Ann", "Age": 30}, provider)
    >>> person.name, person.age, person.get_provider() is provider
    ('Ann', 30, True)
    """

    _provider: Optional[ProviderInterface] = None
    _context: Optional[ProviderContext] = None
    _service: Optional[type] = None

    @classmethod
    def hydrate_one(
        cls,
        record: Mapping[str, Any],
        provider: ProviderInterface,
        context: Optional[ProviderContext] = None,
    ):
        """
        Create one entity from ``record``.

        Parameters
        ----------
        record : Mapping[str, Any]
            Keys are matched to the class's members after normalisation.
        provider : ProviderInterface
            Provider the entity is hydrated on behalf of.
        context : ProviderContext, optional
            Context to hydrate in; the provider's default context if omitted.

        Returns
        -------
        Providable
            An instance of ``cls``, or of the subclass the provider's
            container binds ``cls`` to.
        """
        # pylint: disable=import-outside-toplevel
        from hydrator.framework.introspector import Introspector

        container, context = _resolve_context(provider, context)
        introspector = Introspector.get_service(container, cls)
        return introspector.get_create_from_closure()(record, provider, context)

    @classmethod
    def hydrate_many(
        cls,
        records: Iterable[Mapping[str, Any]],
        provider: ProviderInterface,
        conformity: Optional[Union[ListConformity, int, str]] = None,
        context: Optional[ProviderContext] = None,
    ) -> Iterator:
        """
        Lazily create one entity per record, in input order.

        ``records`` is consumed once, one record per entity pulled. With
        ``PARTIAL`` or ``COMPLETE`` conformity the binder compiled for the
        first record is reused for every following record, which must
        therefore have the same keys (and, for ``COMPLETE``, in the same
        order). The stricter of ``conformity`` and the context's own
        conformity applies; ``conformity`` defaults to the configured
        ``default_conformity``.
        """
        # pylint: disable=import-outside-toplevel
        from hydrator.framework.introspector import Introspector

        if conformity is None:
            conformity = UserConfig.default_conformity
        container, context = _resolve_context(provider, context)
        level = effective_conformity(conformity, context.get_conformity())
        introspector = Introspector.get_service(container, cls)

        if not reuses_binder(level):
            create = introspector.get_create_from_closure()
            for record in records:
                yield create(record, provider, context)
            return

        binder = None
        for record in records:
            if binder is None:
                binder = introspector.get_create_from_signature_closure(
                    tuple(record),
                    type(provider),
                    type(context),
                    complete=indexes_by_position(level),
                )
            yield binder(record, provider, context)

    def set_provider(self, provider: ProviderInterface) -> None:
        """
        Bind the entity to ``provider``.

        Binding the same provider again does nothing.

        Raises
        ------
        ProviderAlreadySetError
            If the entity is already bound to a different provider.
        """
        current = self._provider
        if current is not None and current is not provider:
            raise ProviderAlreadySetError(
                f"{type(self).__qualname__} is already bound to provider "
                f"{type(current).__qualname__}"
            )
        self._provider = provider

    def get_provider(self) -> Optional[ProviderInterface]:
        """Return the provider the entity is bound to, if any."""
        return self._provider

    def require_provider(self) -> ProviderInterface:
        """Return the provider the entity is bound to, failing if there is none."""
        if self._provider is None:
            raise ProviderNotSetError(f"{type(self).__qualname__} has no provider")
        return self._provider

    def set_context(self, context: ProviderContext) -> None:
        """Set the context the entity was hydrated in."""
        self._context = context

    def get_context(self) -> Optional[ProviderContext]:
        """Return the context the entity was hydrated in, if any."""
        return self._context

    def require_context(self) -> ProviderContext:
        """Return the context the entity was hydrated in, failing if there is none."""
        if self._context is None:
            raise ContextNotSetError(f"{type(self).__qualname__} has no provider context")
        return self._context

    def set_service(self, service: type) -> None:
        """Record the class the entity was requested as."""
        self._service = service

    def get_service_type(self) -> type:
        """Return the class the entity was requested as, by default its own class."""
        return self._service if self._service is not None else type(self)
