"""Providers and the contexts they hydrate entities in."""

from __future__ import annotations

from abc import ABCMeta, abstractmethod
from typing import Any, Optional

import pydantic as pd

from hydrator.framework.conformity import ListConformity
from hydrator.framework.container import Container


class ProviderContext(pd.BaseModel):
    """
    Immutable context for one hydration operation or batch.

    Attributes:
        provider: The provider entities are hydrated on behalf of.
        container: Service container, narrowed to the provider's class during hydration.
        conformity: Minimum conformity applied to batches hydrated in this context.
        parent: Entity that records are being hydrated for, if any.
    """

    model_config = pd.ConfigDict(frozen=True, arbitrary_types_allowed=True, extra="forbid")

    provider: Optional[Any] = None
    container: Container = pd.Field(default_factory=Container)
    conformity: ListConformity = ListConformity.NONE
    parent: Optional[Any] = None

    def get_provider(self) -> Any:
        """Return the provider this context belongs to."""
        return self.provider

    def get_container(self) -> Container:
        """Return the context's service container."""
        return self.container

    def get_conformity(self) -> ListConformity:
        """Return the context's conformity level."""
        return self.conformity

    def get_parent(self) -> Any:
        """Return the parent entity, if any."""
        return self.parent

    def with_container(self, container: Container) -> ProviderContext:
        """Return a copy of the context bound to ``container``."""
        if container is self.container:
            return self
        return self.model_copy(update={"container": container})

    def with_conformity(self, conformity: ListConformity) -> ProviderContext:
        """Return a copy of the context with a different conformity level."""
        conformity = ListConformity(conformity)
        if conformity == self.conformity:
            return self
        return self.model_copy(update={"conformity": conformity})

    def with_parent(self, parent: Any) -> ProviderContext:
        """Return a copy of the context for hydrating entities that belong to ``parent``."""
        return self.model_copy(update={"parent": parent})


class ProviderInterface(metaclass=ABCMeta):
    """
    Something entities can be hydrated on behalf of.

    A provider owns a service container and issues a default context when
    the caller does not supply one.
    """

    @abstractmethod
    def get_container(self) -> Container:
        """Return the provider's service container."""

    @abstractmethod
    def get_context(self) -> ProviderContext:
        """Return a new context for hydration on behalf of this provider."""


class Provider(ProviderInterface):
    """
    Base class for providers.

    Parameters:
        container: Service container; a new empty container is created if omitted.
        conformity: Conformity level of contexts issued by :meth:`get_context`.
    """

    context_class = ProviderContext

    def __init__(
        self,
        container: Optional[Container] = None,
        conformity: ListConformity = ListConformity.NONE,
    ):
        self._container = container if container is not None else Container()
        self._conformity = ListConformity(conformity)

    def get_container(self) -> Container:
        return self._container

    def get_context(self) -> ProviderContext:
        return self.context_class(
            provider=self, container=self._container, conformity=self._conformity
        )

    def get_name(self) -> str:
        """Name used in log messages."""
        return type(self).__qualname__
