"""
This module is hydrator, provider-aware entity hydration
"""

from hydrator.exceptions import (
    AmbiguousKeyError,
    ContextNotSetError,
    DateCoercionError,
    HydrationConfigError,
    HydratorConfigFileError,
    HydratorError,
    HydratorStateError,
    NotNullableParameterError,
    ProviderAlreadySetError,
    ProviderNotSetError,
    UnmappedKeyError,
)
from hydrator.framework.conformity import ListConformity
from hydrator.framework.container import Container, ServiceNotFoundError
from hydrator.framework.extensible import Extensible, HasReadableProperties
from hydrator.framework.introspection import Ref, describe_entity_type
from hydrator.framework.introspector import Introspector
from hydrator.framework.key_targets import ID_KEY, KeyTargets
from hydrator.framework.normaliser import Normalisable, snake_case
from hydrator.framework.providable import Providable
from hydrator.framework.provider import Provider, ProviderContext, ProviderInterface
from hydrator.log import log
from hydrator.user_config import UserConfig
from hydrator.version import __version__

__all__ = [
    "AmbiguousKeyError",
    "Container",
    "ContextNotSetError",
    "DateCoercionError",
    "Extensible",
    "HasReadableProperties",
    "HydrationConfigError",
    "HydratorConfigFileError",
    "HydratorError",
    "HydratorStateError",
    "ID_KEY",
    "Introspector",
    "KeyTargets",
    "ListConformity",
    "Normalisable",
    "NotNullableParameterError",
    "Providable",
    "Provider",
    "ProviderAlreadySetError",
    "ProviderContext",
    "ProviderInterface",
    "ProviderNotSetError",
    "Ref",
    "ServiceNotFoundError",
    "UnmappedKeyError",
    "UserConfig",
    "describe_entity_type",
    "log",
    "snake_case",
    "__version__",
]
