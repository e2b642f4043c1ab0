"""
Per-class hydration metadata and compiled binders.

An :class:`Introspector` exists for every (service class, concrete class)
pair hydrated so far. It normalises the class's declared members once, then
builds :class:`KeyTargets` and binders for each key signature it is asked
about, keeping both for reuse.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from hydrator.exceptions import (
    AmbiguousKeyError,
    NotNullableParameterError,
    UnmappedKeyError,
)
from hydrator.framework.binder import Binder, compile_binder
from hydrator.framework.container import Container
from hydrator.framework.introspection import (
    EntityDescriptor,
    ParameterDescriptor,
    describe_entity_type,
)
from hydrator.framework.key_targets import ID_KEY, InjectedParameter, KeyTargets
from hydrator.framework.normaliser import get_normaliser
from hydrator.framework.provider import ProviderContext, ProviderInterface
from hydrator.log import log
from hydrator.user_config import UserConfig

_TargetsKey = Tuple[Tuple[str, ...], Optional[type], Optional[type]]
_BinderKey = Tuple[Tuple[str, ...], Optional[type], Optional[type], bool]


class Introspector:
    """
    Hydration metadata for one entity class.

    Attributes:
        service: Class requested by the caller.
        entity_class: Class actually instantiated; differs from ``service``
            when the container binds the service to a subclass.
        descriptor: Result of :func:`describe_entity_type` for ``entity_class``.
    """

    _instances: Dict[Tuple[type, type], Introspector] = {}

    def __init__(self, service: type, entity_class: type):
        self.service = service
        self.entity_class = entity_class
        self.descriptor: EntityDescriptor = describe_entity_type(entity_class)
        self._normalise = get_normaliser(entity_class)

        self._parameters: Dict[str, ParameterDescriptor] = self._index(
            {p.name: p for p in self.descriptor.parameters}, "constructor parameters"
        )
        self._properties: Dict[str, str] = self._index(
            {name: name for name in self.descriptor.properties}, "properties"
        )
        self._methods: Dict[str, str] = self._index(self.descriptor.mutators, "methods")
        self._check_declared_members()
        self._date_kinds: Dict[str, str] = {
            self._normalise(name): kind for name, kind in self.descriptor.date_properties.items()
        }

        self._key_targets: Dict[_TargetsKey, KeyTargets] = {}
        self._binders: Dict[_BinderKey, Binder] = {}

    def _index(self, members: Mapping[str, Any], where: str) -> Dict[str, Any]:
        """Normalise member names, failing if two of them collide."""
        index: Dict[str, Any] = {}
        names: Dict[str, str] = {}
        for name, member in members.items():
            key = self._normalise(name)
            if key in names and names[key] != name:
                raise AmbiguousKeyError(self.entity_class, key, (names[key], name), where)
            names[key] = name
            index[key] = member
        return index

    def _check_declared_members(self) -> None:
        """Fail if members of different kinds have different names for the same key."""
        names: Dict[str, str] = {}
        for name in sorted(self.descriptor.bindable_names):
            key = self._normalise(name)
            if key in names:
                raise AmbiguousKeyError(
                    self.entity_class, key, (names[key], name), "declared members"
                )
            names[key] = name

    @classmethod
    def get(cls, entity_class: type) -> Introspector:
        """Return the introspector for ``entity_class`` without service substitution."""
        return cls.get_service(None, entity_class)

    @classmethod
    def get_service(cls, container: Optional[Container], service: type) -> Introspector:
        """
        Return the introspector for ``service`` as resolved by ``container``.

        If the container binds ``service`` to a subclass, the subclass is
        instantiated and entities report ``service`` as their service type.
        """
        entity_class = container.get_name(service) if container is not None else service
        key = (service, entity_class)
        introspector = cls._instances.get(key)
        if introspector is None:
            introspector = cls(service, entity_class)
            if UserConfig.cache_binders:
                introspector = cls._instances.setdefault(key, introspector)
        return introspector

    @classmethod
    def reset_cache(cls) -> None:
        """Forget every introspector, key target and binder built so far."""
        count = len(cls._instances)
        cls._instances.clear()
        describe_entity_type.cache_clear()
        log.info("Hydration cache reset (%d introspectors discarded)", count)

    def get_date_kind(self, key: str) -> Optional[str]:
        """Return "date" or "datetime" for a normalised date key, else None."""
        return self._date_kinds.get(key)

    def get_key_targets(
        self,
        keys: Iterable[str],
        provider_type: Optional[type] = None,
        context_type: Optional[type] = None,
    ) -> KeyTargets:
        """
        Return key targets for records with ``keys``.

        Raises
        ------
        AmbiguousKeyError
            If two of ``keys`` normalise to the same key.
        UnmappedKeyError
            If a key matches nothing and the class is not extensible.
        NotNullableParameterError
            If a not-nullable constructor parameter without a default is
            left unbound.
        """
        keys = tuple(keys)
        cache_key = (keys, provider_type, context_type)
        targets = self._key_targets.get(cache_key)
        if targets is None:
            targets = self._build_key_targets(keys, provider_type, context_type)
            if UserConfig.cache_binders:
                targets = self._key_targets.setdefault(cache_key, targets)
        return targets

    def _build_key_targets(
        self, keys: Tuple[str, ...], provider_type: Optional[type], context_type: Optional[type]
    ) -> KeyTargets:
        normalised: Dict[str, str] = {}
        for key in keys:
            normalised_key = self._normalise(key)
            if normalised_key in normalised:
                raise AmbiguousKeyError(
                    self.entity_class,
                    normalised_key,
                    (normalised[normalised_key], key),
                    "record keys",
                )
            normalised[normalised_key] = key

        parameters: Dict[str, int] = {}
        methods: Dict[str, str] = {}
        properties: Dict[str, str] = {}
        meta = []
        unmapped = []
        # "magic" method > constructor parameter > declared property > meta
        for key, record_key in normalised.items():
            if key in self._methods:
                methods[key] = self._methods[key]
            elif key in self._parameters:
                parameters[key] = self._parameters[key].index
            elif key in self._properties:
                properties[key] = self._properties[key]
            elif self.descriptor.extensible:
                meta.append(key)
            else:
                unmapped.append(record_key)
        if unmapped:
            raise UnmappedKeyError(self.entity_class, unmapped)

        bound = {self._parameters[key].index: key for key in parameters}
        injected: Dict[int, InjectedParameter] = {}
        for parameter in self.descriptor.parameters:
            if parameter.index in bound:
                continue
            source = _injection_source(parameter, provider_type, context_type)
            if source is None and not parameter.has_default:
                if not parameter.nullable:
                    raise NotNullableParameterError(self.entity_class, parameter.name)
                source = "null"
            if source is not None:
                injected[parameter.index] = InjectedParameter(name=parameter.name, source=source)

        custom_keys = {}
        if ID_KEY in normalised and ID_KEY not in meta:
            custom_keys[ID_KEY] = ID_KEY

        targets = KeyTargets(
            keys=normalised,
            parameters=parameters,
            pass_by_ref_parameters=frozenset(
                key for key in parameters if self._parameters[key].by_ref
            ),
            not_nullable_parameters=frozenset(
                key for key in parameters if not self._parameters[key].nullable
            ),
            methods=methods,
            properties=properties,
            meta_properties=tuple(meta),
            date_properties=frozenset(
                key for key in normalised if key in self._date_kinds and key not in meta
            ),
            custom_keys=custom_keys,
            injected_parameters=injected,
            last_parameter_index=max([*bound, *injected], default=-1),
        )
        if log.is_enabled_for("DEBUG"):
            log.debug(
                "Key targets for %s: %d parameter(s), %d method(s), %d property(ies), %d meta",
                self.entity_class.__qualname__,
                len(parameters),
                len(methods),
                len(properties),
                len(meta),
            )
        return targets

    def get_binder(
        self,
        keys: Iterable[str],
        provider_type: Optional[type] = None,
        context_type: Optional[type] = None,
        complete: bool = False,
    ) -> Binder:
        """Return a binder for records with exactly ``keys``."""
        keys = tuple(keys)
        cache_key = (keys, provider_type, context_type, complete)
        binder = self._binders.get(cache_key)
        if binder is None:
            targets = self.get_key_targets(keys, provider_type, context_type)
            binder = compile_binder(self, targets, complete=complete)
            if UserConfig.cache_binders:
                binder = self._binders.setdefault(cache_key, binder)
        return binder

    def get_create_from_signature_closure(
        self,
        keys: Iterable[str],
        provider_type: Optional[type] = None,
        context_type: Optional[type] = None,
        complete: bool = False,
    ) -> Binder:
        """
        Return a binder compiled once for ``keys`` and reused for every record.

        Records passed to it must have the same keys (PARTIAL conformity) and,
        if ``complete`` is set, in the same order (COMPLETE conformity).
        """
        return self.get_binder(keys, provider_type, context_type, complete=complete)

    def get_create_from_closure(self) -> Callable[..., Any]:
        """
        Return a factory that looks up (or builds) a binder for each record's own keys.
        """

        def create(record: Mapping[str, Any], provider: Any = None, context: Any = None) -> Any:
            binder = self.get_binder(
                tuple(record),
                None if provider is None else type(provider),
                None if context is None else type(context),
            )
            return binder(record, provider, context)

        return create


def _injection_source(
    parameter: ParameterDescriptor,
    provider_type: Optional[type],
    context_type: Optional[type],
) -> Optional[str]:
    """How an unbound parameter can be filled in by the engine, if at all."""
    annotation = parameter.annotation
    if not isinstance(annotation, type) or annotation is object:
        return None
    if (
        provider_type is not None
        and issubclass(annotation, ProviderInterface)
        and issubclass(provider_type, annotation)
    ):
        return "provider"
    if (
        context_type is not None
        and issubclass(annotation, ProviderContext)
        and issubclass(context_type, annotation)
    ):
        return "context"
    if issubclass(annotation, Container) and context_type is not None:
        return "container"
    return None
