"""
Compilation of key targets into binders.

A binder is a closure ``(record, provider, context) -> entity`` that applies
one :class:`KeyTargets` to a record. Every decision that depends only on the
key targets (which argument comes from which key, which keys go through a
``_set_<name>`` method, which values are dates) is taken once, here, so a
binder does no lookups in the entity's metadata while it runs.
"""

from __future__ import annotations

from datetime import date, datetime, tzinfo
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Callable, List, Mapping, Optional, Tuple
from zoneinfo import ZoneInfo

import pydantic as pd

from hydrator.exceptions import DateCoercionError, NotNullableParameterError
from hydrator.framework.introspection import ParameterDescriptor, Ref
from hydrator.framework.key_targets import KeyTargets
from hydrator.log import log
from hydrator.user_config import UserConfig

if TYPE_CHECKING:
    from hydrator.framework.introspector import Introspector

Binder = Callable[..., Any]
_Argument = Callable[[Tuple[Any, ...], Any, Any], Any]

# Marks a key that is part of the compiled signature but absent from a record
_MISSING = object()

_DATE_ADAPTERS = {
    "date": pd.TypeAdapter(date),
    "datetime": pd.TypeAdapter(datetime),
}


def coerce_date(value: Any, kind: str, default_tz: Optional[tzinfo] = None) -> Any:
    """
    Convert ``value`` to a ``date`` or ``datetime``.

    Strings in ISO 8601 format, Unix timestamps and existing ``date`` /
    ``datetime`` objects are accepted. Naive datetimes are given
    ``default_tz`` when it is set.

    Raises
    ------
    ValueError
        If the value cannot be converted.
    """
    if value is None:
        return None
    try:
        result = _DATE_ADAPTERS[kind].validate_python(value)
    except pd.ValidationError as error:
        raise ValueError("; ".join(err["msg"] for err in error.errors())) from error
    if isinstance(result, datetime) and result.tzinfo is None and default_tz is not None:
        result = result.replace(tzinfo=default_tz)
    return result


@lru_cache(maxsize=None)
def _zone(name: str) -> tzinfo:
    return ZoneInfo(name)


def _default_tz() -> Optional[tzinfo]:
    """The configured timezone for naive datetimes, read at conversion time."""
    name = UserConfig.default_timezone
    return _zone(name) if name else None


def compile_binder(
    introspector: Introspector, targets: KeyTargets, complete: bool = False
) -> Binder:
    """
    Compile ``targets`` into a binder for ``introspector``'s entity class.

    Parameters
    ----------
    introspector : Introspector
        Supplies the entity class, the requested service class and the
        entity's descriptor.
    targets : KeyTargets
        Key targets the binder applies.
    complete : bool
        Read record values by position (records must have exactly the
        compiled keys in the compiled order). A record with a different
        number of keys is read by key instead.

    Returns
    -------
    Binder
        ``binder(record, provider=None, context=None) -> entity``
    """
    entity_class = introspector.entity_class
    service = introspector.service
    descriptor = introspector.descriptor
    record_keys = targets.record_keys
    slot = {key: position for position, key in enumerate(targets.keys)}

    def date_converter(key: str) -> Optional[Callable[[Any], Any]]:
        if key not in targets.date_properties:
            return None
        kind = introspector.get_date_kind(key)
        record_key = targets.keys[key]

        def convert(value):
            try:
                return coerce_date(value, kind, _default_tz())
            except ValueError as error:
                raise DateCoercionError(entity_class, record_key, value, str(error)) from error

        return convert

    def bound_argument(parameter: ParameterDescriptor, key: str) -> _Argument:
        position = slot[key]
        record_key = targets.keys[key]
        convert = date_converter(key)
        not_nullable = key in targets.not_nullable_parameters
        by_ref = key in targets.pass_by_ref_parameters

        def argument(values, provider, context):
            value = values[position]
            if value is _MISSING:
                value = parameter.default if parameter.has_default else None
            elif convert is not None:
                value = convert(value)
            if value is None and not_nullable:
                raise NotNullableParameterError(entity_class, parameter.name, record_key)
            return Ref(value) if by_ref else value

        return argument

    def injected_argument(source: str) -> _Argument:
        if source == "provider":
            return lambda values, provider, context: provider
        if source == "context":
            return lambda values, provider, context: context
        if source == "container":
            return lambda values, provider, context: (
                None if context is None else context.get_container()
            )
        return lambda values, provider, context: None

    def default_argument(parameter: ParameterDescriptor) -> _Argument:
        default = parameter.default
        return lambda values, provider, context: default

    bound_by_index = {index: key for key, index in targets.parameters.items()}
    positional: List[_Argument] = []
    keyword: List[Tuple[str, _Argument]] = []
    for parameter in descriptor.parameters:
        if parameter.index > targets.last_parameter_index:
            break
        key = bound_by_index.get(parameter.index)
        if key is not None:
            argument = bound_argument(parameter, key)
        elif parameter.index in targets.injected_parameters:
            argument = injected_argument(targets.injected_parameters[parameter.index].source)
        elif parameter.keyword_only:
            # Python applies the default
            continue
        else:
            argument = default_argument(parameter)
        if parameter.keyword_only:
            keyword.append((parameter.name, argument))
        else:
            positional.append(argument)

    assignments: List[Tuple[int, Callable[[Any, Any], None]]] = []
    for key, record_key in targets.keys.items():
        convert = date_converter(key)
        if key in targets.methods:
            assign = _method_assignment(targets.methods[key], convert)
        elif key in targets.properties:
            assign = _property_assignment(targets.properties[key], convert)
        elif key in targets.meta_properties:
            assign = _meta_assignment(record_key)
        else:
            continue
        assignments.append((slot[key], assign))

    if complete:
        count = len(record_keys)

        def read(record: Mapping[str, Any]) -> Tuple[Any, ...]:
            values = tuple(record.values())
            if len(values) == count:
                return values
            return tuple(record.get(key, _MISSING) for key in record_keys)

    else:

        def read(record: Mapping[str, Any]) -> Tuple[Any, ...]:
            return tuple(record.get(key, _MISSING) for key in record_keys)

    attach = descriptor.providable
    substituted = service is not entity_class

    def binder(record: Mapping[str, Any], provider: Any = None, context: Any = None) -> Any:
        values = read(record)
        args = [argument(values, provider, context) for argument in positional]
        kwargs = {name: argument(values, provider, context) for name, argument in keyword}
        entity = entity_class(*args, **kwargs)
        for position, assign in assignments:
            value = values[position]
            if value is not _MISSING:
                assign(entity, value)
        if attach:
            if substituted:
                entity.set_service(service)
            if provider is not None:
                entity.set_provider(provider)
            if context is not None:
                entity.set_context(context)
        return entity

    if log.is_enabled_for("DEBUG"):
        log.debug(
            "Compiled %s binder for %s: %s",
            "positional" if complete else "keyed",
            entity_class.__qualname__,
            list(record_keys),
        )
    return binder


def _method_assignment(method: str, convert: Optional[Callable[[Any], Any]]):
    def assign(entity, value):
        getattr(entity, method)(value if convert is None else convert(value))

    return assign


def _property_assignment(name: str, convert: Optional[Callable[[Any], Any]]):
    def assign(entity, value):
        setattr(entity, name, value if convert is None else convert(value))

    return assign


def _meta_assignment(record_key: str):
    def assign(entity, value):
        entity.set_meta_property(record_key, value)

    return assign
