"""
Discovery of the hydratable surface of an entity class.

:func:`describe_entity_type` inspects a class once and returns an
immutable :class:`EntityDescriptor` listing its constructor parameters,
writable properties, ``_set_<name>`` / ``_get_<name>`` methods, date/time
members and whether it accepts undeclared keys.
"""

from __future__ import annotations

import inspect
import re
import types
from datetime import date, datetime
from functools import lru_cache
from typing import (
    Any,
    ClassVar,
    Dict,
    FrozenSet,
    Generic,
    Optional,
    Tuple,
    TypeVar,
    Union,
    get_args,
    get_origin,
)

import pydantic as pd
from typing_extensions import Literal

from hydrator.framework.extensible import Extensible, HasReadableProperties
from hydrator.framework.normaliser import Normalisable
from hydrator.framework.providable import Providable

T = TypeVar("T")

_MUTATOR = re.compile(r"^_set_([A-Za-z0-9]\w*)$")
_ACCESSOR = re.compile(r"^_get_([A-Za-z0-9]\w*)$")
_UNION_TYPES = (Union, getattr(types, "UnionType", Union))
_FRAMEWORK_CLASSES = (object, Providable, Extensible, HasReadableProperties, Normalisable)

DateKind = Literal["date", "datetime"]


class Ref(Generic[T]):
    """
    Mutable cell passed to pass-by-reference constructor parameters.

    A constructor parameter annotated ``Ref`` or ``Ref[...]`` receives the
    record's value wrapped in a new cell, which the constructor may read
    and overwrite.
    """

    __slots__ = ("value",)

    def __init__(self, value: Optional[T] = None):
        self.value = value

    def __repr__(self) -> str:
        return f"Ref({self.value!r})"


class ParameterDescriptor(pd.BaseModel):
    """One constructor parameter."""

    model_config = pd.ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    index: int
    keyword_only: bool = False
    nullable: bool = True
    has_default: bool = False
    default: Any = None
    by_ref: bool = False
    date_kind: Optional[DateKind] = None
    annotation: Any = None


class EntityDescriptor(pd.BaseModel):
    """Everything hydration needs to know about an entity class."""

    model_config = pd.ConfigDict(frozen=True, arbitrary_types_allowed=True)

    entity_class: Any
    parameters: Tuple[ParameterDescriptor, ...] = ()
    properties: Tuple[str, ...] = ()
    mutators: Dict[str, str] = pd.Field(default_factory=dict)
    accessors: Dict[str, str] = pd.Field(default_factory=dict)
    date_properties: Dict[str, DateKind] = pd.Field(default_factory=dict)
    extensible: bool = False
    providable: bool = False

    @property
    def bindable_names(self) -> FrozenSet[str]:
        """Names of every member a record key can be bound to."""
        return frozenset(
            [p.name for p in self.parameters] + list(self.properties) + list(self.mutators)
        )


def _strip_optional(annotation: Any) -> Tuple[Any, bool]:
    """Return (annotation without None, whether None was allowed)."""
    if annotation is inspect.Parameter.empty or annotation is Any:
        return annotation, True
    if annotation is None or annotation is type(None):
        return annotation, True
    if get_origin(annotation) in _UNION_TYPES:
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        allows_none = len(args) != len(get_args(annotation))
        if len(args) == 1:
            return args[0], allows_none
        return annotation, allows_none or any(arg is Any for arg in args)
    if isinstance(annotation, str):
        allows_none = "Optional[" in annotation or "None" in annotation or annotation == "Any"
        return annotation, allows_none
    return annotation, False


def _is_ref(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation == "Ref" or annotation.startswith("Ref[")
    return annotation is Ref or get_origin(annotation) is Ref


def _date_kind(annotation: Any) -> Optional[DateKind]:
    annotation, _ = _strip_optional(annotation)
    if isinstance(annotation, type):
        if issubclass(annotation, datetime):
            return "datetime"
        if issubclass(annotation, date):
            return "date"
    elif isinstance(annotation, str):
        if annotation.replace("Optional[", "").startswith("datetime"):
            return "datetime"
        if annotation.replace("Optional[", "").startswith("date"):
            return "date"
    return None


def _is_class_var(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation.startswith(("ClassVar", "typing.ClassVar"))
    return annotation is ClassVar or get_origin(annotation) is ClassVar


def _signature(entity_class: type) -> Optional[inspect.Signature]:
    try:
        return inspect.signature(entity_class, eval_str=True)
    except NameError:
        # Forward references that cannot be resolved yet are kept as strings
        return inspect.signature(entity_class)
    except (TypeError, ValueError):
        return None


def _class_annotations(klass: type) -> Dict[str, Any]:
    try:
        return inspect.get_annotations(klass, eval_str=True)
    except NameError:
        return inspect.get_annotations(klass)


def _describe_parameters(entity_class: type) -> Tuple[ParameterDescriptor, ...]:
    signature = _signature(entity_class)
    if signature is None:
        return ()
    parameters = []
    for index, parameter in enumerate(signature.parameters.values()):
        if parameter.kind in (parameter.VAR_POSITIONAL, parameter.VAR_KEYWORD):
            continue
        if parameter.kind == parameter.POSITIONAL_ONLY:
            keyword_only = False
        else:
            keyword_only = parameter.kind == parameter.KEYWORD_ONLY
        annotation = parameter.annotation
        by_ref = _is_ref(annotation)
        if by_ref and get_args(annotation):
            annotation = get_args(annotation)[0]
        _, nullable = _strip_optional(annotation)
        has_default = parameter.default is not parameter.empty
        parameters.append(
            ParameterDescriptor(
                name=parameter.name,
                index=index,
                keyword_only=keyword_only,
                nullable=nullable,
                has_default=has_default,
                default=parameter.default if has_default else None,
                by_ref=by_ref,
                date_kind=_date_kind(annotation),
                annotation=None if annotation is parameter.empty else annotation,
            )
        )
    return tuple(parameters)


def _describe_members(entity_class: type):
    properties: Dict[str, None] = {}
    dates: Dict[str, DateKind] = {}
    for klass in reversed(entity_class.__mro__):
        if klass in _FRAMEWORK_CLASSES:
            continue
        for name, annotation in _class_annotations(klass).items():
            if name.startswith("_") or _is_class_var(annotation):
                continue
            properties[name] = None
            kind = _date_kind(annotation)
            if kind is not None:
                dates[name] = kind
        for name, attribute in vars(klass).items():
            if name.startswith("_"):
                continue
            if isinstance(attribute, property):
                if attribute.fset is not None:
                    properties[name] = None
                else:
                    properties.pop(name, None)

    mutators: Dict[str, str] = {}
    accessors: Dict[str, str] = {}
    for name in dir(entity_class):
        for pattern, found in ((_MUTATOR, mutators), (_ACCESSOR, accessors)):
            match = pattern.match(name)
            if match and callable(getattr(entity_class, name, None)):
                found[match.group(1)] = name

    declared_dates = getattr(entity_class, "date_properties", None)
    if callable(declared_dates):
        for name in declared_dates():
            dates.setdefault(name, "datetime")

    return tuple(properties), mutators, accessors, dates


@lru_cache(maxsize=None)
def describe_entity_type(entity_class: type) -> EntityDescriptor:
    """
    Describe the hydratable surface of ``entity_class``.

    The result is computed once per class and cached for the lifetime of the
    process.

    Parameters
    ----------
    entity_class : type
        Class to describe.

    Returns
    -------
    EntityDescriptor
        Constructor parameters (in signature order), writable properties,
        ``_set_<name>`` mutators and ``_get_<name>`` accessors keyed by
        ``<name>``, date/time members, and capability flags.
    """
    parameters = _describe_parameters(entity_class)
    properties, mutators, accessors, dates = _describe_members(entity_class)
    for parameter in parameters:
        if parameter.date_kind is not None:
            dates.setdefault(parameter.name, parameter.date_kind)
    return EntityDescriptor(
        entity_class=entity_class,
        parameters=parameters,
        properties=properties,
        mutators=mutators,
        accessors=accessors,
        date_properties=dates,
        extensible=issubclass(entity_class, Extensible),
        providable=issubclass(entity_class, Providable),
    )
