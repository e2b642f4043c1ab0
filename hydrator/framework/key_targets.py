"""How to create an entity from records with a given set of keys."""

from typing import Dict, FrozenSet, Optional, Tuple

import pydantic as pd
from typing_extensions import Literal

ID_KEY = "id"

InjectionSource = Literal["provider", "context", "container", "null"]


class InjectedParameter(pd.BaseModel):
    """Unbound constructor parameter filled in by the engine."""

    model_config = pd.ConfigDict(frozen=True)

    name: str
    source: InjectionSource


class KeyTargets(pd.BaseModel):
    """
    Immutable mapping of record keys to the members of an entity class.

    Every map is keyed by the *normalised* record key; ``keys`` maps each
    normalised key back to the record key it was derived from, in record
    order.

    Attributes:
        keys: Normalised key => record key.
        parameters: Key => constructor parameter index.
        pass_by_ref_parameters: Keys bound to pass-by-reference parameters.
        not_nullable_parameters: Keys bound to parameters that reject None.
        methods: Key => ``_set_<name>`` method.
        properties: Key => declared property name.
        meta_properties: Keys stored in the meta slot of an extensible entity.
        date_properties: Keys whose values are coerced to date/time values.
        custom_keys: Reserved identifier (e.g. ``ID_KEY``) => key.
        injected_parameters: Parameter index => how the engine fills it in.
        last_parameter_index: Index of the last constructor parameter that
            must be passed, or -1.
    """

    model_config = pd.ConfigDict(frozen=True)

    keys: Dict[str, str]
    parameters: Dict[str, int] = pd.Field(default_factory=dict)
    pass_by_ref_parameters: FrozenSet[str] = frozenset()
    not_nullable_parameters: FrozenSet[str] = frozenset()
    methods: Dict[str, str] = pd.Field(default_factory=dict)
    properties: Dict[str, str] = pd.Field(default_factory=dict)
    meta_properties: Tuple[str, ...] = ()
    date_properties: FrozenSet[str] = frozenset()
    custom_keys: Dict[str, str] = pd.Field(default_factory=dict)
    injected_parameters: Dict[int, InjectedParameter] = pd.Field(default_factory=dict)
    last_parameter_index: int = -1

    @pd.model_validator(mode="after")
    def _check_disjoint(self):
        claimed = [*self.parameters, *self.methods, *self.properties, *self.meta_properties]
        if len(claimed) != len(set(claimed)):
            raise ValueError("[Internal] A key cannot have more than one target.")
        if not set(claimed) <= set(self.keys):
            raise ValueError("[Internal] Every target key must come from the record.")
        return self

    @property
    def record_keys(self) -> Tuple[str, ...]:
        """Record keys in the order they were supplied."""
        return tuple(self.keys.values())

    def get_custom_key(self, identifier: str) -> Optional[str]:
        """Return the record key reserved for ``identifier``, if the record has one."""
        key = self.custom_keys.get(identifier)
        if key is None:
            return None
        return self.keys[key]
