"""Conformity levels for batches of records and the binder reuse policy."""

from enum import IntEnum
from typing import Optional, Union


class ListConformity(IntEnum):
    """
    Caller guarantee about the key shape of every record in a batch.

    NONE:
        Records may have arbitrarily different keys. Metadata and binder are
        looked up (and built if necessary) for each record's own keys.
    PARTIAL:
        Every record has the same keys, in any order. One binder is compiled
        from the first record and values are read by key.
    COMPLETE:
        Every record has the same keys in the same order. One binder is
        compiled from the first record and values are read by position.

    Records that break the guarantee are not detected.
    """

    NONE = 0
    PARTIAL = 1
    COMPLETE = 2


def parse_conformity(value: Union[ListConformity, int, str]) -> ListConformity:
    """Return the conformity named or numbered by ``value``."""
    if isinstance(value, ListConformity):
        return value
    if isinstance(value, str):
        try:
            return ListConformity[value.strip().upper()]
        except KeyError as error:
            raise ValueError(
                f"Unknown conformity '{value}', must be one of "
                f"{', '.join(level.name for level in ListConformity)}"
            ) from error
    return ListConformity(value)


def effective_conformity(
    requested: Union[ListConformity, int, str], context_conformity: Optional[int] = None
) -> ListConformity:
    """The stricter of the requested conformity and the context's own."""
    requested = parse_conformity(requested)
    if context_conformity is None:
        return requested
    return max(requested, parse_conformity(context_conformity))


def reuses_binder(conformity: ListConformity) -> bool:
    """Whether one binder compiled from the first record serves the whole batch."""
    return conformity in (ListConformity.PARTIAL, ListConformity.COMPLETE)


def indexes_by_position(conformity: ListConformity) -> bool:
    """Whether the binder may read record values by position instead of by key."""
    return conformity == ListConformity.COMPLETE
