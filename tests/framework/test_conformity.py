import re

import pytest

from hydrator.framework.conformity import (
    ListConformity,
    effective_conformity,
    indexes_by_position,
    parse_conformity,
    reuses_binder,
)


def test_ordering():
    assert ListConformity.NONE < ListConformity.PARTIAL < ListConformity.COMPLETE
    assert [level.value for level in ListConformity] == [0, 1, 2]


def test_parse_conformity():
    assert parse_conformity("partial") == ListConformity.PARTIAL
    assert parse_conformity(" COMPLETE ") == ListConformity.COMPLETE
    assert parse_conformity(0) is ListConformity.NONE
    assert parse_conformity(ListConformity.PARTIAL) is ListConformity.PARTIAL

    with pytest.raises(
        ValueError,
        match=re.escape("Unknown conformity 'strict', must be one of NONE, PARTIAL, COMPLETE"),
    ):
        parse_conformity("strict")


def test_effective_conformity():
    assert effective_conformity(ListConformity.NONE) == ListConformity.NONE
    assert effective_conformity("NONE", ListConformity.COMPLETE) == ListConformity.COMPLETE
    assert effective_conformity(ListConformity.COMPLETE, ListConformity.PARTIAL) == (
        ListConformity.COMPLETE
    )
    assert effective_conformity(1, 0) == ListConformity.PARTIAL


def test_binder_policy():
    assert not reuses_binder(ListConformity.NONE)
    assert reuses_binder(ListConformity.PARTIAL)
    assert reuses_binder(ListConformity.COMPLETE)

    assert not indexes_by_position(ListConformity.PARTIAL)
    assert indexes_by_position(ListConformity.COMPLETE)
