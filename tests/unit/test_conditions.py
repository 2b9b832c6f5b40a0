"""Tests for condition sets."""

from __future__ import annotations

from enum import Enum

import pytest

from kagiyama import ALWAYS_READY, ConditionSet, UnknownConditionError


class Subsystems(Enum):
    DATABASE = "db"
    CACHE = "cache"


class Other(Enum):
    DATABASE = "db"


def test_from_enum_uses_member_names_in_declaration_order() -> None:
    conditions = ConditionSet.from_enum(Subsystems)

    assert conditions.names == ("DATABASE", "CACHE")
    assert len(conditions) == 2
    assert not conditions.is_always_ready


def test_always_ready_is_empty() -> None:
    assert ALWAYS_READY.is_always_ready
    assert list(ALWAYS_READY) == []
    assert ConditionSet.coerce(None) is ALWAYS_READY


def test_coerce_accepts_enum_type_names_and_instances() -> None:
    from_enum = ConditionSet.coerce(Subsystems)
    from_names = ConditionSet.coerce(["A", "B"])
    existing = ConditionSet.of("A")

    assert from_enum == ConditionSet.from_enum(Subsystems)
    assert from_names.names == ("A", "B")
    assert ConditionSet.coerce(existing) is existing


def test_coerce_rejects_bare_string() -> None:
    with pytest.raises(TypeError):
        ConditionSet.coerce("AB")


def test_duplicate_and_empty_names_are_rejected() -> None:
    with pytest.raises(ValueError, match="duplicate"):
        ConditionSet.of("A", "A")
    with pytest.raises(ValueError, match="non-empty"):
        ConditionSet.of("A", "  ")


def test_key_resolves_members_and_names() -> None:
    conditions = ConditionSet.from_enum(Subsystems)

    assert conditions.key(Subsystems.CACHE) == "CACHE"
    assert conditions.key("DATABASE") == "DATABASE"
    assert Subsystems.DATABASE in conditions
    assert "MISSING" not in conditions


def test_enum_must_match_names() -> None:
    with pytest.raises(ValueError, match="do not match"):
        ConditionSet(["DATABASE"], enum=Subsystems)
    with pytest.raises(ValueError, match="do not match"):
        ConditionSet(["CACHE", "DATABASE"], enum=Subsystems)

    conditions = ConditionSet(["DATABASE", "CACHE"], enum=Subsystems)
    assert conditions.key(Subsystems.CACHE) == "CACHE"


def test_key_rejects_member_of_foreign_enum() -> None:
    conditions = ConditionSet.from_enum(Subsystems)

    with pytest.raises(UnknownConditionError):
        conditions.key(Other.DATABASE)


def test_unknown_condition_error_is_key_error() -> None:
    with pytest.raises(KeyError) as exc_info:
        ALWAYS_READY.key("anything")

    assert "anything" in str(exc_info.value)
