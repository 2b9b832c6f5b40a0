"""Closed sets of readiness-condition identifiers."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from enum import Enum
from typing import Any, TypeAlias

from kagiyama.errors import UnknownConditionError

Condition: TypeAlias = Enum | str


class ConditionSet:
    """Ordered, immutable set of condition names known up front.

    Build one from an ``Enum`` subclass (member names become condition names)
    or from an iterable of names. The empty set, ``ALWAYS_READY``, is vacuously
    satisfied.
    """

    __slots__ = ("_enum", "_names")

    def __init__(self, names: Iterable[str] = (), *, enum: type[Enum] | None = None) -> None:
        resolved: list[str] = []
        for raw in names:
            if not isinstance(raw, str):
                raise TypeError(f"condition names must be str, got {type(raw).__name__}")
            name = raw.strip()
            if name == "":
                raise ValueError("condition names must be non-empty")
            if name in resolved:
                raise ValueError(f"duplicate condition name: {name!r}")
            resolved.append(name)
        if enum is not None:
            members = [member.name for member in enum]
            if resolved != members:
                raise ValueError(
                    f"condition names {resolved!r} do not match members of {enum.__name__}: "
                    f"{members!r}"
                )
        self._names: tuple[str, ...] = tuple(resolved)
        self._enum = enum

    @classmethod
    def from_enum(cls, enum: type[Enum]) -> ConditionSet:
        return cls((member.name for member in enum), enum=enum)

    @classmethod
    def of(cls, *names: str) -> ConditionSet:
        return cls(names)

    @classmethod
    def coerce(cls, value: Any) -> ConditionSet:
        """Accept a ConditionSet, an Enum subclass, an iterable of names or ``None``."""
        if value is None:
            return ALWAYS_READY
        if isinstance(value, ConditionSet):
            return value
        if isinstance(value, type) and issubclass(value, Enum):
            return cls.from_enum(value)
        if isinstance(value, str):
            raise TypeError("pass an iterable of condition names, not a single string")
        return cls(value)

    @property
    def names(self) -> tuple[str, ...]:
        return self._names

    @property
    def is_always_ready(self) -> bool:
        return not self._names

    def key(self, condition: Condition) -> str:
        """Resolve an enum member or name to its condition name."""
        if isinstance(condition, Enum):
            if self._enum is not None and not isinstance(condition, self._enum):
                raise UnknownConditionError(condition)
            name = condition.name
        elif isinstance(condition, str):
            name = condition
        else:
            raise UnknownConditionError(condition)

        if name not in self._names:
            raise UnknownConditionError(condition)
        return name

    def __contains__(self, condition: object) -> bool:
        try:
            self.key(condition)  # type: ignore[arg-type]
        except UnknownConditionError:
            return False
        return True

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConditionSet):
            return NotImplemented
        return self._names == other._names and self._enum is other._enum

    def __hash__(self) -> int:
        return hash((self._names, self._enum))

    def __repr__(self) -> str:
        if self.is_always_ready:
            return "ConditionSet(ALWAYS_READY)"
        return f"ConditionSet({', '.join(self._names)})"


ALWAYS_READY = ConditionSet()
