"""World state: a partial assignment of booleans to condition kinds."""

from __future__ import annotations

from typing import Dict, ItemsView, Iterator, Mapping, Self

from goap.condition import Condition


class WorldState:
    """Mapping from :class:`~goap.condition.Condition` to ``bool``.

    A missing key means "unconstrained", which is different from either
    boolean value.  :meth:`set` and :meth:`merge` are the only mutating
    operations; the planner works on copies so that every search node owns
    its own snapshot.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[Condition, bool] | None = None):
        self._values: Dict[Condition, bool] = (
            {kind: bool(value) for kind, value in values.items()} if values else {}
        )

    @classmethod
    def empty(cls) -> Self:
        return cls()

    def set(self, kind: Condition, value: bool) -> None:
        self._values[kind] = bool(value)

    def get(self, kind: Condition) -> bool | None:
        """Return the value for ``kind`` or ``None`` when unconstrained."""
        return self._values.get(kind)

    def merge(self, other: "WorldState") -> None:
        """Overwrite and add every entry of ``other`` into this state."""
        self._values.update(other._values)

    extend = merge

    def merged(self, other: "WorldState") -> "WorldState":
        """Return a copy of this state with ``other`` merged on top."""
        result = self.copy()
        result.merge(other)
        return result

    def copy(self) -> "WorldState":
        return WorldState(self._values)

    def mismatch_count(self, target: "WorldState") -> int:
        """Count keys of ``target`` that are absent here or hold another value."""
        count = 0
        for kind, wanted in target._values.items():
            if self._values.get(kind) != wanted:
                count += 1
        return count

    def matches(self, target: "WorldState") -> bool:
        """``True`` if every key of ``target`` is present here with the same value.

        Extra keys in ``self`` are ignored.
        """
        return self.mismatch_count(target) == 0

    def items(self) -> ItemsView[Condition, bool]:
        return self._values.items()

    def __contains__(self, kind: object) -> bool:
        return kind in self._values

    def __iter__(self) -> Iterator[Condition]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WorldState):
            return NotImplemented
        return self._values == other._values

    def __hash__(self) -> int:
        return hash(frozenset(self._values.items()))

    def __repr__(self) -> str:
        inner = ", ".join(f"{kind!r}: {value}" for kind, value in self._values.items())
        return f"WorldState({{{inner}}})"


__all__ = ["WorldState"]
