"""Search nodes for the action planner."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

from goap.state import WorldState


@dataclass(frozen=True)
class PlanCandidate:
    """An action that passed evaluation, as seen by the planner."""

    action_id: int
    preconditions: WorldState
    postconditions: WorldState
    cost: int


@dataclass(frozen=True)
class PlanNode:
    """A vertex of the implicit plan graph.

    ``action_id`` is ``None`` for the start node.  Equality and hashing use
    ``action_id`` only, so every action is a single vertex no matter which
    path reached it; ``state`` is the world state after applying the path
    that currently leads here.
    """

    action_id: int | None
    state: WorldState = field(compare=False, hash=False)

    @classmethod
    def start(cls, state: WorldState) -> "PlanNode":
        return cls(None, state.copy())

    @property
    def is_start(self) -> bool:
        return self.action_id is None

    def successor(self, candidate: PlanCandidate) -> "PlanNode":
        return PlanNode(candidate.action_id, self.state.merged(candidate.postconditions))

    def successors(
        self, candidates: Iterable[PlanCandidate]
    ) -> List[Tuple["PlanNode", PlanCandidate]]:
        """Return the nodes reachable from here, paired with the edge's candidate."""
        return [
            (self.successor(candidate), candidate)
            for candidate in candidates
            if self.state.matches(candidate.preconditions)
        ]

    def heuristic(self, goal: WorldState) -> int:
        return self.state.mismatch_count(goal)

    def satisfies(self, goal: WorldState) -> bool:
        return self.state.matches(goal)
