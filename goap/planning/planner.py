"""A* search over actions.

The start node carries the actor's current world state.  An edge leads from
node X to the node of action A when A's preconditions match X's state; the
new node's state is X's state with A's postconditions merged on top and the
edge weight is A's cost.  The heuristic is the number of goal conditions not
yet met, which is admissible as long as no action costs less than the
conditions it fixes.  Costs are validated to be non-negative when set.
"""

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass
from typing import Dict, Iterator, List, Sequence, Set, Tuple

import structlog

from goap.planning.plan_node import PlanCandidate, PlanNode
from goap.state import WorldState

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Plan:
    """Ordered action ids and their summed cost.  Empty when no path exists."""

    actions: Tuple[int, ...] = ()
    cost: int = 0

    def __bool__(self) -> bool:
        return bool(self.actions)

    def __len__(self) -> int:
        return len(self.actions)

    def __iter__(self) -> Iterator[int]:
        return iter(self.actions)


NO_PLAN = Plan()


def _reconstruct(came_from: Dict[int, int | None], last: int | None) -> Tuple[int, ...]:
    path: List[int] = []
    node_id = last
    while node_id is not None:
        path.append(node_id)
        node_id = came_from[node_id]
    path.reverse()
    return tuple(path)


def find_plan(
    start: WorldState,
    goal: WorldState,
    candidates: Sequence[PlanCandidate],
) -> Plan:
    """Return the cheapest action sequence turning ``start`` into ``goal``.

    Among open nodes with equal estimated total cost the one with the higher
    cost so far is expanded first, then the one discovered first.  Each
    action is expanded at most once.  If ``start`` already satisfies
    ``goal`` the plan is empty, the same as when no path exists.
    """
    counter = itertools.count()
    start_node = PlanNode.start(start)
    # Heap entries: (f, -g, insertion order, node)
    open_heap: List[Tuple[int, int, int, PlanNode]] = [
        (start_node.heuristic(goal), 0, next(counter), start_node)
    ]
    best_cost: Dict[int | None, int] = {None: 0}
    came_from: Dict[int, int | None] = {}
    closed: Set[int | None] = set()
    expanded = 0

    while open_heap:
        _, neg_cost, _, node = heapq.heappop(open_heap)
        cost_so_far = -neg_cost
        if node.action_id in closed or cost_so_far > best_cost[node.action_id]:
            continue

        if node.satisfies(goal):
            path = _reconstruct(came_from, node.action_id)
            log.debug(
                "Plan search finished",
                expanded=expanded,
                path=list(path),
                cost=cost_so_far,
            )
            return Plan(actions=path, cost=cost_so_far) if path else NO_PLAN

        closed.add(node.action_id)
        expanded += 1

        for successor, candidate in node.successors(
            c for c in candidates if c.action_id not in closed
        ):
            new_cost = cost_so_far + candidate.cost
            if new_cost < best_cost.get(successor.action_id, new_cost + 1):
                best_cost[successor.action_id] = new_cost
                came_from[successor.action_id] = node.action_id
                heapq.heappush(
                    open_heap,
                    (
                        new_cost + successor.heuristic(goal),
                        -new_cost,
                        next(counter),
                        successor,
                    ),
                )

    log.debug("Plan search exhausted", expanded=expanded, candidates=len(candidates))
    return NO_PLAN


__all__ = ["NO_PLAN", "Plan", "find_plan"]
