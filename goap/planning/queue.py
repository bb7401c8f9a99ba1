"""Plan request queue with the per-actor evaluation barrier.

Requesting a plan does not run the planner.  It puts every action of the
actor into ``EVALUATE`` (or straight to ``EVALUATION_COMPLETE(SKIPPED)``
when its postconditions already hold) and queues the actor.  Actions still
in ``NOT_IN_PLAN`` are left for their controllers to roll back and join the
round once they are ``IDLE`` again.  Each :meth:`PlanRequestQueue.process`
pass plans for the queued actors whose actions have *all* finished
evaluating and leaves the rest queued for the next pass.

An actor with a non-empty path is executing a plan; requests for it are
rejected until the plan completes or fails.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, List, Sequence

import structlog

from goap.action import Action, ActionPhase, ActionState, EvaluationResult
from goap.actor import Actor, ActorState
from goap.planning.plan_node import PlanCandidate
from goap.planning.planner import Plan, find_plan
from goap.registry import GoapRegistry
from goap.state import WorldState

log = structlog.get_logger(__name__)

PlannerFn = Callable[[WorldState, WorldState, Sequence[PlanCandidate]], Plan]


@dataclass(frozen=True)
class PlanRequest:
    actor_id: int


@dataclass
class _PendingPlan:
    actor_id: int
    passes_waited: int = 0


class PlanRequestQueue:
    def __init__(self) -> None:
        # Requests sent but not yet turned into evaluation rounds.
        self._requests: Deque[PlanRequest] = deque()
        # Actors with an evaluation round in flight, in request order.
        self._pending: Dict[int, _PendingPlan] = {}

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, actor_id: object) -> bool:
        return actor_id in self._pending

    @property
    def pending_actor_ids(self) -> List[int]:
        return list(self._pending)

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------
    def send(self, actor_id: int) -> None:
        """Record a plan request, handled on the next :meth:`handle_requests`."""
        self._requests.append(PlanRequest(actor_id))

    def handle_requests(self, registry: GoapRegistry) -> List[int]:
        """Consume every sent request; return the actor ids that got queued."""
        queued = []
        while self._requests:
            event = self._requests.popleft()
            log.debug("Plan requested", actor_id=event.actor_id)
            if self.request(registry, event.actor_id):
                queued.append(event.actor_id)
        return queued

    def request(self, registry: GoapRegistry, actor_id: int) -> bool:
        """Start an evaluation round for ``actor_id``.

        Returns ``True`` if the actor was queued for planning.  Requests for
        an actor that is already queued are coalesced into the running round
        and requests for an actor that is executing a plan are rejected;
        both return ``False``.
        """
        actor = registry.get_actor(actor_id)
        if actor_id in self._pending:
            log.debug("Plan request coalesced", actor_id=actor_id)
            actor.transition(ActorState.AWAITING_PLAN)
            return False
        # A non-empty path is a live plan, whatever the actor state says.
        if actor.current_path:
            log.warning(
                "Plan request rejected while executing a plan",
                actor_id=actor_id,
                current_action=actor.current_action,
            )
            actor.transition(ActorState.EXECUTING_PLAN)
            return False

        actions = registry.actions_of(actor_id)
        needs_evaluation = False
        for action in actions:
            if action.state.phase is ActionPhase.NOT_IN_PLAN:
                # Evaluated once its controller has rolled it back to IDLE.
                needs_evaluation = True
            elif _begin_evaluation(actor, action):
                needs_evaluation = True

        if not needs_evaluation:
            self._drop(actor, actions)
            return False

        actor.current_path.clear()
        actor.transition(ActorState.AWAITING_PLAN)
        self._pending[actor_id] = _PendingPlan(actor_id)
        return True

    def _drop(self, actor: Actor, actions: List[Action]) -> None:
        for action in actions:
            action.transition(ActionState.IDLE)
        satisfied = actor.current_state.matches(actor.goal)
        actor.transition(
            ActorState.COMPLETED_PLAN if satisfied else ActorState.NO_PLAN_AVAILABLE
        )
        log.debug(
            "Plan request dropped, no action needs evaluation",
            actor_id=actor.id,
            goal_satisfied=satisfied,
        )

    def discard(self, actor_id: int) -> None:
        """Forget any request or round in flight for ``actor_id``."""
        self._pending.pop(actor_id, None)
        self._requests = deque(r for r in self._requests if r.actor_id != actor_id)

    # ------------------------------------------------------------------
    # Barrier and planning
    # ------------------------------------------------------------------
    def process(
        self, registry: GoapRegistry, planner: PlannerFn = find_plan
    ) -> List[int]:
        """Plan for every queued actor whose evaluation round is complete.

        Returns the ids of the actors that were planned for this pass.
        """
        planned = []
        for actor_id, pending in list(self._pending.items()):
            if actor_id not in registry.actors:
                log.debug("Dropping plan round for despawned actor", actor_id=actor_id)
                del self._pending[actor_id]
                continue

            actor = registry.get_actor(actor_id)
            actions = registry.actions_of(actor_id)
            for action in actions:
                if action.state.phase is ActionPhase.IDLE:
                    _begin_evaluation(actor, action)
            waiting = [a.id for a in actions if not a.state.is_evaluation_complete]
            if waiting:
                pending.passes_waited += 1
                log.debug(
                    "Waiting for action evaluation",
                    actor_id=actor_id,
                    waiting=waiting,
                    passes_waited=pending.passes_waited,
                )
                continue

            del self._pending[actor_id]
            candidates = [
                PlanCandidate(a.id, a.preconditions, a.postconditions, a.cost)
                for a in actions
                if a.state.result is EvaluationResult.SUCCESS
            ]
            plan = planner(actor.current_state, actor.goal, candidates)
            apply_plan(registry, actor, actions, plan)
            planned.append(actor_id)
        return planned


def _begin_evaluation(actor: Actor, action: Action) -> bool:
    """Move ``action`` into this round; ``True`` if it must be evaluated."""
    if actor.current_state.matches(action.postconditions):
        action.transition(ActionState.evaluation_complete(EvaluationResult.SKIPPED))
        return False
    action.transition(ActionState.EVALUATE)
    return True


def apply_plan(
    registry: GoapRegistry, actor: Actor, actions: List[Action], plan: Plan
) -> None:
    """Install ``plan`` as the actor's path and move every action on."""
    in_path = set(plan.actions)
    for action in actions:
        if action.id not in in_path:
            evaluated = action.state.result is not EvaluationResult.SKIPPED
            action.transition(ActionState.not_in_plan(evaluated))

    for index, action_id in enumerate(plan.actions):
        registry.get_action(action_id).transition(
            ActionState.STARTED if index == 0 else ActionState.WAITING_TO_START
        )

    actor.current_path = deque(plan.actions)
    if plan:
        actor.transition(ActorState.EXECUTING_PLAN)
        log.info(
            "Plan created",
            actor_id=actor.id,
            actor=actor.name,
            path=[registry.get_action(aid).name for aid in plan.actions],
            cost=plan.cost,
        )
    elif actor.current_state.matches(actor.goal):
        actor.transition(ActorState.COMPLETED_PLAN)
        log.info("Goal already satisfied", actor_id=actor.id, actor=actor.name)
    else:
        actor.transition(ActorState.NO_PLAN_AVAILABLE)
        log.info(
            "No plan available",
            actor_id=actor.id,
            actor=actor.name,
            state=repr(actor.current_state),
            goal=repr(actor.goal),
        )


__all__ = ["PlanRequest", "PlanRequestQueue", "apply_plan"]
