"""Actions and the action lifecycle state machine.

An :class:`Action` is one unit of work an actor may include in a plan.  The
engine only reasons about its declared pre/postconditions and cost; what
the action actually *does* is implemented by integrator systems that watch
``action.state`` and move it along:

``IDLE`` -> ``EVALUATE`` -> ``EVALUATION_COMPLETE(result)``
    The engine asks for evaluation when the owning actor requests a plan.
    The integrator updates the cost and reports ``SUCCESS`` or ``FAILURE``.
    Actions whose postconditions already hold are resolved to ``SKIPPED``
    by the engine without being evaluated.

``STARTED`` / ``WAITING_TO_START`` / ``NOT_IN_PLAN(evaluated)``
    Set by the engine after planning.  ``NOT_IN_PLAN`` asks the integrator
    to undo anything done speculatively during evaluation and return the
    action to ``IDLE``.

``STARTED`` -> ``EXECUTING`` -> ``COMPLETE`` | ``FAILURE``
    Driven by the integrator.  The engine reacts to ``COMPLETE`` and
    ``FAILURE`` by returning the action to ``IDLE`` and updating the actor.
"""

from __future__ import annotations

import copy
import numbers
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, ClassVar

import structlog

from goap.condition import Condition, ensure_condition
from goap.errors import InvalidCostError
from goap.state import WorldState

log = structlog.get_logger(__name__)

DEFAULT_ACTION_COST = 1


class ActionPhase(Enum):
    IDLE = auto()
    EVALUATE = auto()
    EVALUATION_COMPLETE = auto()
    NOT_IN_PLAN = auto()
    STARTED = auto()
    WAITING_TO_START = auto()
    EXECUTING = auto()
    COMPLETE = auto()
    FAILURE = auto()


class EvaluationResult(Enum):
    """Outcome an action reports at the end of ``EVALUATE``."""

    SUCCESS = auto()
    FAILURE = auto()
    SKIPPED = auto()


@dataclass(frozen=True)
class ActionState:
    """Lifecycle state of an action.

    ``result`` is only meaningful for ``EVALUATION_COMPLETE`` and
    ``evaluated`` only for ``NOT_IN_PLAN``.  Payload-free states are
    available as class attributes (``ActionState.IDLE`` ...).
    """

    phase: ActionPhase
    result: EvaluationResult | None = None
    evaluated: bool = False

    IDLE: ClassVar["ActionState"]
    EVALUATE: ClassVar["ActionState"]
    STARTED: ClassVar["ActionState"]
    WAITING_TO_START: ClassVar["ActionState"]
    EXECUTING: ClassVar["ActionState"]
    COMPLETE: ClassVar["ActionState"]
    FAILURE: ClassVar["ActionState"]

    @classmethod
    def evaluation_complete(cls, result: EvaluationResult) -> "ActionState":
        return cls(ActionPhase.EVALUATION_COMPLETE, result=result)

    @classmethod
    def not_in_plan(cls, evaluated: bool) -> "ActionState":
        return cls(ActionPhase.NOT_IN_PLAN, evaluated=evaluated)

    @property
    def is_evaluation_complete(self) -> bool:
        return self.phase is ActionPhase.EVALUATION_COMPLETE

    def __str__(self) -> str:
        if self.phase is ActionPhase.EVALUATION_COMPLETE and self.result is not None:
            return f"{self.phase.name}({self.result.name})"
        if self.phase is ActionPhase.NOT_IN_PLAN:
            return f"{self.phase.name}(evaluated={self.evaluated})"
        return self.phase.name


ActionState.IDLE = ActionState(ActionPhase.IDLE)
ActionState.EVALUATE = ActionState(ActionPhase.EVALUATE)
ActionState.STARTED = ActionState(ActionPhase.STARTED)
ActionState.WAITING_TO_START = ActionState(ActionPhase.WAITING_TO_START)
ActionState.EXECUTING = ActionState(ActionPhase.EXECUTING)
ActionState.COMPLETE = ActionState(ActionPhase.COMPLETE)
ActionState.FAILURE = ActionState(ActionPhase.FAILURE)


def validate_cost(cost: Any) -> int:
    """Return ``cost`` as ``int``; reject negatives and non-integers."""
    if isinstance(cost, bool) or not isinstance(cost, numbers.Integral) or cost < 0:
        log.error("Rejected action cost", cost=repr(cost))
        raise InvalidCostError(cost)
    return int(cost)


@dataclass(eq=False)
class Action:
    """Arena record for one action owned by an actor."""

    id: int
    actor_id: int
    name: str
    preconditions: WorldState
    postconditions: WorldState
    cost: int = DEFAULT_ACTION_COST
    state: ActionState = ActionState.IDLE
    payload: Any = None

    @staticmethod
    def build(payload: Any = None, name: str | None = None) -> "ActionBuilder":
        """Start describing an action.

        Every :class:`Action` built from this description gets its own deep
        copy of ``payload``; integrator systems use it as a behaviour tag and
        per-action scratch space.
        """
        return ActionBuilder(payload=payload, name=name)

    def update_cost(self, new_cost: int) -> None:
        self.cost = validate_cost(new_cost)

    def transition(self, new_state: ActionState) -> None:
        if new_state != self.state:
            log.debug(
                "Action state changed",
                action_id=self.id,
                actor_id=self.actor_id,
                action=self.name,
                old=str(self.state),
                new=str(new_state),
            )
        self.state = new_state


@dataclass(frozen=True)
class ActionTemplate:
    """Plain description of an action, independent of any actor."""

    name: str
    payload: Any
    preconditions: WorldState = field(default_factory=WorldState)
    postconditions: WorldState = field(default_factory=WorldState)
    cost: int | None = None

    def instantiate(
        self, action_id: int, actor_id: int, default_cost: int = DEFAULT_ACTION_COST
    ) -> Action:
        """Create a fresh :class:`Action` record bound to ``actor_id``."""
        return Action(
            id=action_id,
            actor_id=actor_id,
            name=self.name,
            preconditions=self.preconditions.copy(),
            postconditions=self.postconditions.copy(),
            cost=default_cost if self.cost is None else self.cost,
            payload=copy.deepcopy(self.payload),
        )


class ActionBuilder:
    """Fluent builder returned by :meth:`Action.build`."""

    def __init__(self, payload: Any = None, name: str | None = None):
        if name is None:
            name = type(payload).__name__ if payload is not None else "Action"
        self._name = name
        self._payload = payload
        self._preconditions = WorldState()
        self._postconditions = WorldState()
        self._cost: int | None = None

    def with_precondition(self, kind: Condition, value: bool) -> "ActionBuilder":
        self._preconditions.set(ensure_condition(kind), value)
        return self

    def with_postcondition(self, kind: Condition, value: bool) -> "ActionBuilder":
        self._postconditions.set(ensure_condition(kind), value)
        return self

    def with_cost(self, cost: int) -> "ActionBuilder":
        self._cost = validate_cost(cost)
        return self

    def describe(self) -> ActionTemplate:
        return ActionTemplate(
            name=self._name,
            payload=self._payload,
            preconditions=self._preconditions.copy(),
            postconditions=self._postconditions.copy(),
            cost=self._cost,
        )


__all__ = [
    "Action",
    "ActionBuilder",
    "ActionPhase",
    "ActionState",
    "ActionTemplate",
    "EvaluationResult",
    "DEFAULT_ACTION_COST",
    "validate_cost",
]
