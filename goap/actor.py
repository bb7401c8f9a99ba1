"""Actors: agents that own actions, a world state, a goal and a plan."""

from __future__ import annotations

import copy
from collections import deque
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Deque, List, Tuple

import structlog

from goap.action import ActionBuilder, ActionTemplate
from goap.condition import Condition, ensure_condition
from goap.state import WorldState

log = structlog.get_logger(__name__)


class ActorState(Enum):
    """Planning lifecycle of an actor.

    ``COMPLETED_PLAN``, ``NO_PLAN_AVAILABLE`` and ``FAILED_DURING_PLAN`` are
    resting states: actor systems observe them and decide whether to adjust
    state or goal and ask for a new plan, either by calling
    :meth:`Actor.request_plan` (sets ``REQUIRES_PLAN``) or through the
    world's plan queue directly.
    """

    REQUIRES_PLAN = auto()
    AWAITING_PLAN = auto()
    EXECUTING_PLAN = auto()
    COMPLETED_PLAN = auto()
    NO_PLAN_AVAILABLE = auto()
    FAILED_DURING_PLAN = auto()


@dataclass(eq=False)
class Actor:
    """Arena record for one actor.

    ``actions`` holds ids into the registry's action arena; the actor never
    holds the action records themselves.
    """

    id: int
    name: str
    actions: List[int]
    current_state: WorldState
    goal: WorldState
    current_path: Deque[int] = field(default_factory=deque)
    state: ActorState = ActorState.AWAITING_PLAN
    payload: Any = None
    is_active: bool = True

    @staticmethod
    def build(payload: Any = None, name: str | None = None) -> "ActorBuilder":
        return ActorBuilder(payload=payload, name=name)

    @property
    def current_action(self) -> int | None:
        """Id of the action currently at the head of the path."""
        return self.current_path[0] if self.current_path else None

    def update_current_state(self, kind: Condition, value: bool) -> None:
        self.current_state.set(ensure_condition(kind), value)

    def set_goal(self, kind: Condition, value: bool) -> None:
        self.goal.set(ensure_condition(kind), value)

    def clear_goal(self) -> None:
        self.goal = WorldState()

    def request_plan(self) -> None:
        """Ask the engine for a new plan during the next actor-transition pass.

        Ignored while the actor still has a path to execute.
        """
        self.transition(ActorState.REQUIRES_PLAN)

    def transition(self, new_state: ActorState) -> None:
        if new_state is not self.state:
            log.debug(
                "Actor state changed",
                actor_id=self.id,
                actor=self.name,
                old=self.state.name,
                new=new_state.name,
            )
        self.state = new_state

    def complete_action(self, postconditions: WorldState) -> int | None:
        """Merge a finished action's postconditions and advance the path.

        Returns the id of the next action to start, or ``None`` when the
        path is exhausted.
        """
        self.current_state.extend(postconditions)
        if self.current_path:
            self.current_path.popleft()
        return self.current_action


@dataclass(frozen=True)
class ActorTemplate:
    name: str
    payload: Any
    actions: Tuple[ActionTemplate, ...]
    initial_state: WorldState
    goal: WorldState


class ActorBuilder:
    """Fluent builder returned by :meth:`Actor.build`."""

    def __init__(self, payload: Any = None, name: str | None = None):
        if name is None:
            name = type(payload).__name__ if payload is not None else "Actor"
        self._name = name
        self._payload = payload
        self._actions: List[ActionTemplate] = []
        self._initial_state = WorldState()
        self._goal = WorldState()

    def with_action(self, action: ActionBuilder | ActionTemplate) -> "ActorBuilder":
        if isinstance(action, ActionBuilder):
            action = action.describe()
        if not isinstance(action, ActionTemplate):
            raise TypeError(f"Expected an ActionBuilder or ActionTemplate, got {action!r}")
        self._actions.append(action)
        return self

    def with_initial_condition(self, kind: Condition, value: bool) -> "ActorBuilder":
        self._initial_state.set(ensure_condition(kind), value)
        return self

    def with_goal(self, kind: Condition, value: bool) -> "ActorBuilder":
        self._goal.set(ensure_condition(kind), value)
        return self

    def describe(self) -> ActorTemplate:
        return ActorTemplate(
            name=self._name,
            payload=copy.deepcopy(self._payload),
            actions=tuple(self._actions),
            initial_state=self._initial_state.copy(),
            goal=self._goal.copy(),
        )


__all__ = [
    "Actor",
    "ActorBuilder",
    "ActorState",
    "ActorTemplate",
]
