"""Goal-Oriented Action Planning engine.

Actors own actions with declared pre/postconditions and costs.  When an
actor needs a plan, its actions are evaluated by integrator systems, an A*
search picks the cheapest sequence reaching the actor's goal, and the
engine then walks the actor through that sequence one action at a time.
"""

from __future__ import annotations

from goap.action import (
    Action,
    ActionBuilder,
    ActionPhase,
    ActionState,
    ActionTemplate,
    EvaluationResult,
)
from goap.actor import Actor, ActorBuilder, ActorState, ActorTemplate
from goap.condition import Condition
from goap.config import GoapConfig, load_config
from goap.errors import (
    ConfigError,
    GoapError,
    InvalidConditionError,
    InvalidCostError,
    UnknownActionError,
    UnknownActorError,
)
from goap.planning import Plan, PlanRequestQueue, find_plan
from goap.registry import GoapRegistry
from goap.state import WorldState
from goap.world import GoapStage, GoapWorld

__all__ = [
    "Action",
    "ActionBuilder",
    "ActionPhase",
    "ActionState",
    "ActionTemplate",
    "Actor",
    "ActorBuilder",
    "ActorState",
    "ActorTemplate",
    "Condition",
    "ConfigError",
    "EvaluationResult",
    "GoapConfig",
    "GoapError",
    "GoapRegistry",
    "GoapStage",
    "GoapWorld",
    "InvalidConditionError",
    "InvalidCostError",
    "Plan",
    "PlanRequestQueue",
    "UnknownActionError",
    "UnknownActorError",
    "WorldState",
    "find_plan",
    "load_config",
]
