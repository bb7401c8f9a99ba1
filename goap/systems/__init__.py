"""Engine systems run by :meth:`goap.world.GoapWorld.advance_tick`."""

from goap.systems.action_system import action_state_system
from goap.systems.actor_system import actor_state_system, build_new_actors_system
from goap.systems.planning_system import create_plan_system, request_plan_system

__all__ = [
    "action_state_system",
    "actor_state_system",
    "build_new_actors_system",
    "create_plan_system",
    "request_plan_system",
]
