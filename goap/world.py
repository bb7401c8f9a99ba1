"""Central container for engine state and the staged tick.

:meth:`GoapWorld.advance_tick` runs one pass in this order:

1. build newly spawned actors and request their first plan;
2. user systems registered for :attr:`GoapStage.ACTIONS`;
3. engine handling of completed and failed actions;
4. user systems registered for :attr:`GoapStage.ACTORS`;
5. engine handling of actor plan requests, then the planning pass.

The evaluation barrier and the replan cycle rely on this order.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import Any, Callable, Dict, List, Tuple

import structlog

from goap.actor import ActorBuilder, ActorTemplate
from goap.config import GoapConfig
from goap.planning.planner import find_plan
from goap.planning.queue import PlannerFn, PlanRequestQueue
from goap.registry import GoapRegistry
from goap.systems import (
    action_state_system,
    actor_state_system,
    build_new_actors_system,
    create_plan_system,
    request_plan_system,
)

log = structlog.get_logger(__name__)


class GoapStage(Enum):
    """Stages integrators register their own systems into."""

    ACTIONS = auto()
    ACTORS = auto()


System = Callable[["GoapWorld"], None]


class GoapWorld:
    def __init__(
        self,
        config: GoapConfig | None = None,
        planner: PlannerFn = find_plan,
    ) -> None:
        self.config = config or GoapConfig()
        self.registry = GoapRegistry(default_action_cost=self.config.default_action_cost)
        self.plan_queue = PlanRequestQueue()
        self.planner = planner
        self.tick_count = 0
        # Free-form storage for integrator systems (environment, lookups ...).
        self.resources: Dict[str, Any] = {}
        self._systems: Dict[GoapStage, List[System]] = {stage: [] for stage in GoapStage}

    def add_system(self, stage: GoapStage, system: System) -> None:
        self._systems[stage].append(system)
        log.debug("System registered", stage=stage.name, system=_system_name(system))

    def systems(self, stage: GoapStage) -> Tuple[System, ...]:
        return tuple(self._systems[stage])

    def spawn_actor(self, builder: ActorBuilder | ActorTemplate) -> int:
        return self.registry.spawn_actor(builder)

    def despawn_actor(self, actor_id: int) -> None:
        self.plan_queue.discard(actor_id)
        self.registry.despawn_actor(actor_id)

    def request_plan(self, actor_id: int) -> None:
        """Send a plan request, handled during this tick's final stage."""
        self.plan_queue.send(actor_id)

    def advance_tick(self) -> None:
        self.tick_count += 1
        log.debug("Tick started", tick=self.tick_count)

        build_new_actors_system(self)
        self._run_stage(GoapStage.ACTIONS)
        action_state_system(self)
        self._run_stage(GoapStage.ACTORS)
        actor_state_system(self)
        request_plan_system(self)
        create_plan_system(self)

    def _run_stage(self, stage: GoapStage) -> None:
        for system in self._systems[stage]:
            try:
                system(self)
            except Exception as e:
                log.error(
                    "Exception in user system",
                    stage=stage.name,
                    system=_system_name(system),
                    tick=self.tick_count,
                    error=str(e),
                    exc_info=True,
                )
                raise


def _system_name(system: System) -> str:
    return getattr(system, "__qualname__", None) or repr(system)


__all__ = ["GoapStage", "GoapWorld", "System"]
