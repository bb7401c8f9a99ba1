"""Actor construction and actor-driven plan requests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from goap.actor import ActorState

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from goap.world import GoapWorld

log = structlog.get_logger(__name__)


def build_new_actors_system(world: "GoapWorld") -> None:
    """Build every spawned actor and request its first plan."""
    for actor_id in world.registry.build_pending():
        world.plan_queue.send(actor_id)


def actor_state_system(world: "GoapWorld") -> None:
    """Turn actors left in ``REQUIRES_PLAN`` by actor systems into plan requests."""
    for actor in world.registry.query_actors():
        if actor.state is ActorState.REQUIRES_PLAN:
            log.debug("Actor requires a plan", actor_id=actor.id, actor=actor.name)
            world.plan_queue.send(actor.id)
