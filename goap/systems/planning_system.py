"""Plan request handling and the end-of-tick planning pass."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from goap.world import GoapWorld


def request_plan_system(world: "GoapWorld") -> None:
    """Start evaluation rounds for every plan request sent this tick."""
    world.plan_queue.handle_requests(world.registry)


def create_plan_system(world: "GoapWorld") -> None:
    """Run the planner for actors whose evaluation round has finished."""
    world.plan_queue.process(world.registry, world.planner)
