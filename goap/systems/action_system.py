"""Reacts to actions that integrator systems marked complete or failed.

Runs after the user ``ACTIONS`` stage.  A ``COMPLETE`` action goes back to
``IDLE``, its postconditions are merged into the actor's world state and
the next action on the path is started.  A ``FAILURE`` goes back to
``IDLE`` and leaves the actor in ``FAILED_DURING_PLAN`` for actor systems
to deal with.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from goap.action import Action, ActionPhase, ActionState
from goap.actor import ActorState
from goap.registry import GoapRegistry

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from goap.world import GoapWorld

log = structlog.get_logger(__name__)


def _complete_action(registry: GoapRegistry, action: Action) -> None:
    action.transition(ActionState.IDLE)
    actor = registry.get_actor(action.actor_id)

    if actor.current_action != action.id:
        # Not part of the running plan; still honour the declared effect.
        log.warning(
            "Completed action is not the head of the actor's path",
            action_id=action.id,
            actor_id=actor.id,
            head=actor.current_action,
        )
        actor.current_state.extend(action.postconditions)
        return

    next_action_id = actor.complete_action(action.postconditions)
    log.debug(
        "Action completed",
        action_id=action.id,
        action=action.name,
        actor_id=actor.id,
        next_action_id=next_action_id,
    )
    if next_action_id is not None:
        registry.get_action(next_action_id).transition(ActionState.STARTED)
        return

    actor.transition(ActorState.COMPLETED_PLAN)
    log.info(
        "Plan completed",
        actor_id=actor.id,
        actor=actor.name,
        state=repr(actor.current_state),
    )


def _fail_action(registry: GoapRegistry, action: Action) -> None:
    action.transition(ActionState.IDLE)
    actor = registry.get_actor(action.actor_id)

    abandoned = [aid for aid in actor.current_path if aid != action.id]
    for action_id in abandoned:
        registry.get_action(action_id).transition(ActionState.not_in_plan(True))
    actor.current_path.clear()
    actor.transition(ActorState.FAILED_DURING_PLAN)
    log.info(
        "Action failed during plan",
        action_id=action.id,
        action=action.name,
        actor_id=actor.id,
        abandoned=abandoned,
    )


def action_state_system(world: "GoapWorld") -> None:
    """Handle every action currently in ``COMPLETE`` or ``FAILURE``."""
    registry = world.registry
    for action in registry.query_actions():
        phase = action.state.phase
        if phase is ActionPhase.COMPLETE:
            _complete_action(registry, action)
        elif phase is ActionPhase.FAILURE:
            _fail_action(registry, action)
