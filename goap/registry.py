"""Arenas holding every actor and action record.

Actors and actions refer to each other by integer id only.  All engine
transitions go through :class:`GoapRegistry` lookups, so integrator code can
attach its own data to an action or actor through ``payload`` without the
engine ever sharing a mutable reference between records.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Self, Type

import structlog

from goap.action import DEFAULT_ACTION_COST, Action, validate_cost
from goap.actor import Actor, ActorBuilder, ActorTemplate
from goap.errors import UnknownActionError, UnknownActorError

log = structlog.get_logger(__name__)


class GoapRegistry:
    def __init__(self: Self, default_action_cost: int = DEFAULT_ACTION_COST):
        log.info("Initializing GoapRegistry", default_action_cost=default_action_cost)
        self.actors: Dict[int, Actor] = {}
        self.actions: Dict[int, Action] = {}
        self.default_action_cost: int = validate_cost(default_action_cost)
        # Spawned actors waiting for the next build pass.
        self._pending: Dict[int, ActorTemplate] = {}
        self._next_actor_id: int = 0
        self._next_action_id: int = 0

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    def spawn_actor(self: Self, builder: ActorBuilder | ActorTemplate) -> int:
        """Reserve an actor id; the records are created by the next build pass."""
        template = builder.describe() if isinstance(builder, ActorBuilder) else builder
        actor_id = self._next_actor_id
        self._next_actor_id += 1
        self._pending[actor_id] = template
        log.debug(
            "Actor spawn queued",
            actor_id=actor_id,
            actor=template.name,
            actions=[a.name for a in template.actions],
        )
        return actor_id

    @property
    def has_pending(self: Self) -> bool:
        return bool(self._pending)

    def build_pending(self: Self) -> List[int]:
        """Create actor and action records for every queued spawn.

        Returns the ids of the actors built, in spawn order.
        """
        built = []
        for actor_id in sorted(self._pending):
            template = self._pending.pop(actor_id)
            self._build_actor(actor_id, template)
            built.append(actor_id)
        return built

    def _build_actor(self: Self, actor_id: int, template: ActorTemplate) -> Actor:
        action_ids = []
        for action_template in template.actions:
            action = action_template.instantiate(
                self._next_action_id, actor_id, self.default_action_cost
            )
            self._next_action_id += 1
            self.actions[action.id] = action
            action_ids.append(action.id)

        actor = Actor(
            id=actor_id,
            name=template.name,
            actions=action_ids,
            current_state=template.initial_state.copy(),
            goal=template.goal.copy(),
            payload=template.payload,
        )
        self.actors[actor_id] = actor
        log.info(
            "Actor built",
            actor_id=actor_id,
            actor=actor.name,
            action_ids=action_ids,
            initial_state=repr(actor.current_state),
            goal=repr(actor.goal),
        )
        return actor

    def despawn_actor(self: Self, actor_id: int) -> None:
        """Remove an actor and every action it owns."""
        if self._pending.pop(actor_id, None) is not None:
            log.debug("Pending actor spawn cancelled", actor_id=actor_id)
            return
        actor = self.get_actor(actor_id)
        for action_id in actor.actions:
            self.actions.pop(action_id, None)
        actor.is_active = False
        actor.current_path.clear()
        del self.actors[actor_id]
        log.info("Actor despawned", actor_id=actor_id, actor=actor.name)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def get_actor(self: Self, actor_id: int) -> Actor:
        actor = self.actors.get(actor_id)
        if actor is None or not actor.is_active:
            log.error("Actor lookup failed", actor_id=actor_id)
            raise UnknownActorError(actor_id)
        return actor

    def get_action(self: Self, action_id: int) -> Action:
        action = self.actions.get(action_id)
        if action is None:
            log.error("Action lookup failed", action_id=action_id)
            raise UnknownActionError(action_id)
        return action

    def actions_of(self: Self, actor_id: int) -> List[Action]:
        """Return the actor's action records in declaration order."""
        return [self.get_action(aid) for aid in self.get_actor(actor_id).actions]

    def query_actions(self: Self, payload_type: Type[Any] | None = None) -> Iterator[Action]:
        """Iterate actions, optionally only those whose payload is a ``payload_type``."""
        for action in list(self.actions.values()):
            if payload_type is None or isinstance(action.payload, payload_type):
                yield action

    def query_actors(self: Self, payload_type: Type[Any] | None = None) -> Iterator[Actor]:
        for actor in list(self.actors.values()):
            if not actor.is_active:
                continue
            if payload_type is None or isinstance(actor.payload, payload_type):
                yield actor

    def __len__(self: Self) -> int:
        return len(self.actors)


__all__ = ["GoapRegistry"]
