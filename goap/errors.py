"""Error hierarchy for the GOAP engine.

Planning outcomes (failed evaluation, no plan, failed execution) are
reported through :class:`~goap.actor.ActorState` and
:class:`~goap.action.ActionState`, never as exceptions. The classes below
cover misuse at the API boundary only.
"""

from __future__ import annotations


class GoapError(Exception):
    """Base for all GOAP engine errors."""


class InvalidConditionError(GoapError, TypeError):
    """A world-state key is not a :class:`~goap.condition.Condition` member."""

    def __init__(self, kind: object):
        self.kind = kind
        super().__init__(
            f"Expected a Condition member as world-state key, got {kind!r}"
        )


class InvalidCostError(GoapError, ValueError):
    """An action cost is negative or not an integer."""

    def __init__(self, cost: object):
        self.cost = cost
        super().__init__(f"Action cost must be a non-negative integer, got {cost!r}")


class UnknownActorError(GoapError, KeyError):
    """No active actor exists for the given id."""

    def __init__(self, actor_id: int):
        self.actor_id = actor_id
        super().__init__(f"Unknown actor id {actor_id}")


class UnknownActionError(GoapError, KeyError):
    """No action exists for the given id."""

    def __init__(self, action_id: int):
        self.action_id = action_id
        super().__init__(f"Unknown action id {action_id}")


class ConfigError(GoapError, ValueError):
    """Configuration file is missing or holds invalid values."""
