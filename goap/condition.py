"""Condition kinds used as world-state keys.

A condition kind is a named boolean fact ("has axe", "has wood").  Kinds are
declared up front as members of an :class:`enum.Enum` subclass of
:class:`Condition`::

    class Lumber(Condition):
        HAS_AXE = auto()
        HAS_WOOD = auto()

Enum members are singletons, so two references to ``Lumber.HAS_AXE`` are
always the same key.  Members of different subclasses never compare equal
even when they share a name or value.
"""

from __future__ import annotations

from enum import Enum

import structlog

from goap.errors import InvalidConditionError

log = structlog.get_logger(__name__)


class Condition(Enum):
    """Base class for user-declared condition kinds."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}.{self.name}"


def ensure_condition(kind: object) -> Condition:
    """Return ``kind`` unchanged, raising if it is not a :class:`Condition`."""
    if not isinstance(kind, Condition):
        log.error("Rejected non-condition world-state key", kind=repr(kind))
        raise InvalidConditionError(kind)
    return kind


__all__ = ["Condition", "ensure_condition"]
