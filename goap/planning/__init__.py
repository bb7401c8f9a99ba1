"""Planning: A* search over actions and the request queue that gates it."""

from goap.planning.plan_node import PlanCandidate, PlanNode
from goap.planning.planner import NO_PLAN, Plan, find_plan
from goap.planning.queue import PlanRequest, PlanRequestQueue, apply_plan

__all__ = [
    "NO_PLAN",
    "Plan",
    "PlanCandidate",
    "PlanNode",
    "PlanRequest",
    "PlanRequestQueue",
    "apply_plan",
    "find_plan",
]
