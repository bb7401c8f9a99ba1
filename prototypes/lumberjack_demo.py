# === prototypes/lumberjack_demo.py ===
"""Lumberjacks fetching axes and chopping trees with the GOAP engine.

Each lumberjack wants wood.  Chopping a tree needs an axe; picking up an axe
claims it during evaluation so two lumberjacks never plan with the same
one.  A lumberjack that cannot claim an axe falls back to the slow
collect-wood action.  After delivering wood the lumberjack drops it and asks
for a new plan.
"""

import sys
from dataclasses import dataclass, field
from enum import auto
from pathlib import Path
from typing import Any, Dict, List

# Allow imports like 'from goap.*' when run as a script
sys.path.append(str(Path(__file__).resolve().parent.parent))

import numpy as np
import structlog

from engine.main_loop import MainLoop
from goap import (
    Action,
    ActionPhase,
    ActionState,
    Actor,
    ActorBuilder,
    ActorState,
    Condition,
    EvaluationResult,
    GoapStage,
    GoapWorld,
    load_config,
)
from goap.config import load_yaml_config
from utils.logging_utils import setup_logging_from_config

log = structlog.get_logger()

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"
GOAP_CONFIG_FILE = CONFIG_DIR / "goap.yaml"
SCENARIO_FILE = CONFIG_DIR / "lumberjack.yaml"


class Lumber(Condition):
    HAS_AXE = auto()
    HAS_WOOD = auto()


@dataclass
class Lumberjack:
    wood_delivered: int = 0


@dataclass
class GetAxeAction:
    target: int | None = None


@dataclass
class ChopTreeAction:
    max_chops: int = 3
    current_chops: int = 0
    target: int | None = None


@dataclass
class CollectWoodAction:
    cost: int = 40


@dataclass
class Environment:
    """Positions of lumberjacks, axes and trees on a flat plane."""

    axes: np.ndarray
    trees: np.ndarray
    speed: float = 1.0
    positions: Dict[int, np.ndarray] = field(default_factory=dict)
    axe_owners: List[int | None] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.axe_owners:
            self.axe_owners = [None] * len(self.axes)

    def distance(self, actor_id: int, target: np.ndarray) -> float:
        return float(np.linalg.norm(target - self.positions[actor_id]))

    def claim_nearest_axe(self, actor_id: int) -> int | None:
        free = [i for i, owner in enumerate(self.axe_owners) if owner is None]
        if not free:
            return None
        nearest = min(free, key=lambda i: self.distance(actor_id, self.axes[i]))
        self.axe_owners[nearest] = actor_id
        return nearest

    def release_axe(self, axe: int, actor_id: int) -> None:
        if self.axe_owners[axe] == actor_id:
            self.axe_owners[axe] = None

    def nearest_tree(self, actor_id: int) -> int | None:
        if len(self.trees) == 0:
            return None
        distances = np.linalg.norm(self.trees - self.positions[actor_id], axis=1)
        return int(np.argmin(distances))

    def move_towards(self, actor_id: int, target: np.ndarray) -> bool:
        """Step ``actor_id`` towards ``target``; ``True`` once it has arrived."""
        pos = self.positions[actor_id]
        offset = target - pos
        dist = float(np.linalg.norm(offset))
        if dist <= self.speed:
            self.positions[actor_id] = target.astype(float).copy()
            return True
        self.positions[actor_id] = pos + offset / dist * self.speed
        return False


def _travel_cost(env: Environment, actor_id: int, target: np.ndarray) -> int:
    return max(1, int(np.ceil(env.distance(actor_id, target))))


# --- Action systems ---
def get_axe_action_system(world: GoapWorld) -> None:
    env: Environment = world.resources["environment"]
    for action in world.registry.query_actions(GetAxeAction):
        get_axe: GetAxeAction = action.payload
        phase = action.state.phase
        if phase is ActionPhase.EVALUATE:
            axe = env.claim_nearest_axe(action.actor_id)
            if axe is None:
                log.debug("No free axe to claim", actor_id=action.actor_id)
                action.transition(ActionState.evaluation_complete(EvaluationResult.FAILURE))
                continue
            get_axe.target = axe
            action.update_cost(_travel_cost(env, action.actor_id, env.axes[axe]))
            action.transition(ActionState.evaluation_complete(EvaluationResult.SUCCESS))
        elif phase is ActionPhase.NOT_IN_PLAN:
            if get_axe.target is not None:
                env.release_axe(get_axe.target, action.actor_id)
                get_axe.target = None
            action.transition(ActionState.IDLE)
        elif phase is ActionPhase.STARTED:
            action.transition(ActionState.EXECUTING)
        elif phase is ActionPhase.EXECUTING:
            if env.move_towards(action.actor_id, env.axes[get_axe.target]):
                log.info("Picked up axe", actor_id=action.actor_id, axe=get_axe.target)
                # The axe stays claimed by its new owner.
                get_axe.target = None
                action.transition(ActionState.COMPLETE)


def chop_tree_action_system(world: GoapWorld) -> None:
    env: Environment = world.resources["environment"]
    for action in world.registry.query_actions(ChopTreeAction):
        chop: ChopTreeAction = action.payload
        phase = action.state.phase
        if phase is ActionPhase.EVALUATE:
            tree = env.nearest_tree(action.actor_id)
            if tree is None:
                action.transition(ActionState.evaluation_complete(EvaluationResult.FAILURE))
                continue
            chop.target = tree
            action.update_cost(
                _travel_cost(env, action.actor_id, env.trees[tree]) + chop.max_chops
            )
            action.transition(ActionState.evaluation_complete(EvaluationResult.SUCCESS))
        elif phase is ActionPhase.NOT_IN_PLAN:
            chop.target = None
            action.transition(ActionState.IDLE)
        elif phase is ActionPhase.STARTED:
            chop.current_chops = 0
            action.transition(ActionState.EXECUTING)
        elif phase is ActionPhase.EXECUTING:
            if not env.move_towards(action.actor_id, env.trees[chop.target]):
                continue
            chop.current_chops += 1
            log.debug("Chopped tree", actor_id=action.actor_id, chops=chop.current_chops)
            if chop.current_chops >= chop.max_chops:
                action.transition(ActionState.COMPLETE)


def collect_wood_action_system(world: GoapWorld) -> None:
    for action in world.registry.query_actions(CollectWoodAction):
        phase = action.state.phase
        if phase is ActionPhase.EVALUATE:
            action.update_cost(action.payload.cost)
            action.transition(ActionState.evaluation_complete(EvaluationResult.SUCCESS))
        elif phase is ActionPhase.NOT_IN_PLAN:
            action.transition(ActionState.IDLE)
        elif phase is ActionPhase.STARTED:
            action.transition(ActionState.EXECUTING)
        elif phase is ActionPhase.EXECUTING:
            log.info("Collected wood from the ground", actor_id=action.actor_id)
            action.transition(ActionState.COMPLETE)


# --- Actor systems ---
def lumberjack_actor_system(world: GoapWorld) -> None:
    for actor in world.registry.query_actors(Lumberjack):
        if actor.state is ActorState.COMPLETED_PLAN:
            if actor.current_state.get(Lumber.HAS_WOOD):
                actor.payload.wood_delivered += 1
                log.info(
                    "Wood delivered",
                    actor_id=actor.id,
                    total=actor.payload.wood_delivered,
                )
            actor.update_current_state(Lumber.HAS_WOOD, False)
            actor.request_plan()
        elif actor.state is ActorState.FAILED_DURING_PLAN:
            actor.request_plan()


def build_lumberjack(max_chops: int, collect_wood_cost: int) -> ActorBuilder:
    get_axe = (
        Action.build(GetAxeAction())
        .with_precondition(Lumber.HAS_AXE, False)
        .with_postcondition(Lumber.HAS_AXE, True)
    )
    chop_tree = (
        Action.build(ChopTreeAction(max_chops=max_chops))
        .with_precondition(Lumber.HAS_AXE, True)
        .with_postcondition(Lumber.HAS_WOOD, True)
    )
    collect_wood = Action.build(CollectWoodAction(cost=collect_wood_cost)).with_postcondition(
        Lumber.HAS_WOOD, True
    )
    return (
        Actor.build(Lumberjack())
        .with_initial_condition(Lumber.HAS_AXE, False)
        .with_initial_condition(Lumber.HAS_WOOD, False)
        .with_goal(Lumber.HAS_WOOD, True)
        .with_action(get_axe)
        .with_action(chop_tree)
        .with_action(collect_wood)
    )


def create_world(scenario: Dict[str, Any], world: GoapWorld | None = None) -> GoapWorld:
    world = world or GoapWorld()
    env = Environment(
        axes=np.array(scenario.get("axes", []), dtype=float).reshape(-1, 2),
        trees=np.array(scenario.get("trees", []), dtype=float).reshape(-1, 2),
        speed=float(scenario.get("speed", 1.0)),
    )
    world.resources["environment"] = env

    lumberjack = build_lumberjack(
        max_chops=int(scenario.get("max_chops", 3)),
        collect_wood_cost=int(scenario.get("collect_wood_cost", 40)),
    )
    for start in scenario.get("lumberjacks", [[0.0, 0.0]]):
        actor_id = world.spawn_actor(lumberjack)
        env.positions[actor_id] = np.array(start, dtype=float)

    world.add_system(GoapStage.ACTIONS, get_axe_action_system)
    world.add_system(GoapStage.ACTIONS, chop_tree_action_system)
    world.add_system(GoapStage.ACTIONS, collect_wood_action_system)
    world.add_system(GoapStage.ACTORS, lumberjack_actor_system)
    return world


def total_wood(world: GoapWorld) -> int:
    return sum(a.payload.wood_delivered for a in world.registry.query_actors(Lumberjack))


def main():
    config = load_config(GOAP_CONFIG_FILE)
    setup_logging_from_config(config)
    scenario = load_yaml_config(SCENARIO_FILE, "Lumberjack scenario")

    world = create_world(scenario, GoapWorld(config=config))
    loop = MainLoop(world, tick_interval=float(scenario.get("tick_interval", 0.0)))
    loop.run(int(scenario.get("max_ticks", 200)))

    for actor in world.registry.query_actors(Lumberjack):
        print(
            f"[{actor.name} {actor.id}] delivered {actor.payload.wood_delivered} wood, "
            f"state={actor.state.name}"
        )


if __name__ == "__main__":
    main()
