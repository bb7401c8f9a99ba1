from enum import auto

import pytest

from goap import (
    Action,
    ActionPhase,
    ActionState,
    Actor,
    ActorState,
    Condition,
    EvaluationResult,
    GoapStage,
    GoapWorld,
    UnknownActorError,
    WorldState,
)
from goap.planning import NO_PLAN


class Lumber(Condition):
    HAS_AXE = auto()
    HAS_WOOD = auto()


def create_lumberjack():
    return (
        Actor.build(name="Lumberjack")
        .with_initial_condition(Lumber.HAS_AXE, False)
        .with_initial_condition(Lumber.HAS_WOOD, False)
        .with_goal(Lumber.HAS_WOOD, True)
        .with_action(
            Action.build(name="GetAxe")
            .with_precondition(Lumber.HAS_AXE, False)
            .with_postcondition(Lumber.HAS_AXE, True)
        )
        .with_action(
            Action.build(name="ChopTree")
            .with_precondition(Lumber.HAS_AXE, True)
            .with_postcondition(Lumber.HAS_WOOD, True)
        )
        .with_action(
            Action.build(name="CollectWood")
            .with_postcondition(Lumber.HAS_WOOD, True)
            .with_cost(3)
        )
    )


def make_controller(fail=(), reject=(), log=None):
    """Action system that evaluates and runs every action in two ticks."""

    def controller(world):
        for action in world.registry.query_actions():
            phase = action.state.phase
            if phase is ActionPhase.EVALUATE:
                result = (
                    EvaluationResult.FAILURE
                    if action.name in reject
                    else EvaluationResult.SUCCESS
                )
                action.transition(ActionState.evaluation_complete(result))
            elif phase is ActionPhase.NOT_IN_PLAN:
                if log is not None:
                    log.append((action.name, action.state.evaluated))
                action.transition(ActionState.IDLE)
            elif phase is ActionPhase.STARTED:
                action.transition(ActionState.EXECUTING)
            elif phase is ActionPhase.EXECUTING:
                if action.name in fail:
                    action.transition(ActionState.FAILURE)
                else:
                    action.transition(ActionState.COMPLETE)

    return controller


def create_world(**controller_kwargs):
    world = GoapWorld()
    world.add_system(GoapStage.ACTIONS, make_controller(**controller_kwargs))
    actor_id = world.spawn_actor(create_lumberjack())
    return world, actor_id


def action_named(world, actor_id, name):
    return next(a for a in world.registry.actions_of(actor_id) if a.name == name)


def run_ticks(world, count):
    for _ in range(count):
        world.advance_tick()


def test_first_tick_builds_and_starts_evaluation():
    world, actor_id = create_world()
    assert len(world.registry) == 0

    world.advance_tick()

    actor = world.registry.get_actor(actor_id)
    assert world.tick_count == 1
    assert actor.state is ActorState.AWAITING_PLAN
    assert all(a.state == ActionState.EVALUATE for a in world.registry.actions_of(actor_id))


def test_plan_created_once_evaluation_finishes():
    world, actor_id = create_world()
    run_ticks(world, 2)

    actor = world.registry.get_actor(actor_id)
    assert actor.state is ActorState.EXECUTING_PLAN
    assert actor.current_path[0] == action_named(world, actor_id, "GetAxe").id
    assert action_named(world, actor_id, "GetAxe").state == ActionState.STARTED
    assert action_named(world, actor_id, "ChopTree").state == ActionState.WAITING_TO_START
    assert action_named(world, actor_id, "CollectWood").state == ActionState.not_in_plan(True)


def test_plan_runs_to_completion():
    not_in_plan = []
    world, actor_id = create_world(log=not_in_plan)
    run_ticks(world, 6)

    actor = world.registry.get_actor(actor_id)
    assert actor.state is ActorState.COMPLETED_PLAN
    assert actor.current_state == WorldState({Lumber.HAS_AXE: True, Lumber.HAS_WOOD: True})
    assert not actor.current_path
    assert all(a.state == ActionState.IDLE for a in world.registry.actions_of(actor_id))
    assert not_in_plan == [("CollectWood", True)]


def test_completion_advances_path_one_action_at_a_time():
    world, actor_id = create_world()
    run_ticks(world, 4)

    actor = world.registry.get_actor(actor_id)
    chop = action_named(world, actor_id, "ChopTree")
    assert actor.current_state.get(Lumber.HAS_AXE) is True
    assert actor.current_state.get(Lumber.HAS_WOOD) is False
    assert list(actor.current_path) == [chop.id]
    assert chop.state == ActionState.STARTED
    assert action_named(world, actor_id, "GetAxe").state == ActionState.IDLE


def test_failure_abandons_rest_of_path():
    not_in_plan = []
    world, actor_id = create_world(fail={"GetAxe"}, log=not_in_plan)
    run_ticks(world, 4)

    actor = world.registry.get_actor(actor_id)
    assert actor.state is ActorState.FAILED_DURING_PLAN
    assert not actor.current_path
    assert actor.current_state.get(Lumber.HAS_AXE) is False
    assert action_named(world, actor_id, "GetAxe").state == ActionState.IDLE
    assert action_named(world, actor_id, "ChopTree").state == ActionState.not_in_plan(True)

    world.advance_tick()
    assert not_in_plan == [("CollectWood", True), ("ChopTree", True)]
    # Resting state: nothing happens until someone asks for a new plan.
    run_ticks(world, 3)
    assert actor.state is ActorState.FAILED_DURING_PLAN


def test_rejected_evaluation_falls_back():
    world, actor_id = create_world(reject={"GetAxe"})
    run_ticks(world, 4)

    actor = world.registry.get_actor(actor_id)
    assert actor.state is ActorState.COMPLETED_PLAN
    assert actor.current_state.get(Lumber.HAS_AXE) is False
    assert actor.current_state.get(Lumber.HAS_WOOD) is True


def test_no_plan_available_when_every_evaluation_fails():
    world, actor_id = create_world(reject={"GetAxe", "ChopTree", "CollectWood"})
    run_ticks(world, 2)
    assert world.registry.get_actor(actor_id).state is ActorState.NO_PLAN_AVAILABLE


def test_replan_cycle_skips_satisfied_actions():
    world, actor_id = create_world()

    def drop_wood(world):
        for actor in world.registry.query_actors():
            if actor.state is ActorState.COMPLETED_PLAN:
                actor.update_current_state(Lumber.HAS_WOOD, False)
                actor.request_plan()

    world.add_system(GoapStage.ACTORS, drop_wood)
    run_ticks(world, 6)

    actor = world.registry.get_actor(actor_id)
    get_axe = action_named(world, actor_id, "GetAxe")
    chop = action_named(world, actor_id, "ChopTree")
    assert actor.state is ActorState.AWAITING_PLAN
    assert get_axe.state == ActionState.evaluation_complete(EvaluationResult.SKIPPED)
    assert chop.state == ActionState.EVALUATE

    world.advance_tick()
    assert actor.state is ActorState.EXECUTING_PLAN
    assert list(actor.current_path) == [chop.id]
    assert get_axe.state == ActionState.not_in_plan(False)

    run_ticks(world, 2)
    # Completed again and immediately asked for the next round.
    assert actor.state is ActorState.AWAITING_PLAN
    assert actor.current_state.get(Lumber.HAS_WOOD) is False


def test_request_plan_through_world():
    world, actor_id = create_world(reject={"GetAxe", "ChopTree", "CollectWood"})
    run_ticks(world, 2)
    actor = world.registry.get_actor(actor_id)
    assert actor.state is ActorState.NO_PLAN_AVAILABLE

    world.request_plan(actor_id)
    world.advance_tick()
    # Evaluation is answered by the controller on the following tick.
    assert actor.state is ActorState.AWAITING_PLAN
    world.advance_tick()
    assert actor.state is ActorState.NO_PLAN_AVAILABLE


def test_out_of_path_completion_still_applies_postconditions():
    world = GoapWorld()
    actor_id = world.spawn_actor(create_lumberjack())
    world.advance_tick()

    collect = action_named(world, actor_id, "CollectWood")
    collect.transition(ActionState.COMPLETE)
    world.advance_tick()

    actor = world.registry.get_actor(actor_id)
    assert actor.current_state.get(Lumber.HAS_WOOD) is True
    # Back in the running round, already satisfied by its own effect.
    assert collect.state == ActionState.evaluation_complete(EvaluationResult.SKIPPED)
    assert actor.state is ActorState.AWAITING_PLAN


def test_actors_with_same_builder_do_not_share_state():
    world = GoapWorld()
    builder = create_lumberjack()
    first = world.spawn_actor(builder)
    second = world.spawn_actor(builder)
    world.advance_tick()

    a = world.registry.get_actor(first)
    b = world.registry.get_actor(second)
    a.update_current_state(Lumber.HAS_AXE, True)
    assert b.current_state.get(Lumber.HAS_AXE) is False
    assert set(a.actions).isdisjoint(b.actions)


def test_despawn_mid_evaluation():
    world, actor_id = create_world()
    world.advance_tick()
    world.despawn_actor(actor_id)

    assert actor_id not in world.plan_queue
    with pytest.raises(UnknownActorError):
        world.registry.get_actor(actor_id)
    run_ticks(world, 3)
    assert len(world.registry.actions) == 0


def test_despawn_before_build():
    world, actor_id = create_world()
    world.despawn_actor(actor_id)
    world.advance_tick()
    assert len(world.registry) == 0
    assert len(world.plan_queue) == 0


def test_systems_run_in_stage_order():
    world = GoapWorld()
    calls = []
    world.add_system(GoapStage.ACTORS, lambda w: calls.append("actors"))
    world.add_system(GoapStage.ACTIONS, lambda w: calls.append("actions-1"))
    world.add_system(GoapStage.ACTIONS, lambda w: calls.append("actions-2"))

    world.advance_tick()
    assert calls == ["actions-1", "actions-2", "actors"]
    assert len(world.systems(GoapStage.ACTIONS)) == 2


def test_user_system_errors_propagate():
    world = GoapWorld()

    def broken(world):
        raise RuntimeError("system failed")

    world.add_system(GoapStage.ACTIONS, broken)
    with pytest.raises(RuntimeError):
        world.advance_tick()


def test_custom_planner_is_used():
    calls = []

    def planner(start, goal, candidates):
        calls.append(len(candidates))
        return NO_PLAN

    world = GoapWorld(planner=planner)
    world.add_system(GoapStage.ACTIONS, make_controller())
    actor_id = world.spawn_actor(create_lumberjack())
    run_ticks(world, 2)

    assert calls == [3]
    assert world.registry.get_actor(actor_id).state is ActorState.NO_PLAN_AVAILABLE


def test_replan_cycle_is_deterministic():
    def record_paths():
        world, actor_id = create_world()
        paths = []

        def drop_wood(world):
            for actor in world.registry.query_actors():
                if actor.state is ActorState.COMPLETED_PLAN:
                    actor.update_current_state(Lumber.HAS_WOOD, False)
                    actor.request_plan()
                elif actor.state is ActorState.EXECUTING_PLAN:
                    paths.append(tuple(actor.current_path))

        world.add_system(GoapStage.ACTORS, drop_wood)
        run_ticks(world, 15)
        return paths

    first = record_paths()
    assert first
    assert record_paths() == first


def test_replan_request_during_execution_keeps_plan():
    world, actor_id = create_world()
    run_ticks(world, 2)

    def impatient(world):
        for actor in world.registry.query_actors():
            if actor.state is ActorState.EXECUTING_PLAN:
                actor.request_plan()

    world.add_system(GoapStage.ACTORS, impatient)
    world.advance_tick()

    actor = world.registry.get_actor(actor_id)
    get_axe = action_named(world, actor_id, "GetAxe")
    chop = action_named(world, actor_id, "ChopTree")
    assert actor.state is ActorState.EXECUTING_PLAN
    assert list(actor.current_path) == [get_axe.id, chop.id]
    assert get_axe.state == ActionState.EXECUTING
    assert chop.state == ActionState.WAITING_TO_START

    run_ticks(world, 3)
    assert actor.state is ActorState.COMPLETED_PLAN
    assert actor.current_state.get(Lumber.HAS_WOOD) is True


def test_abandoned_actions_roll_back_before_reevaluation():
    not_in_plan = []
    world = GoapWorld()
    chop_states = []

    def record_chop(world):
        for action in world.registry.query_actions():
            if action.name == "ChopTree":
                chop_states.append((world.tick_count, str(action.state)))

    def replan_on_failure(world):
        for actor in world.registry.query_actors():
            if actor.state is ActorState.FAILED_DURING_PLAN:
                actor.request_plan()

    world.add_system(GoapStage.ACTIONS, record_chop)
    world.add_system(GoapStage.ACTIONS, make_controller(fail={"GetAxe"}, log=not_in_plan))
    world.add_system(GoapStage.ACTORS, replan_on_failure)
    actor_id = world.spawn_actor(create_lumberjack())
    run_ticks(world, 4)

    actor = world.registry.get_actor(actor_id)
    assert actor.state is ActorState.AWAITING_PLAN
    assert action_named(world, actor_id, "ChopTree").state == ActionState.not_in_plan(True)

    run_ticks(world, 2)
    assert chop_states[-2:] == [
        (5, "NOT_IN_PLAN(evaluated=True)"),
        (6, "EVALUATE"),
    ]
    assert ("ChopTree", True) in not_in_plan
    assert actor.state is ActorState.EXECUTING_PLAN
