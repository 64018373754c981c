import pytest

from liftlog.schemas.catalog import CatalogRow
from liftlog.schemas.exercise_set import SetRow
from liftlog.schemas.plan import PlanRow
from liftlog.schemas.setup import ExerciseSetupRow
from liftlog.schemas.workout import WorkoutState
from liftlog.services.progression import Progression, resolve_requires_weight, resolve_rest_target

class FakeClock:
    def __init__(self, t=1_700_000_000.0):
        self.t = t

    def __call__(self):
        return self.t

def make_state(plan=(("A", 3), ("B", 2))):
    return WorkoutState(
        session_id="sess_1",
        user_email="u@example.com",
        plan_day="Push",
        start_timestamp="2024-01-01T10:00:00+00:00",
        plan=[
            PlanRow(day_key="Push", sort_order=i, exercise_key=k, exercise_name=k, planned_sets=n)
            for i, (k, n) in enumerate(plan)
        ],
    )

def logged(prog, **kw):
    ex = prog.active_exercise
    return SetRow(session_id="sess_1", exercise_key=ex.exercise_key,
                  set_number=prog.state.current_set_number, weight=50, reps=5, **kw)

def test_walks_sets_then_exercises():
    prog = Progression(make_state(), FakeClock())
    seen = []
    while not prog.finished:
        seen.append((prog.active_exercise.exercise_key, prog.state.current_set_number))
        prog.record(logged(prog))
    assert seen == [("A", 1), ("A", 2), ("A", 3), ("B", 1), ("B", 2)]
    assert prog.active_exercise is None
    assert prog.exercises_completed == 2
    assert prog.total_sets_logged == 5

def test_finishes_exactly_once():
    clock = FakeClock()
    prog = Progression(make_state(), clock)
    results = []
    for _ in range(5):
        results.append(prog.record(logged(prog)))
        clock.t += 60
    assert results == [False, False, False, False, True]
    stamped = prog.state.end_timestamp
    assert stamped

    clock.t += 3600
    for _ in range(3):
        assert prog.check_complete() is True
    assert prog.mark_finished() is False
    assert prog.state.end_timestamp == stamped

def test_manual_finish_keeps_first_stamp():
    clock = FakeClock()
    prog = Progression(make_state(), clock)
    assert prog.mark_finished() is True
    first = prog.state.end_timestamp
    clock.t += 10
    assert prog.mark_finished() is False
    assert prog.state.end_timestamp == first

def test_skip_counts_as_a_set():
    prog = Progression(make_state((("A", 1),)), FakeClock())
    assert prog.record(logged(prog, is_skipped=True)) is True

def test_rest_cue_fires_once():
    clock = FakeClock()
    prog = Progression(make_state(), clock)
    assert prog.rest_status().resting is False

    prog.start_rest(90)
    clock.t += 30
    status = prog.rest_status()
    assert (status.resting, status.elapsed_seconds, status.remaining_seconds, status.cue) == (True, 30, 60, False)

    clock.t += 70
    status = prog.rest_status()
    assert status.remaining_seconds == 0
    assert status.overtime_seconds == 10
    assert status.cue is True
    assert prog.rest_status().cue is False

    prog.clear_rest()
    assert prog.rest_elapsed() is None

def test_jump_positions_on_next_unlogged_set():
    prog = Progression(make_state(), FakeClock())
    prog.record(logged(prog))
    prog.jump_to("B")
    assert (prog.state.current_exercise_index, prog.state.current_set_number) == (1, 1)
    prog.jump_to("A")
    assert prog.state.current_set_number == 2
    with pytest.raises(KeyError):
        prog.jump_to("Z")

def test_drafts_survive_until_the_set_is_saved():
    prog = Progression(make_state(), FakeClock())
    prog.set_draft("A", 1, 60.0, 8)
    prog.set_draft("A", 2, 62.5, None)
    assert prog.draft_for("A", 1).weight == 60.0
    prog.record(logged(prog))
    assert prog.draft_for("A", 1) is None
    assert prog.draft_for("A", 2).weight == 62.5

def test_state_serializes():
    clock = FakeClock()
    prog = Progression(make_state(), clock)
    prog.record(logged(prog))
    prog.start_rest(120)
    prog.set_draft("A", 2, 55.0, 5)
    restored = WorkoutState.model_validate_json(prog.state.model_dump_json())
    assert restored == prog.state

def test_rest_target_resolution_order():
    plan = PlanRow(day_key="Push", exercise_key="A", default_rest_seconds=75)
    setup = ExerciseSetupRow(user_email="u@example.com", exercise_key="A", default_rest_seconds=45)
    catalog = CatalogRow(exercise_key="A", default_rest_seconds=90)
    assert resolve_rest_target(plan, setup, catalog, 120) == 45
    assert resolve_rest_target(plan, None, catalog, 120) == 75
    bare = PlanRow(day_key="Push", exercise_key="A")
    assert resolve_rest_target(bare, None, catalog, 120) == 90
    assert resolve_rest_target(bare, None, None, 120) == 120

def test_requires_weight_resolution_order():
    setup = ExerciseSetupRow(user_email="u@example.com", exercise_key="A", requires_weight=False)
    catalog = CatalogRow(exercise_key="A", default_requires_weight=True)
    assert resolve_requires_weight(setup, catalog) is False
    assert resolve_requires_weight(None, CatalogRow(exercise_key="A", default_requires_weight=False)) is False
    assert resolve_requires_weight(None, None) is True

def test_exercise_finished_out_of_order_is_not_offered_again():
    prog = Progression(make_state(), FakeClock())
    prog.jump_to("B")
    prog.record(logged(prog))
    prog.jump_to("A")
    for _ in range(3):
        prog.record(logged(prog))
    # back on B where it was left, not at set 1
    assert (prog.active_exercise.exercise_key, prog.state.current_set_number) == ("B", 2)
    prog.record(logged(prog))
    assert prog.finished
    assert [s.set_number for s in prog.state.sets if s.exercise_key == "B"] == [1, 2]

def test_completed_exercise_is_skipped_when_advancing():
    prog = Progression(make_state((("A", 3), ("B", 2), ("C", 1))), FakeClock())
    prog.jump_to("B")
    prog.record(logged(prog))
    prog.record(logged(prog))
    assert prog.active_exercise.exercise_key == "C"
    prog.jump_to("A")
    for _ in range(3):
        prog.record(logged(prog))
    assert (prog.active_exercise.exercise_key, prog.state.current_set_number) == ("C", 1)
    assert prog.total_sets_logged == 5

def test_jump_refuses_a_complete_exercise():
    prog = Progression(make_state(), FakeClock())
    for _ in range(3):
        prog.record(logged(prog))
    with pytest.raises(ValueError):
        prog.jump_to("A")
    assert prog.active_exercise.exercise_key == "B"

def test_resync_moves_the_cursor_back_to_the_first_gap():
    prog = Progression(make_state(), FakeClock())
    prog.record(logged(prog))
    prog.record(logged(prog))
    assert prog.state.current_set_number == 3

    prog.resync([prog.state.sets[0]])
    assert (prog.active_exercise.exercise_key, prog.state.current_set_number) == ("A", 2)
    assert prog.total_sets_logged == 1
