# liftlog/services/progression.py
"""
Workout progression: which exercise and set are active, the rest timer
between sets, and unsaved draft inputs.

    active(exercise i, set j) -> resting -> active(i, j+1) -> ...
        -> active(next unfinished exercise, its next set) -> ... -> finished

`Progression` only mutates the `WorkoutState` it wraps. Persisting the
state and writing rows to the spreadsheet is the coordinator's job, and the
coordinator calls `record()` only after the remote append has succeeded.
"""
from __future__ import annotations
from datetime import datetime, timezone
import time
from typing import Callable, Optional

from liftlog.schemas.catalog import CatalogRow
from liftlog.schemas.exercise_set import SetRow
from liftlog.schemas.plan import PlanRow
from liftlog.schemas.setup import ExerciseSetupRow
from liftlog.schemas.workout import DraftValues, RestState, RestStatus, WorkoutState
from liftlog.services.metrics import completed_exercise_count, live_sets, next_set_number

Clock = Callable[[], float]


def draft_key(exercise_key: str, set_number: int) -> str:
    return f"{exercise_key}:{set_number}"


def resolve_rest_target(
    exercise: PlanRow,
    setup: Optional[ExerciseSetupRow],
    catalog: Optional[CatalogRow],
    default: int,
) -> int:
    """User setup, then the plan row, then the catalog, then the app default."""
    for candidate in (
        setup.default_rest_seconds if setup else None,
        exercise.default_rest_seconds,
        catalog.default_rest_seconds if catalog else None,
    ):
        if candidate is not None and candidate >= 0:
            return candidate
    return max(0, default)


def resolve_requires_weight(setup: Optional[ExerciseSetupRow], catalog: Optional[CatalogRow]) -> bool:
    if setup and setup.requires_weight is not None:
        return setup.requires_weight
    if catalog and catalog.default_requires_weight is not None:
        return catalog.default_requires_weight
    return True


class Progression:
    def __init__(self, state: WorkoutState, clock: Clock = time.time):
        self.state = state
        self.clock = clock

    def now_iso(self) -> str:
        return datetime.fromtimestamp(self.clock(), timezone.utc).isoformat(timespec="milliseconds")

    # --- queries ---

    @property
    def finished(self) -> bool:
        return self.state.status == "finished"

    @property
    def active_exercise(self) -> Optional[PlanRow]:
        if self.finished:
            return None
        idx = self.state.current_exercise_index
        return self.state.plan[idx] if 0 <= idx < len(self.state.plan) else None

    def exercise(self, exercise_key: str) -> Optional[PlanRow]:
        for p in self.state.plan:
            if p.exercise_key == exercise_key:
                return p
        return None

    def logged_for(self, exercise_key: str) -> list[SetRow]:
        return [s for s in live_sets(self.state.sets) if s.exercise_key == exercise_key]

    def next_set_for(self, exercise: PlanRow) -> int:
        return next_set_number(exercise.planned_sets, [s.set_number for s in self.logged_for(exercise.exercise_key)])

    def is_complete(self, exercise: PlanRow) -> bool:
        return len(self.logged_for(exercise.exercise_key)) >= max(1, exercise.planned_sets)

    @property
    def exercises_completed(self) -> int:
        return completed_exercise_count(self.state.plan, self.state.sets)

    @property
    def total_sets_logged(self) -> int:
        return len(live_sets(self.state.sets))

    # --- transitions ---

    def record(self, logged: SetRow) -> bool:
        """
        Take a set the backend has acknowledged and move on. Returns True if
        the workout is finished as a result.
        """
        self.state.sets.append(logged)
        self.state.drafts.pop(draft_key(logged.exercise_key, logged.set_number), None)
        return self.advance()

    def advance(self) -> bool:
        exercise = self.active_exercise
        if exercise is None:
            return self.check_complete()
        if self.is_complete(exercise):
            self._settle_from(self.state.current_exercise_index + 1)
        else:
            self.state.current_set_number = self.next_set_for(exercise)
        return self.check_complete()

    def _settle_from(self, idx: int) -> None:
        """Move to the first exercise at or after `idx` that still has sets to log."""
        plan = self.state.plan
        while idx < len(plan) and self.is_complete(plan[idx]):
            idx += 1
        self.state.current_exercise_index = idx
        self.state.current_set_number = self.next_set_for(plan[idx]) if idx < len(plan) else 1

    def resync(self, sets: list[SetRow]) -> None:
        """Replace the logged sets with what the sheet holds and re-place the cursor."""
        self.state.sets = list(sets)
        if self.finished:
            return
        self._settle_from(self.state.current_exercise_index)
        self.check_complete()

    def check_complete(self) -> bool:
        """Safe to call any number of times."""
        if self.state.current_exercise_index >= len(self.state.plan):
            self.mark_finished()
        return self.finished

    def mark_finished(self) -> bool:
        """Returns True only on the call that stamps the end timestamp."""
        self.state.status = "finished"
        self.state.rest = None
        if self.state.end_timestamp:
            return False
        self.state.end_timestamp = self.now_iso()
        return True

    def jump_to(self, exercise_key: str) -> PlanRow:
        """KeyError for an exercise not in the plan, ValueError for one already complete."""
        for idx, p in enumerate(self.state.plan):
            if p.exercise_key == exercise_key:
                if self.is_complete(p):
                    raise ValueError(exercise_key)
                self.state.current_exercise_index = idx
                self.state.current_set_number = self.next_set_for(p)
                self.state.rest = None
                return p
        raise KeyError(exercise_key)

    # --- rest timer ---

    def start_rest(self, target_seconds: int) -> None:
        self.state.rest = RestState(started_at=self.clock(), target_seconds=max(0, target_seconds))

    def clear_rest(self) -> None:
        self.state.rest = None

    def rest_elapsed(self) -> Optional[int]:
        if self.state.rest is None:
            return None
        return max(0, int(self.clock() - self.state.rest.started_at))

    def rest_status(self) -> RestStatus:
        """
        Elapsed time comes from the wall clock, so a backgrounded client
        still gets the right numbers. The cue flag is handed out once.
        """
        rest = self.state.rest
        if rest is None:
            return RestStatus(resting=False)
        elapsed = self.rest_elapsed() or 0
        cue = False
        if elapsed >= rest.target_seconds and not rest.cue_fired:
            rest.cue_fired = True
            cue = True
        return RestStatus(
            resting=True,
            target_seconds=rest.target_seconds,
            elapsed_seconds=elapsed,
            remaining_seconds=max(rest.target_seconds - elapsed, 0),
            overtime_seconds=max(elapsed - rest.target_seconds, 0),
            cue=cue,
        )

    # --- drafts ---

    def set_draft(self, exercise_key: str, set_number: int, weight: Optional[float], reps: Optional[int]) -> None:
        self.state.drafts[draft_key(exercise_key, set_number)] = DraftValues(weight=weight, reps=reps)

    def draft_for(self, exercise_key: str, set_number: int) -> Optional[DraftValues]:
        return self.state.drafts.get(draft_key(exercise_key, set_number))
