# liftlog/services/workout.py
"""
Coordinator for a live workout. It owns the draft store and the spreadsheet
repositories and is the only code that loads, mutates and saves a
`WorkoutState`.

Ordering rule for logging a set: the row is appended to WorkoutSets first;
the progression only advances (and the draft is only saved) once the append
has returned. A failed append leaves the stored state exactly as it was.
"""
from __future__ import annotations
import logging
import time
from typing import Optional

from liftlog.errors import NotFound, ValidationFailure
from liftlog.repositories.base import make_id
from liftlog.repositories.draft_repo import DraftRepository
from liftlog.repositories.workbook import Workbook
from liftlog.schemas.exercise_set import SetRow
from liftlog.schemas.history import PrRead
from liftlog.schemas.plan import PlanRow
from liftlog.schemas.session import SessionRow
from liftlog.schemas.workout import (
    DraftUpdate, ExerciseView, FinishInput, FinishResult, NotesUpdate, RestStatus,
    SetInput, SkipInput, WorkoutStart, WorkoutState, WorkoutView,
)
from liftlog.services.metrics import (
    PrPolicy, compute_pr_values, completed_exercise_count, last_session_sets, live_sets,
    parse_timestamp, sets_for_exercise,
)
from liftlog.services.progression import (
    Clock, Progression, resolve_requires_weight, resolve_rest_target,
)
from liftlog.settings import Settings

log = logging.getLogger(__name__)


class WorkoutCoordinator:
    def __init__(self, drafts: DraftRepository, workbook: Workbook, settings: Settings, clock: Clock = time.time):
        self.drafts = drafts
        self.workbook = workbook
        self.settings = settings
        self.clock = clock

    # --- loading ---

    def _load(self, email: str) -> Progression:
        state = self.drafts.get(email)
        if state is None:
            raise NotFound("workout", email)
        return Progression(state, self.clock)

    def _load_active(self, email: str) -> Progression:
        prog = self._load(email)
        if prog.finished:
            raise ValidationFailure("Workout is already finished", session_id=prog.state.session_id)
        return prog

    def _save(self, email: str, prog: Progression) -> WorkoutView:
        self.drafts.save(email, prog.state)
        return self.view(prog)

    def view(self, prog: Progression) -> WorkoutView:
        return WorkoutView(
            state=prog.state,
            active_exercise=prog.active_exercise,
            exercises_planned=len(prog.state.plan),
            exercises_completed=prog.exercises_completed,
            total_sets_logged=prog.total_sets_logged,
            finished=prog.finished,
        )

    def state(self, email: str) -> WorkoutView:
        prog = self._load(email)
        was_finished = prog.finished
        prog.check_complete()
        if prog.finished and not was_finished:
            return self._save(email, prog)
        return self.view(prog)

    # --- lifecycle ---

    def start(self, email: str, payload: WorkoutStart) -> WorkoutView:
        current = self.drafts.get(email)
        if current is not None:
            raise ValidationFailure(
                "A workout is already in progress; finish or abandon it first",
                session_id=current.session_id,
            )

        plan = self.workbook.plan.for_user(email, payload.plan_day)
        if not plan.rows:
            raise NotFound("plan day", payload.plan_day)

        default_rest = payload.default_rest_seconds
        session = self.workbook.sessions.create(SessionRow(
            session_id=make_id("sess"),
            user_email=email,
            plan_day=plan.rows[0].day_key,
            timezone=payload.timezone,
            exercises_planned=len(plan.rows),
            exercises_completed=0,
            total_sets_logged=0,
            default_rest_seconds=default_rest,
        ))
        log.info("workout started: user=%s session=%s day=%s exercises=%d",
                 email, session.session_id, session.plan_day, len(plan.rows))

        state = WorkoutState(
            session_id=session.session_id,
            user_email=email,
            plan_day=session.plan_day,
            start_timestamp=session.start_timestamp,
            timezone=payload.timezone,
            default_rest_seconds=default_rest,
            plan=plan.rows,
        )
        return self._save(email, Progression(state, self.clock))

    def finish(self, email: str, payload: Optional[FinishInput] = None) -> FinishResult:
        prog = self._load(email)
        state = prog.state
        if payload is not None and payload.notes is not None:
            state.notes = payload.notes
        prog.mark_finished()

        # count what the sheet holds, edits and deletes included
        logged = self.workbook.sets.list_by_session(state.session_id)
        completed = completed_exercise_count(state.plan, logged)
        self.workbook.sessions.finish(SessionRow(
            session_id=state.session_id,
            user_email=email,
            plan_day=state.plan_day,
            start_timestamp=state.start_timestamp,
            end_timestamp=state.end_timestamp or "",
            timezone=state.timezone,
            exercises_planned=len(state.plan),
            exercises_completed=completed,
            total_sets_logged=len(logged),
            default_rest_seconds=state.default_rest_seconds,
            notes=state.notes,
        ))

        names = {p.exercise_key: p for p in state.plan}
        notes_written = self.workbook.notes.append_many(state.session_id, [
            {
                "exercise_key": key,
                "exercise_name": names[key].exercise_name if key in names else "",
                "exercise_order": names[key].sort_order if key in names else None,
                "notes": text,
            }
            for key, text in state.exercise_notes.items()
        ])

        self.drafts.delete(email)
        log.info("workout finished: user=%s session=%s sets=%d completed=%d/%d",
                 email, state.session_id, len(logged), completed, len(state.plan))
        return FinishResult(
            session_id=state.session_id,
            end_timestamp=state.end_timestamp or "",
            exercises_planned=len(state.plan),
            exercises_completed=completed,
            total_sets_logged=len(logged),
            notes_written=notes_written,
        )

    def abandon(self, email: str) -> bool:
        return self.drafts.delete(email)

    # --- sets ---

    def _rules(self, email: str, exercise: PlanRow, state: WorkoutState) -> tuple[int, bool]:
        """(rest target, whether a weight is required) for one exercise."""
        setup_table, catalog_table = self.workbook.read(self.workbook.setup, self.workbook.catalog)
        setup = self.workbook.setup.get(email, exercise.exercise_key, setup_table)
        catalog = self.workbook.catalog.get(exercise.exercise_key, catalog_table)
        default = state.default_rest_seconds
        if default is None:
            default = self.settings.DEFAULT_REST_SECONDS
        return resolve_rest_target(exercise, setup, catalog, default), resolve_requires_weight(setup, catalog)

    def _log(self, email: str, prog: Progression, row: SetRow, rest_target: int) -> WorkoutView:
        exercise_index = prog.state.current_exercise_index
        created = self.workbook.sets.create(row)

        # acknowledged: only now does local state move
        finished = prog.record(created)
        if not finished and prog.state.current_exercise_index == exercise_index:
            prog.start_rest(rest_target)
        else:
            prog.clear_rest()
        return self._save(email, prog)

    def _base_row(self, email: str, prog: Progression, exercise: PlanRow) -> SetRow:
        return SetRow(
            session_id=prog.state.session_id,
            user_email=email,
            exercise_key=exercise.exercise_key,
            exercise_name=exercise.exercise_name or exercise.exercise_key,
            exercise_order=exercise.sort_order,
            set_number=prog.state.current_set_number,
        )

    def _active(self, prog: Progression) -> PlanRow:
        exercise = prog.active_exercise
        if exercise is None:
            raise ValidationFailure("No active exercise", session_id=prog.state.session_id)
        # every planned set is logged; another row would repeat the last set number
        if prog.is_complete(exercise):
            raise ValidationFailure("Exercise already complete", exercise_key=exercise.exercise_key)
        return exercise

    def save_set(self, email: str, payload: SetInput) -> WorkoutView:
        prog = self._load_active(email)
        exercise = self._active(prog)
        target, requires_weight = self._rules(email, exercise, prog.state)
        if requires_weight and payload.weight is None:
            raise ValidationFailure("weight is required for this exercise", exercise_key=exercise.exercise_key)
        rest_taken = payload.rest_seconds if payload.rest_seconds is not None else prog.rest_elapsed()
        row = self._base_row(email, prog, exercise).model_copy(update={
            "weight": payload.weight if requires_weight else None,
            "reps": payload.reps,
            "rpe": payload.rpe,
            "rest_seconds": rest_taken,
            "rest_target_seconds": target,
            "notes": payload.notes,
        })
        return self._log(email, prog, row, target)

    def skip_set(self, email: str, payload: SkipInput) -> WorkoutView:
        prog = self._load_active(email)
        exercise = self._active(prog)
        target, _ = self._rules(email, exercise, prog.state)
        rest_taken = payload.rest_seconds if payload.rest_seconds is not None else prog.rest_elapsed()
        row = self._base_row(email, prog, exercise).model_copy(update={
            "is_skipped": True,
            "skip_reason": payload.reason,
            "rest_seconds": rest_taken,
            "rest_target_seconds": target,
        })
        return self._log(email, prog, row, target)

    # --- local-only edits ---

    def set_draft(self, email: str, payload: DraftUpdate) -> WorkoutView:
        prog = self._load_active(email)
        if prog.exercise(payload.exercise_key) is None:
            raise NotFound("exercise", payload.exercise_key)
        prog.set_draft(payload.exercise_key, payload.set_number, payload.weight, payload.reps)
        return self._save(email, prog)

    def update_notes(self, email: str, payload: NotesUpdate) -> WorkoutView:
        prog = self._load(email)
        if payload.notes is not None:
            prog.state.notes = payload.notes
        for key, text in payload.exercise_notes.items():
            if prog.exercise(key) is None:
                raise NotFound("exercise", key)
            prog.state.exercise_notes[key] = text
        return self._save(email, prog)

    def jump(self, email: str, exercise_key: str) -> WorkoutView:
        prog = self._load_active(email)
        try:
            prog.jump_to(exercise_key)
        except KeyError:
            raise NotFound("exercise", exercise_key)
        except ValueError:
            raise ValidationFailure("Exercise already complete", exercise_key=exercise_key)
        return self._save(email, prog)

    def reconcile(self, email: str, session_id: str) -> bool:
        """
        Re-read the live session's sets after they were changed outside the
        workout flow (edits, deletes, cleanup). Other sessions are ignored.
        """
        state = self.drafts.get(email)
        if state is None or state.session_id != session_id:
            return False
        prog = Progression(state, self.clock)
        prog.resync(self.workbook.sets.list_by_session(session_id))
        self.drafts.save(email, prog.state)
        return True

    def rest(self, email: str) -> RestStatus:
        prog = self._load(email)
        status = prog.rest_status()
        if status.cue:
            # the cue is one-shot; remember that it went off
            self.drafts.save(email, prog.state)
        return status

    # --- exercise screen ---

    def exercise_view(self, email: str, exercise_key: Optional[str] = None) -> ExerciseView:
        prog = self._load(email)
        state = prog.state
        exercise = prog.exercise(exercise_key) if exercise_key else prog.active_exercise
        if exercise is None:
            raise NotFound("exercise", exercise_key or "")
        key = exercise.exercise_key

        wb = self.workbook
        setup_table, catalog_table, sets_table = wb.read(wb.setup, wb.catalog, wb.sets)
        setup = wb.setup.get(email, key, setup_table)
        catalog = wb.catalog.get(key, catalog_table)
        history = sets_for_exercise(wb.sets.list_all(sets_table, user_email=email), key)

        logged = sorted((s for s in history if s.session_id == state.session_id), key=lambda s: s.set_number)
        active = prog.active_exercise
        if active is not None and active.exercise_key == key:
            set_number = state.current_set_number
        else:
            set_number = prog.next_set_for(exercise)

        policy = PrPolicy(
            include_skipped=self.settings.PR_INCLUDE_SKIPPED,
            include_open_session=self.settings.PR_INCLUDE_OPEN_SESSION,
        )
        pr = compute_pr_values(history, policy, open_session_id=state.session_id)
        previous = last_session_sets(history, exclude_session_id=state.session_id)
        requires_weight = resolve_requires_weight(setup, catalog)
        default = state.default_rest_seconds
        if default is None:
            default = self.settings.DEFAULT_REST_SECONDS

        weight, reps = self._suggest(prog, key, set_number, logged, previous)
        if reps is None:
            reps = exercise.target_rep_min

        return ExerciseView(
            exercise=exercise,
            catalog=catalog,
            setup=setup,
            requires_weight=requires_weight,
            rest_target_seconds=resolve_rest_target(exercise, setup, catalog, default),
            set_number=set_number,
            planned_sets=exercise.planned_sets,
            logged_sets=logged,
            last_session_sets=previous,
            suggested_weight=weight if requires_weight else None,
            suggested_reps=reps,
            pr=PrRead(
                max_weight=pr.max_weight,
                max_weight_times_reps=pr.max_weight_times_reps,
                include_skipped=policy.include_skipped,
                include_open_session=policy.include_open_session,
            ),
        )

    @staticmethod
    def _suggest(prog: Progression, key: str, set_number: int,
                 logged: list[SetRow], previous: list[SetRow]) -> tuple[Optional[float], Optional[int]]:
        """Draft input first, then this session's latest set, then the last session's."""
        draft = prog.draft_for(key, set_number)
        if draft is not None and (draft.weight is not None or draft.reps is not None):
            return draft.weight, draft.reps
        for source in (logged, previous):
            done = [s for s in live_sets(source) if not s.is_skipped]
            if done:
                latest = max(done, key=lambda s: (s.set_number, parse_timestamp(s.set_timestamp)))
                return latest.weight, latest.reps
        return None, None
