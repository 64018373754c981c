import logging
import uuid

from fastapi import APIRouter, Depends, Query, status

from liftlog.deps.auth import Principal, get_current_user
from liftlog.deps.sheets import get_coordinator, get_workbook
from liftlog.errors import LiftLogError
from liftlog.repositories.base import make_id
from liftlog.repositories.workbook import Workbook
from liftlog.schemas.exercise_set import CleanupResult, SessionSets, SetRow
from liftlog.schemas.session import (
    CommitResult, SessionCommit, SessionCreate, SessionCreated, SessionRow,
)
from liftlog.services.workout import WorkoutCoordinator

log = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])

@router.post("", response_model=SessionCreated, status_code=status.HTTP_201_CREATED)
def create_session(
    payload: SessionCreate,
    current: Principal = Depends(get_current_user),
    workbook: Workbook = Depends(get_workbook),
):
    row = workbook.sessions.create(SessionRow(
        session_id=make_id("sess"),
        user_email=current.email,
        plan_day=payload.plan_day,
        start_timestamp=payload.start_timestamp or "",
        timezone=payload.timezone,
        default_rest_seconds=payload.default_rest_seconds,
        notes=payload.notes or "",
    ))
    return SessionCreated(session_id=row.session_id, start_timestamp=row.start_timestamp)

@router.get("", response_model=list[SessionRow])
def list_my_sessions(
    current: Principal = Depends(get_current_user),
    workbook: Workbook = Depends(get_workbook),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    return workbook.sessions.list_for_user(current.email, limit=limit, offset=offset)

@router.post("/commit", response_model=CommitResult)
def commit_session(
    payload: SessionCommit,
    current: Principal = Depends(get_current_user),
    workbook: Workbook = Depends(get_workbook),
):
    """
    Write a finished session in three appends: session row, sets, notes.
    Nothing is rolled back; a failure names the step that broke.
    """
    error_id = uuid.uuid4().hex[:12]
    session = payload.session
    live = payload.sets
    completed = {s.exercise_key for s in live if not s.is_skipped}
    log.info("commit start: error_id=%s user=%s session=%s sets=%d notes=%d",
             error_id, current.email, session.session_id, len(live), len(payload.exercise_notes))

    step = "session"
    try:
        workbook.sessions.finish(SessionRow(
            session_id=session.session_id,
            user_email=current.email,
            plan_day=session.plan_day,
            start_timestamp=session.start_timestamp,
            end_timestamp=session.end_timestamp,
            timezone=session.timezone,
            exercises_planned=session.exercises_planned,
            exercises_completed=(
                session.exercises_completed if session.exercises_completed is not None else len(completed)
            ),
            total_sets_logged=len(live),
            default_rest_seconds=session.default_rest_seconds,
            notes=session.notes,
        ))
        log.info("commit %s: session row written", error_id)

        step = "sets"
        written = workbook.sets.append_many([
            SetRow(session_id=session.session_id, user_email=current.email, **s.model_dump(exclude_none=True))
            for s in live
        ])
        log.info("commit %s: %d set rows appended", error_id, len(written))

        step = "exercise_notes"
        notes_written = workbook.notes.append_many(
            session.session_id, [n.model_dump() for n in payload.exercise_notes]
        )
        log.info("commit %s: %d note rows appended", error_id, notes_written)
    except LiftLogError as e:
        log.error("commit %s failed at step %s: %s", error_id, step, e.message)
        e.extra.update({"step": step, "error_id": error_id, "session_id": session.session_id})
        raise

    return CommitResult(session_id=session.session_id, sets_written=len(written), notes_written=notes_written)

@router.get("/{session_id}/sets", response_model=SessionSets)
def list_session_sets(
    session_id: str,
    current: Principal = Depends(get_current_user),
    workbook: Workbook = Depends(get_workbook),
):
    table = workbook.sets.load()
    email = current.email.lower()
    sets = [
        s for s in workbook.sets.list_by_session(session_id, table)
        if not s.user_email or s.user_email.lower() == email
    ]
    return SessionSets(session_id=session_id, sets=sets, warnings=table.warnings)

@router.post("/{session_id}/sets/cleanup", response_model=CleanupResult)
def cleanup_session_sets(
    session_id: str,
    current: Principal = Depends(get_current_user),
    workbook: Workbook = Depends(get_workbook),
    coordinator: WorkoutCoordinator = Depends(get_coordinator),
):
    removed = workbook.sets.cleanup_incomplete(session_id)
    if removed:
        log.info("cleanup: user=%s session=%s removed=%d", current.email, session_id, removed)
        coordinator.reconcile(current.email, session_id)
    return CleanupResult(removed_count=removed)
