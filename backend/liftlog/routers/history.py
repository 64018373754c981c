import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from liftlog.deps.auth import Principal, get_current_user
from liftlog.deps.sheets import get_workbook
from liftlog.repositories.workbook import Workbook
from liftlog.schemas.history import (
    ExerciseProgressRead, ExerciseSeries, HistoryRead, PrRead, ProgressPoint, ProgressSession,
    ProgressSet, SessionProgressRead, SessionSummaryRead,
)
from liftlog.services import metrics
from liftlog.settings import Settings, get_settings

log = logging.getLogger(__name__)

router = APIRouter(tags=["history"])

def _summary(e: metrics.SessionSummary) -> SessionSummaryRead:
    return SessionSummaryRead(
        session_id=e.session_id,
        session_date=e.session_date,
        set_count=e.set_count,
        top_set_weight=e.top_set_weight,
        total_reps=e.total_reps,
        total_volume=e.total_volume,
        best_weight_times_reps=e.best_weight_times_reps,
    )

@router.get("/history", response_model=HistoryRead)
def exercise_history(
    exercise_key: str = Query(..., min_length=1, max_length=120),
    exclude_session_id: Optional[str] = Query(None),
    include_skipped: Optional[bool] = Query(None),
    include_open_session: Optional[bool] = Query(None),
    current: Principal = Depends(get_current_user),
    workbook: Workbook = Depends(get_workbook),
    settings: Settings = Depends(get_settings),
):
    """
    Last session, recent sets, PRs and a trend for one exercise.
    `exclude_session_id` is the session in progress, if any.
    """
    sessions_table, sets_table = workbook.read(workbook.sessions, workbook.sets)
    sessions = workbook.sessions.by_id(sessions_table)
    sets = metrics.sets_for_exercise(workbook.sets.list_all(sets_table, user_email=current.email), exercise_key)
    log.info("history: user=%s exercise=%s matched=%d", current.email, exercise_key, len(sets))

    policy = metrics.PrPolicy(
        include_skipped=settings.PR_INCLUDE_SKIPPED if include_skipped is None else include_skipped,
        include_open_session=(
            settings.PR_INCLUDE_OPEN_SESSION if include_open_session is None else include_open_session
        ),
    )
    pr = metrics.compute_pr_values(sets, policy, open_session_id=exclude_session_id)

    last = metrics.last_session_sets(sets, exclude_session_id=exclude_session_id)
    past = [s for s in sets if not exclude_session_id or s.session_id != exclude_session_id]
    recent = metrics.recent_sessions(past, limit=settings.HISTORY_MAX_SESSIONS, sessions=sessions)
    recent_sets = sorted(
        past,
        key=lambda s: metrics.parse_timestamp(s.set_timestamp),
        reverse=True,
    )[:20]
    last_date = None
    if last:
        row = sessions.get(last[0].session_id)
        last_date = (row.session_date if row else "") or max(s.set_timestamp for s in last)

    return HistoryRead(
        exercise_key=exercise_key,
        last_session_date=last_date,
        sets=last,
        recent_sets=recent_sets,
        pr=PrRead(
            max_weight=pr.max_weight,
            max_weight_times_reps=pr.max_weight_times_reps,
            include_skipped=policy.include_skipped,
            include_open_session=policy.include_open_session,
        ),
        trend=[_summary(e) for e in metrics.chronological(recent)],
    )

@router.get("/progress", response_model=SessionProgressRead)
def session_progress(
    session_id: str = Query(..., min_length=1),
    limit: int = Query(4, ge=1, le=metrics.MAX_TREND_SESSIONS),
    current: Principal = Depends(get_current_user),
    workbook: Workbook = Depends(get_workbook),
):
    sessions_table, sets_table = workbook.read(workbook.sessions, workbook.sets)
    series = metrics.session_progress(
        workbook.sessions.by_id(sessions_table),
        workbook.sets.list_all(sets_table, user_email=current.email),
        session_id,
        limit=limit,
    )
    return SessionProgressRead(
        user_email=current.email,
        session_id=session_id,
        exercises=[
            ExerciseSeries(
                exercise_key=s.exercise_key,
                exercise_name=s.exercise_name,
                series=[ProgressPoint(date=p.date, weight=p.weight, reps=p.reps) for p in s.series],
            )
            for s in series
        ],
    )

@router.get("/progress/exercise", response_model=ExerciseProgressRead)
def exercise_progress(
    exercise_key: str = Query(..., min_length=1, max_length=120),
    limit: int = Query(4, ge=1, le=metrics.MAX_TREND_SESSIONS),
    current: Principal = Depends(get_current_user),
    workbook: Workbook = Depends(get_workbook),
):
    sessions_table, sets_table = workbook.read(workbook.sessions, workbook.sets)
    name, summaries = metrics.exercise_progress(
        workbook.sessions.by_id(sessions_table),
        workbook.sets.list_all(sets_table, user_email=current.email),
        exercise_key,
        limit=limit,
    )
    return ExerciseProgressRead(
        exercise_key=exercise_key,
        exercise_name=name,
        sessions=[
            ProgressSession(
                session_id=e.session_id,
                session_date=e.session_date,
                sets=[
                    ProgressSet(
                        set_number=s.set_number,
                        set_timestamp=s.set_timestamp,
                        weight=s.weight or 0.0,
                        reps=s.reps or 0,
                        rest_seconds=s.rest_seconds or 0,
                        rpe=s.rpe,
                    )
                    for s in e.sets if not s.is_skipped
                ],
                top_set_weight=e.top_set_weight,
                total_reps=e.total_reps,
                total_volume=e.total_volume,
            )
            for e in summaries
        ],
    )
