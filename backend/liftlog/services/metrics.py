# liftlog/services/metrics.py
"""
History & metrics over the WorkoutSets log.

Everything here is a pure function over rows already fetched from the
spreadsheet: one linear pass per call, no caching. Row counts are personal
scale (hundreds to low thousands).

Soft-deleted rows never count. Whether skip-flagged sets and sets of the
session still in progress count towards personal records is a `PrPolicy`
decision made by the caller.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Mapping, Optional, Sequence

from liftlog.schemas.exercise_set import SetRow
from liftlog.schemas.plan import PlanRow
from liftlog.schemas.session import SessionRow

MAX_TREND_SESSIONS = 12


def parse_timestamp(value: Optional[str]) -> float:
    """Epoch seconds of an ISO-8601 timestamp, 0.0 when it can't be parsed."""
    if not value:
        return 0.0
    raw = value.strip()
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(raw)
    except ValueError:
        return 0.0
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp()


def live_sets(sets: Iterable[SetRow]) -> list[SetRow]:
    return [s for s in sets if not s.is_deleted]


def sets_for_exercise(sets: Iterable[SetRow], exercise_key: str) -> list[SetRow]:
    key = exercise_key.strip().lower()
    return [s for s in live_sets(sets) if s.exercise_key.lower() == key]


def next_set_number(planned_set_count: Optional[int], logged_set_numbers: Iterable[Optional[int]]) -> int:
    """
    First unlogged set number, capped at the planned count:
    min(planned, max(logged) + 1), and 1 when nothing is logged yet.
    """
    planned = max(1, planned_set_count or 1)
    nums = [n for n in logged_set_numbers if n is not None and n > 0]
    max_logged = max(nums) if nums else 0
    return max(1, min(planned, max_logged + 1))


# ---------------------------------------------------------------- records

@dataclass(frozen=True, slots=True)
class PrPolicy:
    include_skipped: bool = False
    include_open_session: bool = False


@dataclass(slots=True)
class PrValues:
    max_weight: Optional[float] = None
    max_weight_times_reps: Optional[float] = None


def compute_pr_values(
    sets: Iterable[SetRow],
    policy: PrPolicy = PrPolicy(),
    open_session_id: Optional[str] = None,
) -> PrValues:
    max_weight: Optional[float] = None
    max_product: Optional[float] = None

    for s in live_sets(sets):
        if s.is_skipped and not policy.include_skipped:
            continue
        if open_session_id and s.session_id == open_session_id and not policy.include_open_session:
            continue

        if s.weight is not None and (max_weight is None or s.weight > max_weight):
            max_weight = s.weight

        # bodyweight movements: no weight counts as x1, not x0
        used_weight = s.weight if s.weight and s.weight > 0 else 1.0
        product = used_weight * (s.reps or 0)
        if max_product is None or product > max_product:
            max_product = product

    return PrValues(max_weight=max_weight, max_weight_times_reps=max_product)


# ---------------------------------------------------------------- sessions

@dataclass(slots=True)
class SessionSummary:
    session_id: str
    session_date: str = ""
    last_seen: float = 0.0
    set_count: int = 0
    top_set_weight: float = 0.0
    top_set_reps: int = 0
    total_reps: int = 0
    total_volume: float = 0.0
    best_weight_times_reps: float = 0.0
    sets: list[SetRow] = field(default_factory=list)


def summarize_sessions(
    sets: Iterable[SetRow],
    sessions: Optional[Mapping[str, SessionRow]] = None,
) -> dict[str, SessionSummary]:
    """Single pass: session id -> running aggregates of its live sets."""
    sessions = sessions or {}
    out: dict[str, SessionSummary] = {}
    dated: set[str] = set()

    for s in live_sets(sets):
        entry = out.get(s.session_id)
        if entry is None:
            row = sessions.get(s.session_id)
            entry = SessionSummary(session_id=s.session_id, session_date=row.session_date if row else "")
            if entry.session_date:
                dated.add(s.session_id)
            out[s.session_id] = entry

        entry.sets.append(s)
        entry.set_count += 1
        entry.last_seen = max(entry.last_seen, parse_timestamp(s.set_timestamp))
        # without a session row, the session is dated by its latest set
        if s.session_id not in dated and s.set_timestamp > entry.session_date:
            entry.session_date = s.set_timestamp

        if s.is_skipped:
            continue
        weight = s.weight or 0.0
        reps = s.reps or 0
        if weight > entry.top_set_weight or (weight == entry.top_set_weight and reps > entry.top_set_reps):
            entry.top_set_weight = weight
            entry.top_set_reps = reps
        entry.total_reps += reps
        entry.total_volume += weight * reps
        entry.best_weight_times_reps = max(entry.best_weight_times_reps, (weight if weight > 0 else 1.0) * reps)

    for entry in out.values():
        entry.sets.sort(key=lambda r: (r.set_number, parse_timestamp(r.set_timestamp)))
        # a known session date beats the latest set timestamp
        entry.last_seen = parse_timestamp(entry.session_date) or entry.last_seen
    return out


def _newest_first(summaries: Iterable[SessionSummary]) -> list[SessionSummary]:
    return sorted(summaries, key=lambda e: (e.last_seen, e.session_date), reverse=True)


def recent_sessions(
    sets: Iterable[SetRow],
    limit: int = MAX_TREND_SESSIONS,
    sessions: Optional[Mapping[str, SessionRow]] = None,
) -> list[SessionSummary]:
    """The `limit` (at most 12) most recent sessions, newest first."""
    limit = max(1, min(limit, MAX_TREND_SESSIONS))
    return _newest_first(summarize_sessions(sets, sessions).values())[:limit]


def chronological(summaries: Sequence[SessionSummary]) -> list[SessionSummary]:
    """Oldest first, the order charts want."""
    return list(reversed(summaries))


def last_session_sets(sets: Iterable[SetRow], exclude_session_id: Optional[str] = None) -> list[SetRow]:
    """Sets of the most recent session (by set timestamp), ordered by set number."""
    candidates = [s for s in live_sets(sets) if not (exclude_session_id and s.session_id == exclude_session_id)]
    if not candidates:
        return []
    latest = max(candidates, key=lambda s: (parse_timestamp(s.set_timestamp), s.set_timestamp))
    same = [s for s in candidates if s.session_id == latest.session_id]
    return sorted(same, key=lambda s: s.set_number)


# ---------------------------------------------------------------- progress

@dataclass(slots=True)
class ProgressPoint:
    date: str
    weight: float
    reps: int


@dataclass(slots=True)
class ExerciseSeries:
    exercise_key: str
    exercise_name: str
    series: list[ProgressPoint]


def session_progress(
    sessions: Mapping[str, SessionRow],
    sets: Sequence[SetRow],
    session_id: str,
    limit: int = 4,
) -> list[ExerciseSeries]:
    """
    For each exercise done in `session_id`: its top set per session over the
    last `limit` sessions, oldest to newest.
    """
    in_session = [s for s in live_sets(sets) if s.session_id == session_id]
    exercises: dict[str, str] = {}
    for s in in_session:
        exercises.setdefault(s.exercise_key, s.exercise_name)

    out = []
    for key, name in exercises.items():
        summaries = recent_sessions(sets_for_exercise(sets, key), limit=limit, sessions=sessions)
        series = [
            ProgressPoint(date=e.session_date, weight=e.top_set_weight, reps=e.top_set_reps)
            for e in chronological(summaries)
        ]
        out.append(ExerciseSeries(exercise_key=key, exercise_name=name, series=series))
    return out


def exercise_progress(
    sessions: Mapping[str, SessionRow],
    sets: Sequence[SetRow],
    exercise_key: str,
    limit: int = 4,
) -> tuple[str, list[SessionSummary]]:
    """(exercise name, last `limit` sessions newest first)"""
    matching = sets_for_exercise(sets, exercise_key)
    name = matching[0].exercise_name if matching else ""
    return name, recent_sessions(matching, limit=limit, sessions=sessions)


# ---------------------------------------------------------------- plan

def logged_set_count(sets: Iterable[SetRow], exercise_key: str) -> int:
    return len(sets_for_exercise(sets, exercise_key))


def completed_exercise_count(plan: Sequence[PlanRow], sets: Sequence[SetRow]) -> int:
    """Exercises whose logged (non-deleted) set count reached the planned count."""
    return sum(1 for p in plan if logged_set_count(sets, p.exercise_key) >= max(1, p.planned_sets))
