from typing import Optional
from pydantic import BaseModel

from liftlog.schemas.exercise_set import SetRow

class PrRead(BaseModel):
    max_weight: Optional[float] = None
    max_weight_times_reps: Optional[float] = None
    include_skipped: bool
    include_open_session: bool

class SessionSummaryRead(BaseModel):
    session_id: str
    session_date: str
    set_count: int
    top_set_weight: float
    total_reps: int
    total_volume: float
    best_weight_times_reps: float

class HistoryRead(BaseModel):
    exercise_key: str
    last_session_date: Optional[str] = None
    sets: list[SetRow]
    recent_sets: list[SetRow]
    pr: PrRead
    # oldest -> newest, for charting
    trend: list[SessionSummaryRead]

class ProgressPoint(BaseModel):
    date: str
    weight: float
    reps: int

class ExerciseSeries(BaseModel):
    exercise_key: str
    exercise_name: str
    series: list[ProgressPoint]

class SessionProgressRead(BaseModel):
    user_email: str
    session_id: str
    exercises: list[ExerciseSeries]

class ProgressSet(BaseModel):
    set_number: int
    set_timestamp: str
    weight: float
    reps: int
    rest_seconds: int
    rpe: Optional[float] = None

class ProgressSession(BaseModel):
    session_id: str
    session_date: str
    sets: list[ProgressSet]
    top_set_weight: float
    total_reps: int
    total_volume: float

class ExerciseProgressRead(BaseModel):
    exercise_key: str
    exercise_name: str
    # newest first
    sessions: list[ProgressSession]
