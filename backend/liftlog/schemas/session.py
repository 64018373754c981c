from typing import Annotated, Optional
from pydantic import BaseModel, ConfigDict, Field

from liftlog.schemas.exercise_set import KeyStr, NonNegInt, NotesStr, Rpe, NonNegFloat, PosInt

TimestampStr = Annotated[str, Field(max_length=64)]

class SessionRow(BaseModel):
    """One WorkoutSessions row, decoded."""
    session_id: str
    user_email: str = ""
    plan_day: str = ""
    start_timestamp: str = ""
    end_timestamp: str = ""
    timezone: str = ""
    exercises_planned: Optional[int] = None
    exercises_completed: Optional[int] = None
    total_sets_logged: Optional[int] = None
    default_rest_seconds: Optional[int] = None
    notes: str = ""
    created_at: str = ""
    updated_at: str = ""

    @property
    def session_date(self) -> str:
        return self.end_timestamp or self.start_timestamp

class SessionCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    plan_day: KeyStr
    timezone: Annotated[str, Field(max_length=64)] = "UTC"
    start_timestamp: Optional[TimestampStr] = None
    default_rest_seconds: Optional[NonNegInt] = None
    notes: Optional[NotesStr] = None

class SessionCreated(BaseModel):
    ok: bool = True
    session_id: str
    start_timestamp: str

class CommitSession(BaseModel):
    model_config = ConfigDict(extra="forbid")

    session_id: KeyStr
    plan_day: KeyStr
    start_timestamp: TimestampStr
    end_timestamp: TimestampStr
    timezone: Annotated[str, Field(max_length=64)] = "UTC"
    exercises_planned: NonNegInt = 0
    # omitted -> exercises with at least one set that wasn't skipped
    exercises_completed: Optional[NonNegInt] = None
    default_rest_seconds: Optional[NonNegInt] = None
    notes: NotesStr = ""

class CommitSet(BaseModel):
    model_config = ConfigDict(extra="forbid")

    set_id: Optional[KeyStr] = None
    set_timestamp: Optional[TimestampStr] = None
    exercise_key: KeyStr
    exercise_name: KeyStr
    exercise_order: Optional[NonNegInt] = None
    set_number: PosInt
    weight: Optional[NonNegFloat] = None
    reps: Optional[NonNegInt] = None
    rpe: Optional[Rpe] = None
    is_skipped: bool = False
    skip_reason: NotesStr = ""
    rest_seconds: Optional[NonNegInt] = None
    rest_target_seconds: Optional[NonNegInt] = None
    notes: NotesStr = ""

class CommitExerciseNote(BaseModel):
    model_config = ConfigDict(extra="forbid")

    exercise_key: KeyStr
    exercise_name: str = ""
    exercise_order: Optional[NonNegInt] = None
    notes: NotesStr

class SessionCommit(BaseModel):
    """A whole finished session sent by the client in one request."""
    model_config = ConfigDict(extra="forbid")

    session: CommitSession
    sets: list[CommitSet] = []
    exercise_notes: list[CommitExerciseNote] = []

class CommitResult(BaseModel):
    ok: bool = True
    session_id: str
    sets_written: int
    notes_written: int
