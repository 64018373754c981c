from typing import Annotated, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

from liftlog.schemas.catalog import CatalogRow
from liftlog.schemas.exercise_set import (
    KeyStr, NonNegFloat, NonNegInt, NotesStr, PosInt, Rpe, SetRow,
)
from liftlog.schemas.history import PrRead
from liftlog.schemas.plan import PlanRow
from liftlog.schemas.setup import ExerciseSetupRow

# --- persisted progression state ---

class RestState(BaseModel):
    started_at: float          # epoch seconds
    target_seconds: int
    cue_fired: bool = False

class DraftValues(BaseModel):
    weight: Optional[float] = None
    reps: Optional[int] = None

class WorkoutState(BaseModel):
    """The serialized in-progress workout of one user."""
    session_id: str
    user_email: str
    plan_day: str
    start_timestamp: str
    end_timestamp: Optional[str] = None
    timezone: str = "UTC"
    default_rest_seconds: Optional[int] = None
    plan: list[PlanRow] = []
    status: Literal["active", "finished"] = "active"
    current_exercise_index: int = 0
    current_set_number: int = 1
    sets: list[SetRow] = []
    # "<exercise_key>:<set_number>" -> typed but unsaved values
    drafts: dict[str, DraftValues] = {}
    exercise_notes: dict[str, str] = {}
    notes: str = ""
    rest: Optional[RestState] = None

# --- requests ---

class WorkoutStart(BaseModel):
    model_config = ConfigDict(extra="forbid")

    plan_day: KeyStr
    timezone: Annotated[str, Field(max_length=64)] = "UTC"
    default_rest_seconds: Optional[NonNegInt] = None

class SetInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    weight: Optional[NonNegFloat] = None
    reps: NonNegInt
    rpe: Optional[Rpe] = None
    rest_seconds: Optional[NonNegInt] = None
    notes: NotesStr = ""

class SkipInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    reason: NotesStr = ""
    rest_seconds: Optional[NonNegInt] = None

class DraftUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    exercise_key: KeyStr
    set_number: PosInt
    weight: Optional[NonNegFloat] = None
    reps: Optional[NonNegInt] = None

class NotesUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    notes: Optional[NotesStr] = None
    exercise_notes: dict[str, NotesStr] = {}

class JumpInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    exercise_key: KeyStr

class FinishInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    notes: Optional[NotesStr] = None

# --- responses ---

class RestStatus(BaseModel):
    resting: bool
    target_seconds: int = 0
    elapsed_seconds: int = 0
    remaining_seconds: int = 0
    overtime_seconds: int = 0
    # true exactly once, when the rest period first runs out
    cue: bool = False

class WorkoutView(BaseModel):
    state: WorkoutState
    active_exercise: Optional[PlanRow] = None
    exercises_planned: int
    exercises_completed: int
    total_sets_logged: int
    finished: bool

class ExerciseView(BaseModel):
    exercise: PlanRow
    catalog: Optional[CatalogRow] = None
    setup: Optional[ExerciseSetupRow] = None
    requires_weight: bool
    rest_target_seconds: int
    set_number: int
    planned_sets: int
    logged_sets: list[SetRow]
    last_session_sets: list[SetRow]
    suggested_weight: Optional[float] = None
    suggested_reps: Optional[int] = None
    pr: PrRead

class FinishResult(BaseModel):
    ok: bool = True
    session_id: str
    end_timestamp: str
    exercises_planned: int
    exercises_completed: int
    total_sets_logged: int
    notes_written: int
