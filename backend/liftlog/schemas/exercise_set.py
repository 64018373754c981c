from typing import Annotated, Optional
from pydantic import AfterValidator, BaseModel, ConfigDict, Field

PosInt = Annotated[int, Field(ge=1)]
NonNegInt = Annotated[int, Field(ge=0)]
NonNegFloat = Annotated[float, Field(ge=0, le=2000)]
NotesStr = Annotated[str, Field(max_length=2000)]


def check_rpe(v: float) -> float:
    # 1-10 in half-point steps
    if v < 1 or v > 10 or (v * 2) != int(v * 2):
        raise ValueError("rpe must be between 1 and 10 in steps of 0.5")
    return v


def strip_required(v: str) -> str:
    v2 = v.strip()
    if not v2:
        raise ValueError("must not be blank")
    return v2


KeyStr = Annotated[str, Field(min_length=1, max_length=120), AfterValidator(strip_required)]
Rpe = Annotated[float, AfterValidator(check_rpe)]


class SetRow(BaseModel):
    """One WorkoutSets row, decoded."""
    set_id: str = ""
    session_id: str
    user_email: str = ""
    set_timestamp: str = ""
    exercise_key: str
    exercise_name: str = ""
    exercise_order: Optional[int] = None
    set_number: int = 0
    weight: Optional[float] = None
    reps: Optional[int] = None
    rpe: Optional[float] = None
    is_skipped: bool = False
    skip_reason: str = ""
    rest_seconds: Optional[int] = None
    rest_target_seconds: Optional[int] = None
    notes: str = ""
    created_at: str = ""
    updated_at: str = ""
    is_deleted: bool = False


class SetCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    session_id: KeyStr
    exercise_key: KeyStr
    exercise_name: KeyStr
    exercise_order: Optional[NonNegInt] = None
    # omitted -> next unlogged set number for (session, exercise)
    set_number: Optional[PosInt] = None
    planned_sets: Optional[PosInt] = None
    weight: Optional[NonNegFloat] = None
    reps: Optional[NonNegInt] = None
    rpe: Optional[Rpe] = None
    is_skipped: bool = False
    skip_reason: Optional[NotesStr] = None
    rest_seconds: Optional[NonNegInt] = None
    rest_target_seconds: Optional[NonNegInt] = None
    notes: Optional[NotesStr] = None


class SetUpdate(BaseModel):
    """Only the fields present in the body are written."""
    model_config = ConfigDict(extra="forbid")

    set_number: Optional[PosInt] = None
    weight: Optional[NonNegFloat] = None
    reps: Optional[NonNegInt] = None
    rpe: Optional[Rpe] = None
    is_skipped: Optional[bool] = None
    skip_reason: Optional[NotesStr] = None
    rest_seconds: Optional[NonNegInt] = None
    rest_target_seconds: Optional[NonNegInt] = None
    notes: Optional[NotesStr] = None

    def changes(self) -> dict:
        return {name: getattr(self, name) for name in self.model_fields_set}


class SetCreated(BaseModel):
    ok: bool = True
    set_id: str
    set_number: int


class SetUpdated(BaseModel):
    ok: bool = True
    set_id: str
    row_number: int


class SessionSets(BaseModel):
    session_id: str
    sets: list[SetRow]
    warnings: list[str] = []


class CleanupResult(BaseModel):
    removed_count: int
