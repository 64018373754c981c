from typing import Optional
from pydantic import BaseModel, ConfigDict

from liftlog.schemas.exercise_set import KeyStr, NonNegInt, NotesStr

class ExerciseSetupRow(BaseModel):
    setup_id: str = ""
    user_email: str
    exercise_key: str
    default_rest_seconds: Optional[int] = None
    requires_weight: Optional[bool] = None
    notes: str = ""
    setup_json: str = ""
    created_at: str = ""
    updated_at: str = ""

class ExerciseSetupUpsert(BaseModel):
    model_config = ConfigDict(extra="forbid")

    exercise_key: KeyStr
    default_rest_seconds: Optional[NonNegInt] = None
    requires_weight: bool = True
    notes: NotesStr = ""
    setup_json: NotesStr = ""

class SetupLookup(BaseModel):
    found: bool
    row: Optional[ExerciseSetupRow] = None

class SetupSaved(BaseModel):
    ok: bool = True
    created: bool
    setup_id: str
