from typing import Optional
from pydantic import BaseModel

class PlanRow(BaseModel):
    user_email: str = ""
    day_key: str
    sort_order: int = 0
    exercise_key: str
    exercise_name: str = ""
    planned_sets: int = 1
    target_rep_min: Optional[int] = None
    target_rep_max: Optional[int] = None
    video_url: str = ""
    default_rest_seconds: Optional[int] = None

class PlanRead(BaseModel):
    plan_day: str
    available_days: list[str]
    plan_rows: list[PlanRow]
    warnings: list[str] = []
