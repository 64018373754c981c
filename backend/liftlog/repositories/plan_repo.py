from __future__ import annotations
from dataclasses import dataclass
from typing import Mapping, Optional

from liftlog.repositories.base import SheetTable, Table
from liftlog.schemas.plan import PlanRow
from liftlog.sheets.codec import as_int
from liftlog.sheets.layouts import PLAN_FIELDS

@dataclass(slots=True)
class UserPlan:
    rows: list[PlanRow]
    available_days: list[str]
    warnings: list[str]

class PlanRepository(SheetTable[PlanRow]):
    """WorkoutPlan is reference data: read-only from here, edited in the sheet."""
    fields = PLAN_FIELDS

    def to_model(self, cells: Mapping[str, str]) -> PlanRow:
        return PlanRow(
            user_email=cells["user_email"],
            day_key=cells["day_key"],
            sort_order=as_int(cells["sort_order"]) or 0,
            exercise_key=cells["exercise_key"],
            exercise_name=cells["exercise_name"],
            planned_sets=max(1, as_int(cells["planned_sets"]) or 1),
            target_rep_min=as_int(cells["target_rep_min"]),
            target_rep_max=as_int(cells["target_rep_max"]),
            video_url=cells["video_url"],
            default_rest_seconds=as_int(cells["default_rest_seconds"]),
        )

    def for_user(self, user_email: str, plan_day: str = "", table: Optional[Table] = None) -> UserPlan:
        """
        The user's rows (rows without an e-mail are shared), optionally
        narrowed to one day, ordered by SortOrder.
        """
        table = table or self.load()
        email = user_email.lower()
        mine = [
            p for p in self.models(table)
            if p.exercise_key and (not p.user_email or p.user_email.lower() == email)
        ]
        days = sorted({p.day_key for p in mine if p.day_key})
        if plan_day:
            wanted = plan_day.strip().lower()
            mine = [p for p in mine if p.day_key.lower() == wanted]
        mine.sort(key=lambda p: p.sort_order)
        return UserPlan(rows=mine, available_days=days, warnings=table.warnings)
