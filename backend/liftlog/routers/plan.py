from fastapi import APIRouter, Depends, Query

from liftlog.deps.auth import Principal, get_current_user
from liftlog.deps.sheets import get_workbook
from liftlog.repositories.workbook import Workbook
from liftlog.schemas.plan import PlanRead

router = APIRouter(prefix="/plan", tags=["plan"])

@router.get("", response_model=PlanRead)
def get_plan(
    plan_day: str = Query("", max_length=120),
    current: Principal = Depends(get_current_user),
    workbook: Workbook = Depends(get_workbook),
):
    plan = workbook.plan.for_user(current.email, plan_day)
    return PlanRead(
        plan_day=plan_day.strip(),
        available_days=plan.available_days,
        plan_rows=plan.rows,
        warnings=plan.warnings,
    )
