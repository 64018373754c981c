from fastapi import APIRouter, Depends, Query

from liftlog.deps.auth import Principal, get_current_user
from liftlog.deps.sheets import get_workbook
from liftlog.repositories.workbook import Workbook
from liftlog.schemas.setup import ExerciseSetupUpsert, SetupLookup, SetupSaved

router = APIRouter(prefix="/exercise-setup", tags=["exercise-setup"])

@router.get("", response_model=SetupLookup)
def get_setup(
    exercise_key: str = Query(..., min_length=1, max_length=120),
    current: Principal = Depends(get_current_user),
    workbook: Workbook = Depends(get_workbook),
):
    row = workbook.setup.get(current.email, exercise_key.strip())
    return SetupLookup(found=row is not None, row=row)

@router.put("", response_model=SetupSaved)
def put_setup(
    payload: ExerciseSetupUpsert,
    current: Principal = Depends(get_current_user),
    workbook: Workbook = Depends(get_workbook),
):
    created, setup_id = workbook.setup.upsert(current.email, payload)
    return SetupSaved(created=created, setup_id=setup_id)
