from fastapi import APIRouter, Depends, Query

from liftlog.deps.auth import Principal, get_current_user
from liftlog.deps.sheets import get_workbook
from liftlog.repositories.workbook import Workbook
from liftlog.schemas.catalog import CatalogLookup, CatalogRow

router = APIRouter(prefix="/exercise-catalog", tags=["exercise-catalog"])

@router.get("", response_model=CatalogLookup)
def get_catalog_entry(
    exercise_key: str = Query(..., min_length=1, max_length=120),
    current: Principal = Depends(get_current_user),
    workbook: Workbook = Depends(get_workbook),
):
    row = workbook.catalog.get(exercise_key.strip())
    return CatalogLookup(found=row is not None, row=row)

@router.get("/all", response_model=list[CatalogRow])
def list_catalog(
    active_only: bool = Query(False),
    current: Principal = Depends(get_current_user),
    workbook: Workbook = Depends(get_workbook),
):
    return workbook.catalog.list(active_only=active_only)
