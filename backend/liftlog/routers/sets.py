from fastapi import APIRouter, Depends, status

from liftlog.deps.auth import Principal, get_current_user
from liftlog.deps.sheets import get_coordinator, get_workbook
from liftlog.errors import ValidationFailure
from liftlog.repositories.workbook import Workbook
from liftlog.schemas.exercise_set import SetCreate, SetCreated, SetRow, SetUpdate, SetUpdated
from liftlog.services.workout import WorkoutCoordinator

router = APIRouter(prefix="/sets", tags=["sets"])

@router.post("", response_model=SetCreated, status_code=status.HTTP_201_CREATED)
def create_set(
    payload: SetCreate,
    current: Principal = Depends(get_current_user),
    workbook: Workbook = Depends(get_workbook),
    coordinator: WorkoutCoordinator = Depends(get_coordinator),
):
    if not payload.is_skipped and payload.reps is None:
        raise ValidationFailure("reps is required unless the set is skipped")

    repo = workbook.sets
    table = repo.load()
    set_number = payload.set_number or repo.next_number(
        payload.session_id, payload.exercise_key, payload.planned_sets, table
    )
    row = repo.create(SetRow(
        session_id=payload.session_id,
        user_email=current.email,
        exercise_key=payload.exercise_key,
        exercise_name=payload.exercise_name,
        exercise_order=payload.exercise_order,
        set_number=set_number,
        weight=payload.weight,
        reps=payload.reps,
        rpe=payload.rpe,
        is_skipped=payload.is_skipped,
        skip_reason=payload.skip_reason or "",
        rest_seconds=payload.rest_seconds,
        rest_target_seconds=payload.rest_target_seconds,
        notes=payload.notes or "",
    ), table)
    coordinator.reconcile(current.email, payload.session_id)
    return SetCreated(set_id=row.set_id, set_number=row.set_number)

@router.patch("/{set_id}", response_model=SetUpdated)
def update_set(
    set_id: str,
    payload: SetUpdate,
    current: Principal = Depends(get_current_user),
    workbook: Workbook = Depends(get_workbook),
    coordinator: WorkoutCoordinator = Depends(get_coordinator),
):
    changes = payload.changes()
    if not changes:
        raise ValidationFailure("Nothing to update")
    row = workbook.sets.update(set_id, changes)
    coordinator.reconcile(current.email, row.cells["session_id"])
    return SetUpdated(set_id=set_id, row_number=row.number)

@router.delete("/{set_id}", response_model=SetUpdated)
def delete_set(
    set_id: str,
    current: Principal = Depends(get_current_user),
    workbook: Workbook = Depends(get_workbook),
    coordinator: WorkoutCoordinator = Depends(get_coordinator),
):
    row = workbook.sets.soft_delete(set_id)
    coordinator.reconcile(current.email, row.cells["session_id"])
    return SetUpdated(set_id=set_id, row_number=row.number)
