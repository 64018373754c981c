from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, status

from liftlog.deps.auth import Principal, get_current_user
from liftlog.deps.sheets import get_coordinator
from liftlog.schemas.workout import (
    DraftUpdate, ExerciseView, FinishInput, FinishResult, JumpInput, NotesUpdate, RestStatus,
    SetInput, SkipInput, WorkoutStart, WorkoutView,
)
from liftlog.services.workout import WorkoutCoordinator

router = APIRouter(prefix="/workout", tags=["workout"])

@router.get("/state", response_model=WorkoutView)
def get_state(
    current: Principal = Depends(get_current_user),
    coordinator: WorkoutCoordinator = Depends(get_coordinator),
):
    return coordinator.state(current.email)

@router.post("/start", response_model=WorkoutView, status_code=status.HTTP_201_CREATED)
def start(
    payload: WorkoutStart,
    current: Principal = Depends(get_current_user),
    coordinator: WorkoutCoordinator = Depends(get_coordinator),
):
    return coordinator.start(current.email, payload)

@router.post("/sets", response_model=WorkoutView, status_code=status.HTTP_201_CREATED)
def save_set(
    payload: SetInput,
    current: Principal = Depends(get_current_user),
    coordinator: WorkoutCoordinator = Depends(get_coordinator),
):
    return coordinator.save_set(current.email, payload)

@router.post("/skip", response_model=WorkoutView, status_code=status.HTTP_201_CREATED)
def skip_set(
    payload: SkipInput,
    current: Principal = Depends(get_current_user),
    coordinator: WorkoutCoordinator = Depends(get_coordinator),
):
    return coordinator.skip_set(current.email, payload)

@router.put("/drafts", response_model=WorkoutView)
def put_draft(
    payload: DraftUpdate,
    current: Principal = Depends(get_current_user),
    coordinator: WorkoutCoordinator = Depends(get_coordinator),
):
    return coordinator.set_draft(current.email, payload)

@router.put("/notes", response_model=WorkoutView)
def put_notes(
    payload: NotesUpdate,
    current: Principal = Depends(get_current_user),
    coordinator: WorkoutCoordinator = Depends(get_coordinator),
):
    return coordinator.update_notes(current.email, payload)

@router.post("/jump", response_model=WorkoutView)
def jump(
    payload: JumpInput,
    current: Principal = Depends(get_current_user),
    coordinator: WorkoutCoordinator = Depends(get_coordinator),
):
    return coordinator.jump(current.email, payload.exercise_key)

@router.get("/rest", response_model=RestStatus)
def rest(
    current: Principal = Depends(get_current_user),
    coordinator: WorkoutCoordinator = Depends(get_coordinator),
):
    return coordinator.rest(current.email)

@router.get("/exercise", response_model=ExerciseView)
def exercise(
    exercise_key: Optional[str] = Query(None, max_length=120),
    current: Principal = Depends(get_current_user),
    coordinator: WorkoutCoordinator = Depends(get_coordinator),
):
    """The active exercise unless `exercise_key` picks another one from the plan."""
    return coordinator.exercise_view(current.email, exercise_key)

@router.post("/finish", response_model=FinishResult)
def finish(
    payload: Optional[FinishInput] = Body(None),
    current: Principal = Depends(get_current_user),
    coordinator: WorkoutCoordinator = Depends(get_coordinator),
):
    return coordinator.finish(current.email, payload)

@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def abandon(
    current: Principal = Depends(get_current_user),
    coordinator: WorkoutCoordinator = Depends(get_coordinator),
):
    coordinator.abandon(current.email)
