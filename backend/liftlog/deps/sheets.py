# liftlog/deps/sheets.py
from fastapi import Depends
from sqlalchemy.orm import Session

from liftlog.db import get_db
from liftlog.deps.auth import Principal, get_current_user
from liftlog.repositories.draft_repo import DraftRepository
from liftlog.repositories.workbook import Workbook
from liftlog.services.workout import WorkoutCoordinator
from liftlog.settings import Settings, get_settings
from liftlog.sheets.client import SheetsClient

def get_workbook(
    current: Principal = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
) -> Workbook:
    # built lazily: endpoints that never touch the sheet don't need it configured
    return Workbook(settings, lambda: SheetsClient(current.access_token, settings.SPREADSHEET_ID))

def get_coordinator(
    db: Session = Depends(get_db),
    workbook: Workbook = Depends(get_workbook),
    settings: Settings = Depends(get_settings),
) -> WorkoutCoordinator:
    return WorkoutCoordinator(DraftRepository(db), workbook, settings)
