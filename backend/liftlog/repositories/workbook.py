from __future__ import annotations
from functools import cached_property
from typing import Callable

from liftlog.repositories.base import SheetTable, Table
from liftlog.repositories.catalog_repo import CatalogRepository
from liftlog.repositories.note_repo import ExerciseNoteRepository
from liftlog.repositories.plan_repo import PlanRepository
from liftlog.repositories.session_repo import SessionRepository
from liftlog.repositories.set_repo import SetRepository
from liftlog.repositories.setup_repo import ExerciseSetupRepository
from liftlog.settings import Settings
from liftlog.sheets.client import SheetsClient

class Workbook:
    """
    The user's spreadsheet, one repository per tab. The client and each tab
    name are resolved on first use, so a missing setting only fails the
    endpoints that need it.
    """
    def __init__(self, settings: Settings, client_factory: Callable[[], SheetsClient]):
        self.settings = settings
        self._client_factory = client_factory

    @cached_property
    def client(self) -> SheetsClient:
        return self._client_factory()

    @cached_property
    def plan(self) -> PlanRepository:
        return PlanRepository(self.client, self.settings.tab("SHEET_WORKOUT_PLAN"))

    @cached_property
    def sessions(self) -> SessionRepository:
        return SessionRepository(self.client, self.settings.tab("SHEET_WORKOUT_SESSIONS"))

    @cached_property
    def sets(self) -> SetRepository:
        return SetRepository(self.client, self.settings.tab("SHEET_WORKOUT_SETS"))

    @cached_property
    def notes(self) -> ExerciseNoteRepository:
        return ExerciseNoteRepository(self.client, self.settings.tab("SHEET_WORKOUT_EXERCISE_NOTES"))

    @cached_property
    def setup(self) -> ExerciseSetupRepository:
        return ExerciseSetupRepository(self.client, self.settings.tab("SHEET_EXERCISE_SETUP"))

    @cached_property
    def catalog(self) -> CatalogRepository:
        return CatalogRepository(self.client, self.settings.tab("SHEET_EXERCISE_CATALOG"))

    def read(self, *repos: SheetTable) -> list[Table]:
        """Load several tabs with one batch read, in the order given."""
        rows = self.client.read_tabs([r.tab for r in repos])
        return [r.load(rows.get(r.tab, [])) for r in repos]
