from __future__ import annotations
from typing import Mapping, Optional

from liftlog.repositories.base import SheetTable, Table, TableRow, iso_now, make_id
from liftlog.schemas.setup import ExerciseSetupRow, ExerciseSetupUpsert
from liftlog.sheets.codec import as_bool, as_int
from liftlog.sheets.layouts import SETUP_FIELDS

class ExerciseSetupRepository(SheetTable[ExerciseSetupRow]):
    fields = SETUP_FIELDS

    def to_model(self, cells: Mapping[str, str]) -> ExerciseSetupRow:
        return ExerciseSetupRow(
            setup_id=cells["setup_id"],
            user_email=cells["user_email"],
            exercise_key=cells["exercise_key"],
            default_rest_seconds=as_int(cells["default_rest_seconds"]),
            requires_weight=as_bool(cells["requires_weight"]),
            notes=cells["notes"],
            setup_json=cells["setup_json"],
            created_at=cells["created_at"],
            updated_at=cells["updated_at"],
        )

    def _match(self, table: Table, user_email: str, exercise_key: str, *, live_only: bool) -> Optional[TableRow]:
        email = user_email.lower()
        for row in table:
            if live_only and as_bool(row.cells["is_deleted"]):
                continue
            if row.cells["user_email"].lower() == email and row.cells["exercise_key"] == exercise_key:
                return row
        return None

    def get(self, user_email: str, exercise_key: str, table: Optional[Table] = None) -> Optional[ExerciseSetupRow]:
        row = self._match(table or self.load(), user_email, exercise_key, live_only=True)
        return self.to_model(row.cells) if row else None

    def upsert(self, user_email: str, payload: ExerciseSetupUpsert) -> tuple[bool, str]:
        """Create if absent, else update in place. Returns (created, setup_id)."""
        table = self.load()
        now = iso_now()
        values = {
            "user_email": user_email,
            "exercise_key": payload.exercise_key,
            "default_rest_seconds": payload.default_rest_seconds,
            "requires_weight": payload.requires_weight,
            "notes": payload.notes,
            "setup_json": payload.setup_json,
            "updated_at": now,
        }
        existing = self._match(table, user_email, payload.exercise_key, live_only=False)
        if existing is not None:
            self.overwrite(table, existing, {**values, "is_deleted": False})
            return False, existing.cells["setup_id"]

        setup_id = make_id("setup")
        self.append([{**values, "setup_id": setup_id, "created_at": now, "is_deleted": False}], table)
        return True, setup_id
