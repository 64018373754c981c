from __future__ import annotations
from typing import Any, Mapping, Optional, Sequence

from liftlog.errors import NotFound
from liftlog.repositories.base import SheetTable, Table, TableRow, iso_now, make_id
from liftlog.schemas.exercise_set import SetRow
from liftlog.services.metrics import live_sets, next_set_number
from liftlog.sheets.codec import as_bool, as_float, as_int, format_bool
from liftlog.sheets.layouts import SET_FIELDS

class SetRepository(SheetTable[SetRow]):
    fields = SET_FIELDS

    def to_model(self, cells: Mapping[str, str]) -> SetRow:
        return SetRow(
            set_id=cells["set_id"],
            session_id=cells["session_id"],
            user_email=cells["user_email"],
            set_timestamp=cells["set_timestamp"] or cells["created_at"],
            exercise_key=cells["exercise_key"],
            exercise_name=cells["exercise_name"],
            exercise_order=as_int(cells["exercise_order"]),
            set_number=as_int(cells["set_number"]) or 0,
            weight=as_float(cells["weight"]),
            reps=as_int(cells["reps"]),
            rpe=as_float(cells["rpe"]),
            is_skipped=bool(as_bool(cells["is_skipped"])),
            skip_reason=cells["skip_reason"],
            rest_seconds=as_int(cells["rest_seconds"]),
            rest_target_seconds=as_int(cells["rest_target_seconds"]),
            notes=cells["notes"],
            created_at=cells["created_at"],
            updated_at=cells["updated_at"],
            is_deleted=bool(as_bool(cells["is_deleted"])),
        )

    # READS
    def list_all(self, table: Optional[Table] = None, *, user_email: Optional[str] = None) -> list[SetRow]:
        """Live rows. Rows with no owner recorded are treated as the caller's."""
        rows = live_sets(self.models(table or self.load()))
        if user_email:
            email = user_email.lower()
            rows = [s for s in rows if not s.user_email or s.user_email.lower() == email]
        return rows

    def list_by_session(self, session_id: str, table: Optional[Table] = None) -> list[SetRow]:
        rows = [s for s in self.list_all(table) if s.session_id == session_id]
        return sorted(rows, key=lambda s: (s.exercise_order if s.exercise_order is not None else 0, s.set_number))

    def next_number(self, session_id: str, exercise_key: str, planned_sets: Optional[int] = None,
                    table: Optional[Table] = None) -> int:
        logged = [s.set_number for s in self.list_by_session(session_id, table) if s.exercise_key == exercise_key]
        if planned_sets is None:
            # no plan to cap against
            planned_sets = max(logged, default=0) + 1
        return next_set_number(planned_sets, logged)

    # WRITES
    def create(self, row: SetRow, table: Optional[Table] = None) -> SetRow:
        now = iso_now()
        row = row.model_copy(update={
            "set_id": row.set_id or make_id("set"),
            "set_timestamp": row.set_timestamp or now,
            "created_at": now,
            "updated_at": now,
            "is_deleted": False,
        })
        self.append([row.model_dump()], table)
        return row

    def append_many(self, rows: Sequence[SetRow]) -> list[SetRow]:
        now = iso_now()
        stamped = [
            r.model_copy(update={
                "set_id": r.set_id or make_id("set"),
                "set_timestamp": r.set_timestamp or now,
                "created_at": now,
                "updated_at": now,
            })
            for r in rows
        ]
        self.append([r.model_dump() for r in stamped])
        return stamped

    def update(self, set_id: str, changes: Mapping[str, Any]) -> TableRow:
        table = self.load()
        row = self.find(table, "set_id", set_id)
        if row is None:
            raise NotFound("set", set_id)
        self.overwrite(table, row, {**changes, "updated_at": iso_now()})
        return row

    def soft_delete(self, set_id: str) -> TableRow:
        table = self.load()
        row = self.find(table, "set_id", set_id)
        if row is None:
            raise NotFound("set", set_id)
        self._delete_rows(table, [row.number])
        return row

    def cleanup_incomplete(self, session_id: str) -> int:
        """
        Soft-delete rows of a session that were left half written: no exercise,
        no set number, or no reps on a set that wasn't skipped.
        """
        table = self.load()
        doomed = []
        for r in table:
            s = self.to_model(r.cells)
            if s.session_id != session_id or s.is_deleted:
                continue
            if not s.exercise_key or not s.set_number or (s.reps is None and not s.is_skipped):
                doomed.append(r.number)
        self._delete_rows(table, doomed)
        return len(doomed)

    def _delete_rows(self, table: Table, numbers: list[int]) -> None:
        if not numbers:
            return
        col = self.column_of(table, "is_deleted")
        if col is not None:
            self.client.update_cells(self.tab, [(n, col, format_bool(True)) for n in numbers])
            return
        # no IsDeleted column: blank the rows instead
        width = max([table.header_map.width] + [len(r.raw) for r in table if r.number in numbers])
        self.client.update_cells(
            self.tab, [(n, c, "") for n in numbers for c in range(width)]
        )
