from __future__ import annotations
from typing import Mapping, Optional

from liftlog.repositories.base import SheetTable, Table, iso_now
from liftlog.schemas.session import SessionRow
from liftlog.services.metrics import parse_timestamp
from liftlog.sheets.codec import as_int
from liftlog.sheets.layouts import SESSION_FIELDS

class SessionRepository(SheetTable[SessionRow]):
    fields = SESSION_FIELDS

    def to_model(self, cells: Mapping[str, str]) -> SessionRow:
        return SessionRow(
            session_id=cells["session_id"],
            user_email=cells["user_email"],
            plan_day=cells["plan_day"],
            start_timestamp=cells["start_timestamp"],
            end_timestamp=cells["end_timestamp"],
            timezone=cells["timezone"],
            exercises_planned=as_int(cells["exercises_planned"]),
            exercises_completed=as_int(cells["exercises_completed"]),
            total_sets_logged=as_int(cells["total_sets_logged"]),
            default_rest_seconds=as_int(cells["default_rest_seconds"]),
            notes=cells["notes"],
            created_at=cells["created_at"],
            updated_at=cells["updated_at"],
        )

    def get(self, session_id: str, table: Optional[Table] = None) -> Optional[SessionRow]:
        table = table or self.load()
        row = self.find(table, "session_id", session_id)
        return self.to_model(row.cells) if row else None

    def by_id(self, table: Optional[Table] = None) -> dict[str, SessionRow]:
        # a duplicated id resolves to its first row, the same one get() and finish() use
        out: dict[str, SessionRow] = {}
        for s in self.models(table or self.load()):
            if s.session_id:
                out.setdefault(s.session_id, s)
        return out

    def list_for_user(self, user_email: str, *, limit: int = 50, offset: int = 0) -> list[SessionRow]:
        email = user_email.lower()
        mine = [s for s in self.by_id().values() if not s.user_email or s.user_email.lower() == email]
        mine.sort(key=lambda s: parse_timestamp(s.start_timestamp or s.created_at), reverse=True)
        return mine[offset:offset + limit]

    def create(self, row: SessionRow) -> SessionRow:
        now = iso_now()
        row = row.model_copy(update={
            "start_timestamp": row.start_timestamp or now,
            "created_at": now,
            "updated_at": now,
        })
        self.append([row.model_dump()])
        return row

    def finish(self, row: SessionRow) -> SessionRow:
        """Write the finished session: in place if its row exists, else appended."""
        table = self.load()
        existing = self.find(table, "session_id", row.session_id)
        now = iso_now()
        row = row.model_copy(update={"updated_at": now, "created_at": row.created_at or now})
        if existing is None:
            self.append([row.model_dump()], table)
        else:
            values = row.model_dump()
            # keep the original creation stamp
            values["created_at"] = existing.cells.get("created_at") or values["created_at"]
            self.overwrite(table, existing, values)
        return row
