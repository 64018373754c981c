from __future__ import annotations
from typing import Mapping, Sequence

from liftlog.repositories.base import SheetTable, iso_now
from liftlog.sheets.codec import as_int
from liftlog.sheets.layouts import EXERCISE_NOTE_FIELDS

class ExerciseNoteRepository(SheetTable[dict]):
    """Per-session, per-exercise notes; written once when a session is finished."""
    fields = EXERCISE_NOTE_FIELDS

    def to_model(self, cells: Mapping[str, str]) -> dict:
        return {**cells, "exercise_order": as_int(cells["exercise_order"])}

    def append_many(self, session_id: str, notes: Sequence[Mapping[str, object]]) -> int:
        now = iso_now()
        rows = [
            {**n, "session_id": session_id, "updated_at": now}
            for n in notes
            if str(n.get("notes") or "").strip()
        ]
        self.append(rows)
        return len(rows)
