from __future__ import annotations
from typing import Mapping, Optional

from liftlog.repositories.base import SheetTable, Table
from liftlog.schemas.catalog import CatalogRow
from liftlog.sheets.codec import as_bool, as_int
from liftlog.sheets.layouts import CATALOG_FIELDS

class CatalogRepository(SheetTable[CatalogRow]):
    fields = CATALOG_FIELDS

    def to_model(self, cells: Mapping[str, str]) -> CatalogRow:
        return CatalogRow(
            exercise_key=cells["exercise_key"],
            exercise_name=cells["exercise_name"],
            video_url=cells["video_url"],
            default_requires_weight=as_bool(cells["default_requires_weight"]),
            default_rest_seconds=as_int(cells["default_rest_seconds"]),
            is_active=as_bool(cells["is_active"]),
        )

    def get(self, exercise_key: str, table: Optional[Table] = None) -> Optional[CatalogRow]:
        row = self.find(table or self.load(), "exercise_key", exercise_key)
        return self.to_model(row.cells) if row else None

    def list(self, *, active_only: bool = False) -> list[CatalogRow]:
        rows = [c for c in self.models(self.load()) if c.exercise_key]
        if active_only:
            # unset IsActive counts as active
            rows = [c for c in rows if c.is_active is not False]
        return rows
