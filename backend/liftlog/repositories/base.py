# liftlog/repositories/base.py
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Generic, Iterator, Mapping, Optional, Sequence, TypeVar
import uuid

from liftlog.sheets.client import Rows, SheetsClient
from liftlog.sheets.codec import FieldSpec, HeaderMap, decode_row, encode_row
from liftlog.sheets.layouts import canonical_header

T = TypeVar("T")

def iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")

def make_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:16]}"

@dataclass(slots=True)
class TableRow:
    number: int              # 1-based sheet row
    cells: dict[str, str]    # decoded by field name
    raw: list[str]

@dataclass(slots=True)
class Table:
    header_map: HeaderMap
    rows: list[TableRow]
    warnings: list[str] = field(default_factory=list)

    def __iter__(self) -> Iterator[TableRow]:
        return iter(self.rows)

class SheetTable(Generic[T]):
    """
    Base for repositories over one spreadsheet tab.

    There is no index: lookups read the whole tab and scan an identifier
    column, so every call is bounded by the tab's row count.
    """
    fields: tuple[FieldSpec, ...] = ()

    def __init__(self, client: SheetsClient, tab: str):
        self.client = client
        self.tab = tab

    def to_model(self, cells: Mapping[str, str]) -> T:
        raise NotImplementedError

    # READS
    def load(self, rows: Optional[Rows] = None) -> Table:
        """Decode the tab (or rows already fetched with a batch read)."""
        if rows is None:
            rows = self.client.read_tab(self.tab)
        header_row, data = (rows[0], rows[1:]) if rows else ([], [])
        header_map = HeaderMap.from_row(header_row)
        table_rows = [
            TableRow(number=i + 2, cells=decode_row(header_map, self.fields, raw), raw=list(raw))
            for i, raw in enumerate(data)
            # cleared rows stay behind as blanks
            if any(str(c).strip() for c in raw)
        ]
        warnings = header_map.describe_problems(self.fields, self.tab) if rows else []
        return Table(header_map=header_map, rows=table_rows, warnings=warnings)

    def models(self, table: Table) -> list[T]:
        return [self.to_model(r.cells) for r in table]

    def find(self, table: Table, field_name: str, value: str) -> Optional[TableRow]:
        wanted = value.strip()
        for row in table:
            if row.cells.get(field_name, "") == wanted:
                return row
        return None

    def column_of(self, table: Table, field_name: str) -> Optional[int]:
        """Column of a field only if it really exists in the tab."""
        for fs in self.fields:
            if fs.name == field_name:
                idx = table.header_map.index_of(fs)
                if idx is not None and idx < table.header_map.width:
                    return idx
        return None

    # WRITES
    def append(self, values: Sequence[Mapping[str, Any]], table: Optional[Table] = None) -> None:
        if not values:
            return
        header_map = table.header_map if table is not None else self._header_map()
        rows = []
        if header_map.width == 0:
            # empty tab: write our header so the rows can be read back by name
            header = canonical_header(self.fields)
            rows.append(header)
            header_map = HeaderMap.from_row(header)
        rows.extend(encode_row(header_map, self.fields, v) for v in values)
        self.client.append_rows(self.tab, rows)

    def overwrite(self, table: Table, row: TableRow, values: Mapping[str, Any]) -> list[str]:
        updated = encode_row(table.header_map, self.fields, values, base=row.raw)
        self.client.update_row(self.tab, row.number, updated)
        return updated

    def _header_map(self) -> HeaderMap:
        rows = self.client.read_tab(self.tab)
        return HeaderMap.from_row(rows[0] if rows else [])
