# liftlog/sheets/codec.py
"""
Header-driven row codec.

Spreadsheet tabs are edited by hand, so columns get reordered and renamed
("SetId", "set_id", "Set ID"...). Fields are resolved by normalized header
name first, then by an optional positional fallback, and a field that cannot
be resolved is simply absent: decoding never raises.
"""
from __future__ import annotations
from dataclasses import dataclass, field
import math
import re
from typing import Any, Iterable, Mapping, Optional, Sequence

_NON_ALNUM = re.compile(r"[^a-z0-9]")

TRUE_VALUES = {"true", "yes", "1"}
FALSE_VALUES = {"false", "no", "0"}


def as_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def normalize_header(value: Any) -> str:
    return _NON_ALNUM.sub("", as_str(value).lower())


@dataclass(frozen=True, slots=True)
class FieldSpec:
    name: str
    aliases: tuple[str, ...]
    fallback: Optional[int] = None

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(normalize_header(a) for a in self.aliases)


def spec(name: str, *aliases: str, fallback: Optional[int] = None) -> FieldSpec:
    return FieldSpec(name=name, aliases=aliases or (name,), fallback=fallback)


@dataclass(slots=True)
class HeaderMap:
    header: list[str]
    positions: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_row(cls, header_row: Optional[Sequence[Any]]) -> "HeaderMap":
        header = [as_str(v) for v in (header_row or [])]
        positions: dict[str, int] = {}
        for idx, value in enumerate(header):
            key = normalize_header(value)
            # first occurrence wins
            if key and key not in positions:
                positions[key] = idx
        return cls(header=header, positions=positions)

    @property
    def width(self) -> int:
        return len(self.header)

    def matched_index(self, fs: FieldSpec) -> Optional[int]:
        for key in fs.keys:
            if key in self.positions:
                return self.positions[key]
        return None

    def index_of(self, fs: FieldSpec) -> Optional[int]:
        idx = self.matched_index(fs)
        if idx is not None:
            return idx
        return fs.fallback

    def missing(self, specs: Iterable[FieldSpec]) -> list[str]:
        """Fields with neither a header match nor a fallback column."""
        return [fs.name for fs in specs if self.index_of(fs) is None]

    def fallbacks_used(self, specs: Iterable[FieldSpec]) -> list[str]:
        return [
            fs.name for fs in specs
            if self.matched_index(fs) is None and fs.fallback is not None
        ]

    def row_width(self, specs: Iterable[FieldSpec]) -> int:
        resolved = [i for i in (self.index_of(fs) for fs in specs) if i is not None]
        return max([self.width] + [i + 1 for i in resolved])

    def describe_problems(self, specs: Sequence[FieldSpec], tab: str) -> list[str]:
        problems = []
        missing = self.missing(specs)
        if missing:
            problems.append(f"{tab}: no column for {', '.join(missing)}")
        guessed = self.fallbacks_used(specs)
        if guessed and self.width:
            problems.append(f"{tab}: header not recognised for {', '.join(guessed)}; using default column positions")
        return problems


def decode_row(header_map: HeaderMap, specs: Iterable[FieldSpec], row: Sequence[Any]) -> dict[str, str]:
    out: dict[str, str] = {}
    for fs in specs:
        idx = header_map.index_of(fs)
        out[fs.name] = as_str(row[idx]) if idx is not None and 0 <= idx < len(row) else ""
    return out


def encode_row(
    header_map: HeaderMap,
    specs: Sequence[FieldSpec],
    values: Mapping[str, Any],
    base: Optional[Sequence[Any]] = None,
) -> list[str]:
    """
    Lay `values` out by column. Cells of `base` that no value touches are kept.
    The result is padded or truncated to the tab's width.
    """
    width = header_map.row_width(specs)
    row = [as_str(v) for v in (base or [])][:width]
    row.extend([""] * (width - len(row)))
    for fs in specs:
        if fs.name not in values:
            continue
        idx = header_map.index_of(fs)
        if idx is None:
            continue
        row[idx] = format_cell(values[fs.name])
    return row


def format_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return format_bool(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_bool(value: bool) -> str:
    return "TRUE" if value else "FALSE"


def as_bool(value: Any) -> Optional[bool]:
    raw = as_str(value).lower()
    if raw in TRUE_VALUES:
        return True
    if raw in FALSE_VALUES:
        return False
    return None


def as_float(value: Any) -> Optional[float]:
    raw = as_str(value)
    if not raw:
        return None
    try:
        num = float(raw)
    except ValueError:
        return None
    return num if math.isfinite(num) else None


def as_int(value: Any) -> Optional[int]:
    num = as_float(value)
    if num is None:
        return None
    return int(num)


def column_letter(column: int) -> str:
    """1-based column number to its A1 letters (1 -> A, 27 -> AA)."""
    result = ""
    value = column
    while value > 0:
        value, remainder = divmod(value - 1, 26)
        result = chr(65 + remainder) + result
    return result or "A"


def quote_tab(tab: str) -> str:
    return "'" + tab.replace("'", "''") + "'"
