import itertools
import random

from liftlog.sheets.codec import (
    HeaderMap, as_bool, as_float, as_int, column_letter, decode_row, encode_row,
    normalize_header, quote_tab, spec,
)
from liftlog.sheets.layouts import SET_FIELDS, SETUP_FIELDS, canonical_header

FIELDS = (
    spec("set_id", "SetId", fallback=0),
    spec("weight", "Weight", fallback=1),
    spec("reps", "Reps", fallback=2),
    spec("rpe", "RPE", fallback=3),
)

def test_normalize_header():
    assert normalize_header(" Set ID ") == "setid"
    assert normalize_header("set_id") == "setid"
    assert normalize_header(None) == ""

def test_any_header_order_resolves_by_name():
    values = {"SetId": "set_1", "Weight": "100", "Reps": "5", "RPE": "8.5"}
    for header in itertools.permutations(values):
        hm = HeaderMap.from_row(list(header))
        row = [values[h] for h in header]
        decoded = decode_row(hm, FIELDS, row)
        assert decoded == {"set_id": "set_1", "weight": "100", "reps": "5", "rpe": "8.5"}
        assert hm.fallbacks_used(FIELDS) == []

def test_full_set_layout_permutation():
    header = canonical_header(SET_FIELDS)
    rng = random.Random(7)
    for _ in range(25):
        shuffled = header[:]
        rng.shuffle(shuffled)
        hm = HeaderMap.from_row(shuffled)
        for fs in SET_FIELDS:
            assert shuffled[hm.index_of(fs)] == fs.aliases[0]

def test_aliases_and_first_occurrence_wins():
    hm = HeaderMap.from_row(["set_id", "weight", "Weight", "REPS"])
    assert hm.index_of(FIELDS[0]) == 0
    assert hm.index_of(FIELDS[1]) == 1
    assert hm.index_of(FIELDS[2]) == 3

def test_fallback_and_missing_reported():
    fields = FIELDS + (spec("notes", "Notes"),)
    hm = HeaderMap.from_row(["SetId", "Something", "Reps"])
    assert hm.index_of(fields[1]) == 1        # positional fallback
    assert hm.missing(fields) == ["notes"]
    assert hm.fallbacks_used(fields) == ["weight", "rpe"]
    problems = hm.describe_problems(fields, "WorkoutSets")
    assert "WorkoutSets: no column for notes" in problems[0]

def test_decode_short_row_never_raises():
    hm = HeaderMap.from_row(["SetId", "Weight", "Reps", "RPE"])
    assert decode_row(hm, FIELDS, ["set_1"]) == {"set_id": "set_1", "weight": "", "reps": "", "rpe": ""}
    assert decode_row(HeaderMap.from_row([]), (spec("notes", "Notes"),), []) == {"notes": ""}

def test_encode_pads_and_keeps_untouched_cells():
    hm = HeaderMap.from_row(["SetId", "Weight", "Reps", "RPE", "Extra"])
    row = encode_row(hm, FIELDS, {"weight": 102.5, "reps": None}, base=["set_1", "100", "5", "8", "keep"])
    assert row == ["set_1", "102.5", "", "8", "keep"]

    row = encode_row(hm, FIELDS, {"set_id": "s", "weight": 100.0})
    assert row == ["s", "100", "", "", ""]

def test_encode_truncates_to_layout_width():
    hm = HeaderMap.from_row(["SetId", "Weight"])
    row = encode_row(hm, FIELDS[:2], {"weight": 1}, base=["a", "b", "c", "d"])
    assert row == ["a", "1"]

def test_encode_bool_cells():
    hm = HeaderMap.from_row(canonical_header(SETUP_FIELDS))
    row = encode_row(hm, SETUP_FIELDS, {"is_deleted": False, "requires_weight": True})
    assert row[8] == "FALSE"
    assert row[9] == "TRUE"

def test_cell_parsers():
    assert as_float("100") == 100.0
    assert as_float(" 8.5 ") == 8.5
    assert as_float("") is None
    assert as_float("heavy") is None
    assert as_float("nan") is None
    assert as_int("5.0") == 5
    assert as_int("") is None
    assert as_bool("TRUE") is True
    assert as_bool("yes") is True
    assert as_bool("0") is False
    assert as_bool("maybe") is None

def test_a1_helpers():
    assert column_letter(1) == "A"
    assert column_letter(26) == "Z"
    assert column_letter(27) == "AA"
    assert column_letter(702) == "ZZ"
    assert quote_tab("Workout Sets") == "'Workout Sets'"
    assert quote_tab("Bob's") == "'Bob''s'"
