"""
In-memory stand-in for SheetsClient plus small helpers shared by the tests.
Tabs are plain lists of string rows, header first, like the values API.
"""
import uuid

from liftlog.errors import BackendFailure
from liftlog.security import create_access_token

SET_HEADER = [
    "SetId", "SessionId", "UserEmail", "SetTimestamp", "ExerciseKey", "ExerciseName",
    "ExerciseOrder", "SetNumber", "Weight", "Reps", "RPE", "IsSkipped", "SkipReason",
    "RestSeconds", "RestTargetSeconds", "Notes", "CreatedAt", "UpdatedAt", "IsDeleted",
]
SESSION_HEADER = [
    "SessionId", "UserEmail", "PlanDay", "StartTimestamp", "EndTimestamp", "Timezone",
    "ExercisesPlanned", "ExercisesCompleted", "TotalSetsLogged", "DefaultRestSeconds",
    "Notes", "CreatedAt", "UpdatedAt",
]


class FakeSheetsClient:
    def __init__(self, tabs=None):
        self.tabs = {name: [list(r) for r in rows] for name, rows in (tabs or {}).items()}
        self.calls = []
        # operations ("read", "batch_read", "append", "update", "update_cells") that fail
        self.fail_on = set()

    def _call(self, op, tab):
        self.calls.append((op, tab))
        if op in self.fail_on:
            raise BackendFailure(f"{op} {tab}", 503, {"error": {"message": "backend unavailable"}})

    def rows(self, tab):
        return self.tabs.setdefault(tab, [])

    def read_tab(self, tab):
        self._call("read", tab)
        return [list(r) for r in self.tabs.get(tab, [])]

    def read_tabs(self, tabs):
        self._call("batch_read", ",".join(tabs))
        return {t: [list(r) for r in self.tabs.get(t, [])] for t in tabs}

    def list_tabs(self):
        self._call("list_tabs", "")
        return list(self.tabs)

    def append_rows(self, tab, rows):
        self._call("append", tab)
        self.rows(tab).extend([str(c) for c in r] for r in rows)
        return {}

    def update_row(self, tab, row_number, values):
        self._call("update", tab)
        row = self._row(tab, row_number)
        row.extend([""] * (len(values) - len(row)))
        row[:len(values)] = [str(v) for v in values]
        return {}

    def update_cells(self, tab, cells):
        self._call("update_cells", tab)
        for row_number, col, value in cells:
            row = self._row(tab, row_number)
            row.extend([""] * (col + 1 - len(row)))
            row[col] = value
        return {}

    def _row(self, tab, row_number):
        rows = self.rows(tab)
        while len(rows) < row_number:
            rows.append([])
        return rows[row_number - 1]


def unique_email():
    return f"u_{uuid.uuid4().hex[:10]}@example.com"


def auth_headers(email, google_token="ya29.test-token"):
    token = create_access_token(email, google_token=google_token)
    return {"Authorization": f"Bearer {token}"}


def set_row(set_id, session_id, email, ts, key, set_number, weight="", reps="",
            skipped="FALSE", deleted="FALSE", rpe="", name=None):
    """One WorkoutSets row in canonical column order."""
    return [
        set_id, session_id, email, ts, key, name or key.title(), "0", str(set_number),
        weight, reps, rpe, skipped, "", "", "", "", ts, ts, deleted,
    ]


def plan_tab():
    return [
        ["UserEmail", "DayKey", "SortOrder", "ExerciseKey", "ExerciseName", "PlannedSets",
         "TargetRepMin", "TargetRepMax", "YoutubeUrl", "DefaultRestSeconds"],
        # shared rows: no e-mail
        ["", "Push", "2", "dips", "Dips", "2", "6", "10", "", ""],
        ["", "Push", "1", "bench", "Bench Press", "3", "5", "8", "https://youtu.be/x", ""],
        ["", "Pull", "1", "row", "Barbell Row", "3", "8", "10", "", "75"],
        ["someone.else@example.com", "Legs", "1", "squat", "Squat", "5", "5", "5", "", ""],
    ]


def catalog_tab():
    return [
        ["ExerciseKey", "ExerciseName", "VideoUrl", "DefaultRequiresWeight", "DefaultRestSeconds", "IsActive"],
        ["bench", "Bench Press", "https://youtu.be/x", "TRUE", "90", "TRUE"],
        ["dips", "Dips", "", "FALSE", "60", "TRUE"],
        ["row", "Barbell Row", "", "TRUE", "", ""],
        ["clean", "Power Clean", "", "TRUE", "", "FALSE"],
    ]


def seeded_tabs():
    return {
        "WorkoutPlan": plan_tab(),
        "ExerciseCatalog": catalog_tab(),
        "WorkoutSessions": [],
        "WorkoutSets": [],
        "WorkoutExerciseNotes": [],
        "ExerciseSetup": [],
    }
