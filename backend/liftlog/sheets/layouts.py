# liftlog/sheets/layouts.py
# Column layouts of each tab: canonical header first, then the variants seen in the wild.
from liftlog.sheets.codec import FieldSpec, spec


def _positional(*fields: tuple) -> tuple[FieldSpec, ...]:
    # Fallback column = position in the canonical layout
    return tuple(spec(name, *aliases, fallback=i) for i, (name, *aliases) in enumerate(fields))


PLAN_FIELDS = (
    spec("user_email", "UserEmail"),
    spec("day_key", "DayKey", "PlanDay", "plan_day", fallback=0),
    spec("sort_order", "SortOrder", "ExerciseOrder", "exercise_order", fallback=1),
    spec("exercise_key", "ExerciseKey", "ExerciseId", "exercise_id", fallback=2),
    spec("exercise_name", "ExerciseName", "exercise_name", fallback=3),
    spec("planned_sets", "PlannedSets", "Sets", fallback=4),
    spec("target_rep_min", "TargetRepMin", "target_rep_min", fallback=5),
    spec("target_rep_max", "TargetRepMax", "target_rep_max", fallback=6),
    spec("video_url", "YoutubeUrl", "youtube_url", "VideoUrl", fallback=7),
    spec("default_rest_seconds", "DefaultRestSeconds", "DefaultRest"),
)

SESSION_FIELDS = _positional(
    ("session_id", "SessionId", "session_id"),
    ("user_email", "UserEmail"),
    ("plan_day", "PlanDay", "DayKey", "WorkoutName"),
    ("start_timestamp", "StartTimestamp", "start_timestamp", "SessionDate"),
    ("end_timestamp", "EndTimestamp", "end_timestamp"),
    ("timezone", "Timezone"),
    ("exercises_planned", "ExercisesPlanned", "exercises_planned"),
    ("exercises_completed", "ExercisesCompleted", "exercises_completed"),
    ("total_sets_logged", "TotalSetsLogged", "total_sets_logged"),
    ("default_rest_seconds", "DefaultRestSeconds", "default_rest_seconds"),
    ("notes", "Notes"),
    ("created_at", "CreatedAt", "created_at"),
    ("updated_at", "UpdatedAt", "updated_at"),
)

SET_FIELDS = _positional(
    ("set_id", "SetId", "set_id"),
    ("session_id", "SessionId", "session_id"),
    ("user_email", "UserEmail"),
    ("set_timestamp", "SetTimestamp", "set_timestamp"),
    ("exercise_key", "ExerciseKey", "ExerciseId", "exercise_id"),
    ("exercise_name", "ExerciseName", "exercise_name"),
    ("exercise_order", "ExerciseOrder", "exercise_order"),
    ("set_number", "SetNumber", "set_number"),
    ("weight", "Weight"),
    ("reps", "Reps"),
    ("rpe", "RPE"),
    ("is_skipped", "IsSkipped", "is_skipped"),
    ("skip_reason", "SkipReason", "skip_reason"),
    ("rest_seconds", "RestSeconds", "RestSec", "rest_seconds"),
    ("rest_target_seconds", "RestTargetSeconds", "RestTargetSec", "rest_target_seconds"),
    ("notes", "Notes"),
    ("created_at", "CreatedAt", "created_at"),
    ("updated_at", "UpdatedAt", "updated_at"),
    ("is_deleted", "IsDeleted", "is_deleted"),
)

SETUP_FIELDS = (
    spec("setup_id", "SetupId", fallback=0),
    spec("user_email", "UserEmail", fallback=1),
    spec("exercise_key", "ExerciseKey", "ExerciseId", "exercise_id", fallback=2),
    spec("default_rest_seconds", "DefaultRestSeconds", "DefaultRest", fallback=3),
    spec("notes", "Notes", fallback=4),
    spec("setup_json", "SetupJson", fallback=5),
    spec("created_at", "CreatedAt", fallback=6),
    spec("updated_at", "UpdatedAt", fallback=7),
    spec("is_deleted", "IsDeleted", fallback=8),
    spec("requires_weight", "RequiresWeight"),
)

CATALOG_FIELDS = (
    spec("exercise_key", "ExerciseKey", "ExerciseId", "exercise_id", fallback=0),
    spec("exercise_name", "ExerciseName", "exercise_name", fallback=1),
    spec("video_url", "VideoUrl", "video_url", "YoutubeUrl", fallback=2),
    spec("default_requires_weight", "DefaultRequiresWeight", "RequiresWeight"),
    spec("default_rest_seconds", "DefaultRestSeconds", "DefaultRest", fallback=4),
    spec("is_active", "IsActive", fallback=5),
)

EXERCISE_NOTE_FIELDS = _positional(
    ("session_id", "SessionId", "session_id"),
    ("exercise_key", "ExerciseKey", "ExerciseId", "exercise_id"),
    ("exercise_name", "ExerciseName", "exercise_name"),
    ("exercise_order", "ExerciseOrder", "exercise_order"),
    ("notes", "Notes"),
    ("updated_at", "UpdatedAt", "updated_at"),
)

# Header rows written when a tab is empty
def canonical_header(fields: tuple[FieldSpec, ...]) -> list[str]:
    return [fs.aliases[0] for fs in fields]
