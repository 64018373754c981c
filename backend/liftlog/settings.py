from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict

from liftlog.errors import Misconfigured

# Tab settings that name a spreadsheet tab; an empty value means "not configured"
TAB_SETTINGS = (
    "SHEET_WORKOUT_PLAN",
    "SHEET_WORKOUT_SESSIONS",
    "SHEET_WORKOUT_SETS",
    "SHEET_WORKOUT_EXERCISE_NOTES",
    "SHEET_EXERCISE_SETUP",
    "SHEET_EXERCISE_CATALOG",
)

class Settings(BaseSettings):
    ENV: str = "local"

    # Spreadsheet
    SPREADSHEET_ID: str = ""
    SHEET_WORKOUT_PLAN: str = "WorkoutPlan"
    SHEET_WORKOUT_SESSIONS: str = "WorkoutSessions"
    SHEET_WORKOUT_SETS: str = "WorkoutSets"
    SHEET_WORKOUT_EXERCISE_NOTES: str = "WorkoutExerciseNotes"
    SHEET_EXERCISE_SETUP: str = "ExerciseSetup"
    SHEET_EXERCISE_CATALOG: str = "ExerciseCatalog"

    # Google OAuth
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""
    OAUTH_REDIRECT_URI: str = "http://localhost:8000/auth/callback"

    # App session tokens
    SECRET_KEY: str = "dev-secret-change-me"       # set a strong one in prod
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Progression draft store
    DATABASE_URL: str = "sqlite:///./liftlog.db"

    # Workout behaviour
    DEFAULT_REST_SECONDS: int = 120
    PR_INCLUDE_SKIPPED: bool = False
    PR_INCLUDE_OPEN_SESSION: bool = False
    HISTORY_MAX_SESSIONS: int = 12

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def require(self, *names: str) -> tuple[str, ...]:
        """
        Return the values of the given settings, raising Misconfigured
        with every empty one listed.
        """
        missing = [n for n in names if not str(getattr(self, n, "") or "").strip()]
        if missing:
            raise Misconfigured(missing)
        return tuple(str(getattr(self, n)).strip() for n in names)

    def tab(self, name: str) -> str:
        return self.require(name)[0]

@lru_cache
def get_settings() -> Settings:
    return Settings()
