"""
Test configuration: environment first, before anything imports the app,
then a fixture that swaps the spreadsheet for an in-memory fake.
"""
import os
import tempfile

_DB_PATH = os.path.join(tempfile.gettempdir(), f"liftlog_test_{os.getpid()}.db")
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_PATH}"
os.environ["SPREADSHEET_ID"] = "test-spreadsheet"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["GOOGLE_CLIENT_ID"] = ""
os.environ["GOOGLE_CLIENT_SECRET"] = ""

import pytest  # noqa: E402
from fastapi import Depends  # noqa: E402

from fakes import FakeSheetsClient, seeded_tabs  # noqa: E402
from liftlog.deps.sheets import get_workbook  # noqa: E402
from liftlog.main import app  # noqa: E402
from liftlog.repositories.workbook import Workbook  # noqa: E402
from liftlog.settings import Settings, get_settings  # noqa: E402


@pytest.fixture
def sheets():
    fake = FakeSheetsClient(seeded_tabs())

    def workbook(settings: Settings = Depends(get_settings)) -> Workbook:
        return Workbook(settings, lambda: fake)

    app.dependency_overrides[get_workbook] = workbook
    yield fake
    app.dependency_overrides.pop(get_workbook, None)


def pytest_sessionfinish(session, exitstatus):
    if os.path.exists(_DB_PATH):
        os.remove(_DB_PATH)
