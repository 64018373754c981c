from fastapi.testclient import TestClient
import pytest

from fakes import auth_headers, unique_email
from liftlog.main import app
from liftlog.security import (
    GOOGLE_TOKEN_CLAIM, create_access_token, create_state_token, decode_token, verify_state_token,
)

client = TestClient(app)

# every endpoint that reads or writes user data
DATA_ENDPOINTS = [
    ("get", "/auth/me", None),
    ("get", "/diagnostics/tabs", None),
    ("get", "/plan", None),
    ("get", "/sessions", None),
    ("post", "/sessions", {"plan_day": "Push"}),
    ("post", "/sessions/commit", {"session": {
        "session_id": "s1", "plan_day": "Push",
        "start_timestamp": "2024-01-01T10:00:00Z", "end_timestamp": "2024-01-01T11:00:00Z"}}),
    ("get", "/sessions/s1/sets", None),
    ("post", "/sessions/s1/sets/cleanup", None),
    ("post", "/sets", {"session_id": "s1", "exercise_key": "bench", "exercise_name": "Bench", "reps": 5}),
    ("patch", "/sets/set_1", {"reps": 6}),
    ("delete", "/sets/set_1", None),
    ("get", "/exercise-setup?exercise_key=bench", None),
    ("put", "/exercise-setup", {"exercise_key": "bench"}),
    ("get", "/exercise-catalog?exercise_key=bench", None),
    ("get", "/exercise-catalog/all", None),
    ("get", "/history?exercise_key=bench", None),
    ("get", "/progress?session_id=s1", None),
    ("get", "/progress/exercise?exercise_key=bench", None),
    ("get", "/workout/state", None),
    ("post", "/workout/start", {"plan_day": "Push"}),
    ("post", "/workout/sets", {"weight": 60, "reps": 5}),
    ("post", "/workout/skip", {}),
    ("put", "/workout/drafts", {"exercise_key": "bench", "set_number": 1}),
    ("put", "/workout/notes", {"notes": "x"}),
    ("post", "/workout/jump", {"exercise_key": "bench"}),
    ("get", "/workout/rest", None),
    ("get", "/workout/exercise", None),
    ("post", "/workout/finish", None),
    ("delete", "/workout", None),
]

def _call(method, path, body, headers=None):
    kwargs = {"headers": headers or {}}
    if body is not None:
        kwargs["json"] = body
    return client.request(method.upper(), path, **kwargs)

@pytest.mark.parametrize("method,path,body", DATA_ENDPOINTS)
def test_data_endpoints_require_sign_in(sheets, method, path, body):
    r = _call(method, path, body)
    assert r.status_code == 401
    assert r.json()["error"] == "unauthorized"
    assert r.headers["WWW-Authenticate"] == "Bearer"
    # nothing reached the spreadsheet
    assert sheets.calls == []

def test_garbage_token_is_401(sheets):
    r = client.get("/sessions", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401
    assert r.json()["error"] == "unauthorized"

def test_expired_token_is_401(sheets):
    expired = create_access_token(unique_email(), google_token="ya29.x", expires_minutes=-1)
    r = client.get("/plan", headers={"Authorization": f"Bearer {expired}"})
    assert r.status_code == 401
    assert r.json()["message"] == "Session expired"

def test_token_without_google_token_is_401(sheets):
    token = create_access_token(unique_email())
    r = client.get("/plan", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401

def test_me_returns_email():
    email = unique_email()
    r = client.get("/auth/me", headers=auth_headers(email))
    assert r.status_code == 200
    assert r.json() == {"user_email": email}

def test_session_token_never_outlives_google_token():
    from datetime import datetime, timedelta, timezone
    google_expiry = datetime.now(timezone.utc) + timedelta(minutes=5)
    token = create_access_token("a@example.com", google_token="ya29.x", google_expiry=google_expiry)
    payload = decode_token(token)
    assert payload[GOOGLE_TOKEN_CLAIM] == "ya29.x"
    assert payload["exp"] <= int(google_expiry.timestamp())

def test_state_token_round_trip():
    assert verify_state_token(create_state_token())
    # a session token is not a state token
    assert not verify_state_token(create_access_token("a@example.com"))
    assert not verify_state_token("garbage")

def test_callback_rejects_bad_state():
    r = client.get("/auth/callback", params={"code": "abc", "state": "forged"})
    assert r.status_code == 401
    assert r.json()["error"] == "unauthorized"

def test_login_without_oauth_client_is_misconfigured():
    r = client.get("/auth/login")
    assert r.status_code == 500
    body = r.json()
    assert body["error"] == "misconfigured"
    assert body["missing"] == ["GOOGLE_CLIENT_ID", "GOOGLE_CLIENT_SECRET"]

def test_login_returns_google_url():
    from liftlog.settings import Settings, get_settings
    app.dependency_overrides[get_settings] = lambda: Settings(
        GOOGLE_CLIENT_ID="client-id.apps.googleusercontent.com", GOOGLE_CLIENT_SECRET="shh",
    )
    try:
        r = client.get("/auth/login")
    finally:
        app.dependency_overrides.pop(get_settings, None)
    assert r.status_code == 200
    url = r.json()["authorization_url"]
    assert url.startswith("https://accounts.google.com/o/oauth2/auth")
    assert "access_type=offline" in url
    assert "prompt=consent" in url
    assert "spreadsheets" in url

def test_callback_issues_session_token(monkeypatch):
    from liftlog.oauth import GoogleIdentity
    from liftlog.routers import auth as auth_router

    email = unique_email()
    monkeypatch.setattr(
        auth_router, "exchange_code",
        lambda settings, code, state: GoogleIdentity(email=email, access_token="ya29.fresh", expiry=None),
    )
    r = client.get("/auth/callback", params={"code": "abc", "state": create_state_token()})
    assert r.status_code == 200
    body = r.json()
    assert body["user_email"] == email
    assert body["token_type"] == "bearer"

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.json() == {"user_email": email}

def test_diagnostics_me_anonymous():
    r = client.get("/diagnostics/me")
    assert r.status_code == 200
    assert r.json() == {
        "signed_in": False,
        "user_email": None,
        "has_access_token": False,
        "has_spreadsheet_id": True,
    }

def test_diagnostics_me_signed_in():
    email = unique_email()
    r = client.get("/diagnostics/me", headers=auth_headers(email))
    body = r.json()
    assert body["signed_in"] is True
    assert body["user_email"] == email
    assert body["has_access_token"] is True

def test_diagnostics_tabs(sheets):
    del sheets.tabs["ExerciseSetup"]
    r = client.get("/diagnostics/tabs", headers=auth_headers(unique_email()))
    assert r.status_code == 200
    body = r.json()
    assert "WorkoutSets" in body["tabs"]
    assert body["missing"] == ["SHEET_EXERCISE_SETUP"]
