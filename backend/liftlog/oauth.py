# liftlog/oauth.py
"""
Google sign-in: authorization-code flow with offline access and the
spreadsheet scope. Token refresh and expiry are left to google-auth; the
rest of the app only ever sees the short-lived access token.
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from google.auth.transport.requests import Request
from google.oauth2 import id_token
from google_auth_oauthlib.flow import Flow

from liftlog.settings import Settings

SCOPES = [
    "openid",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
    "https://www.googleapis.com/auth/spreadsheets",
]

@dataclass(slots=True)
class GoogleIdentity:
    email: str
    access_token: str
    expiry: Optional[datetime]

def build_flow(settings: Settings, state: Optional[str] = None) -> Flow:
    client_id, client_secret = settings.require("GOOGLE_CLIENT_ID", "GOOGLE_CLIENT_SECRET")
    client_config = {
        "web": {
            "client_id": client_id,
            "client_secret": client_secret,
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": "https://oauth2.googleapis.com/token",
            "redirect_uris": [settings.OAUTH_REDIRECT_URI],
        }
    }
    return Flow.from_client_config(
        client_config,
        scopes=SCOPES,
        state=state,
        redirect_uri=settings.OAUTH_REDIRECT_URI,
        # the state token is stateless, so there is nowhere to keep a PKCE verifier
        autogenerate_code_verifier=False,
    )

def authorization_url(settings: Settings, state: str) -> str:
    url, _ = build_flow(settings, state=state).authorization_url(
        access_type="offline",
        prompt="consent",
        include_granted_scopes="true",
    )
    return url

def exchange_code(settings: Settings, code: str, state: str) -> GoogleIdentity:
    flow = build_flow(settings, state=state)
    flow.fetch_token(code=code)
    creds = flow.credentials
    info = id_token.verify_oauth2_token(creds.id_token, Request(), settings.GOOGLE_CLIENT_ID)
    return GoogleIdentity(email=info["email"], access_token=creds.token, expiry=creds.expiry)
