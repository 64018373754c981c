from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import secrets

from jose import jwt
from jose.exceptions import JWTError
from liftlog.settings import get_settings

# Claim holding the Google access token inside our own session token
GOOGLE_TOKEN_CLAIM = "gat"
STATE_PURPOSE = "oauth_state"
STATE_EXPIRE_MINUTES = 10

def create_access_token(
    sub: str,
    *,
    google_token: Optional[str] = None,
    google_expiry: Optional[datetime] = None,
    expires_minutes: Optional[int] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> str:
    s = get_settings()
    now = datetime.now(timezone.utc)
    exp = now + timedelta(minutes=expires_minutes or s.ACCESS_TOKEN_EXPIRE_MINUTES)
    if google_expiry is not None:
        # google-auth reports naive UTC datetimes
        if google_expiry.tzinfo is None:
            google_expiry = google_expiry.replace(tzinfo=timezone.utc)
        exp = min(exp, google_expiry)
    payload: Dict[str, Any] = {
        "sub": sub,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    if google_token:
        payload[GOOGLE_TOKEN_CLAIM] = google_token
    if extra:
        payload.update(extra)
    return jwt.encode(payload, s.SECRET_KEY, algorithm=s.ALGORITHM)

def decode_token(token: str) -> Dict[str, Any]:
    """
    Verify signature and expiration. Raise if token is expired/invalid.
    """
    s = get_settings()
    payload = jwt.decode(
        token,
        s.SECRET_KEY,
        algorithms=[s.ALGORITHM],
        options={
            "verify_signature": True,
            "verify_exp": True,
        },
    )
    if "exp" not in payload:
        raise JWTError("Missing exp")
    return payload

def create_state_token() -> str:
    """Signed, short-lived OAuth `state` value; nothing needs to be stored server-side."""
    return create_access_token(
        secrets.token_urlsafe(16),
        expires_minutes=STATE_EXPIRE_MINUTES,
        extra={"purpose": STATE_PURPOSE},
    )

def verify_state_token(state: str) -> bool:
    try:
        payload = decode_token(state)
    except JWTError:
        return False
    return payload.get("purpose") == STATE_PURPOSE
