# liftlog/deps/auth.py
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose.exceptions import ExpiredSignatureError, JWTError

from liftlog.errors import Unauthorized
from liftlog.security import GOOGLE_TOKEN_CLAIM, decode_token

# Exposes Bearer auth in Swagger; the callback endpoint issues the token.
# auto_error is off so a missing header gets our JSON 401, not FastAPI's.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/callback", auto_error=False)

@dataclass(frozen=True, slots=True)
class Principal:
    email: str
    access_token: str

def get_current_user(token: Optional[str] = Depends(oauth2_scheme)) -> Principal:
    if not token:
        raise Unauthorized()
    try:
        payload = decode_token(token)
    except ExpiredSignatureError:
        raise Unauthorized("Session expired")
    except JWTError:
        raise Unauthorized("Invalid token")

    sub = payload.get("sub")
    google_token = payload.get(GOOGLE_TOKEN_CLAIM)
    if not sub or not google_token:
        raise Unauthorized("Invalid token")
    return Principal(email=str(sub), access_token=str(google_token))

def get_optional_user(token: Optional[str] = Depends(oauth2_scheme)) -> Optional[Principal]:
    """Same checks as get_current_user, but anonymous callers get None."""
    if not token:
        return None
    try:
        return get_current_user(token)
    except Unauthorized:
        return None
