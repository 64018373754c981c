import logging

from fastapi import APIRouter, Depends, Query

from liftlog.deps.auth import Principal, get_current_user
from liftlog.errors import Unauthorized
from liftlog.oauth import authorization_url, exchange_code
from liftlog.security import create_access_token, create_state_token, verify_state_token
from liftlog.settings import Settings, get_settings

log = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

@router.get("/login")
def login(settings: Settings = Depends(get_settings)):
    return {"authorization_url": authorization_url(settings, create_state_token())}

@router.get("/callback")
def callback(
    code: str = Query(..., min_length=1),
    state: str = Query(..., min_length=1),
    settings: Settings = Depends(get_settings),
):
    if not verify_state_token(state):
        raise Unauthorized("Invalid or expired sign-in state")
    identity = exchange_code(settings, code, state)
    log.info("signed in: %s", identity.email)
    token = create_access_token(
        sub=identity.email,
        google_token=identity.access_token,
        google_expiry=identity.expiry,
    )
    return {"access_token": token, "token_type": "bearer", "user_email": identity.email}

@router.get("/me")
def me(current: Principal = Depends(get_current_user)):
    return {"user_email": current.email}
