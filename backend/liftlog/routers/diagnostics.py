from typing import Optional

from fastapi import APIRouter, Depends

from liftlog.deps.auth import Principal, get_current_user, get_optional_user
from liftlog.deps.sheets import get_workbook
from liftlog.repositories.workbook import Workbook
from liftlog.settings import TAB_SETTINGS, Settings, get_settings

router = APIRouter(prefix="/diagnostics", tags=["diagnostics"])

@router.get("/me")
def whoami(
    current: Optional[Principal] = Depends(get_optional_user),
    settings: Settings = Depends(get_settings),
):
    """Sign-in and configuration status; answers without a token too."""
    return {
        "signed_in": current is not None,
        "user_email": current.email if current else None,
        "has_access_token": bool(current and current.access_token),
        "has_spreadsheet_id": bool(settings.SPREADSHEET_ID.strip()),
    }

@router.get("/tabs")
def tabs(
    current: Principal = Depends(get_current_user),
    workbook: Workbook = Depends(get_workbook),
    settings: Settings = Depends(get_settings),
):
    titles = workbook.client.list_tabs()
    configured = {name: getattr(settings, name) for name in TAB_SETTINGS}
    return {
        "tabs": titles,
        "configured": configured,
        "missing": sorted(name for name, tab in configured.items() if tab not in titles),
    }
