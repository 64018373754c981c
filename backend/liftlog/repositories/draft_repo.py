from __future__ import annotations
import logging
from typing import Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from liftlog.models import WorkoutDraft
from liftlog.schemas.workout import WorkoutState

log = logging.getLogger(__name__)

class DraftRepository:
    """
    Key-value store for the one in-progress workout per user. It is a
    disposable cache of progression state; the spreadsheet stays the record.
    """
    def __init__(self, db: Session):
        self.db = db

    def get(self, user_email: str) -> Optional[WorkoutState]:
        draft = self.db.get(WorkoutDraft, user_email.lower())
        if not draft:
            return None
        try:
            return WorkoutState.model_validate_json(draft.payload)
        except ValidationError:
            # unreadable draft (older shape): drop it rather than wedge the user
            log.warning("discarding unreadable workout draft for %s", user_email)
            self.delete(user_email)
            return None

    def save(self, user_email: str, state: WorkoutState) -> WorkoutState:
        key = user_email.lower()
        draft = self.db.get(WorkoutDraft, key)
        if draft is None:
            draft = WorkoutDraft(user_email=key, session_id=state.session_id, payload="")
            self.db.add(draft)
        draft.session_id = state.session_id
        draft.payload = state.model_dump_json()
        self.db.commit()
        return state

    def delete(self, user_email: str) -> bool:
        draft = self.db.get(WorkoutDraft, user_email.lower())
        if not draft:
            return False
        self.db.delete(draft)
        self.db.commit()
        return True
