from liftlog.db import SessionLocal, init_db
from liftlog.models import WorkoutDraft
from liftlog.repositories.draft_repo import DraftRepository
from liftlog.schemas.workout import WorkoutState
import uuid

init_db()

def make_state(email):
    return WorkoutState(session_id=f"sess_{uuid.uuid4().hex[:8]}", user_email=email,
                        plan_day="Push", start_timestamp="2024-01-01T10:00:00+00:00")

def test_draft_repo_save_get_delete():
    db = SessionLocal()
    repo = DraftRepository(db)
    email = f"{uuid.uuid4().hex[:8]}@ex.com"
    state = make_state(email)
    repo.save(email, state)
    # keyed case-insensitively
    assert repo.get(email.upper()) == state

    state.notes = "second save"
    repo.save(email, state)
    assert repo.get(email).notes == "second save"

    assert repo.delete(email) is True
    assert repo.get(email) is None
    assert repo.delete(email) is False
    db.close()

def test_draft_repo_drops_unreadable_payload():
    db = SessionLocal()
    repo = DraftRepository(db)
    email = f"{uuid.uuid4().hex[:8]}@ex.com"
    db.add(WorkoutDraft(user_email=email, session_id="s", payload='{"legacy": true}'))
    db.commit()
    assert repo.get(email) is None
    assert db.get(WorkoutDraft, email) is None
    db.close()
