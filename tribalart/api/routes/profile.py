# tribalart/api/routes/profile.py
from fastapi import APIRouter, Depends

from tribalart.api.deps import get_db, raise_for_outcome, require_session
from tribalart.api.schemas.user import ProfileOut, ProfileUpdate, RenameRequest
from tribalart.database import FileBackedDB
from tribalart.services import profiles
from tribalart.services.auth_session import AuthSession

router = APIRouter(prefix="/api/profile", tags=["profile"])


@router.get("", response_model=ProfileOut)
def get_profile(session: AuthSession = Depends(require_session), db: FileBackedDB = Depends(get_db)):
    return profiles.get_or_create_profile(db, session.user).to_dict()


@router.put("", response_model=ProfileOut)
def update_profile(payload: ProfileUpdate, session: AuthSession = Depends(require_session),
                   db: FileBackedDB = Depends(get_db)):
    outcome = raise_for_outcome(profiles.update_profile(db, session.user, payload.model_dump(exclude_unset=True)))
    profile = outcome.data
    profile.email = session.user.email or profile.email
    return profile.to_dict()


@router.post("/rename", response_model=ProfileOut)
def rename(payload: RenameRequest, session: AuthSession = Depends(require_session),
           db: FileBackedDB = Depends(get_db)):
    """Change the user's name and, for sellers, the artist name shown on listings."""
    outcome = raise_for_outcome(profiles.rename(db, session.user, payload.full_name, payload.artist_name))
    return outcome.data.to_dict()
