from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import logging

from tribalart.core.outcome import ErrorKind, Outcome
from tribalart.database import DatabaseError, FileBackedDB
from tribalart.models.user import DEFAULT_PREFERENCES, Profile, User

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "full_name", "phone", "address", "city", "state", "pincode", "bio", "date_of_birth", "preferences",
)


def get_or_create_profile(db: FileBackedDB, user: User) -> Profile:
    """Load the user's profile, creating it from the sign-up name on first access."""
    row = db.get_record("profiles", "id", user.id)
    if not row:
        row = db.create_record(
            "profiles",
            {
                "id": user.id,
                "email": user.email,
                "full_name": user.full_name or "",
                "preferences": dict(DEFAULT_PREFERENCES),
            },
            id_field="id",
        )
    profile = Profile.from_dict(row)
    # the auth identity owns the email
    profile.email = user.email or profile.email
    return profile


def update_profile(db: FileBackedDB, user: User, changes: Dict[str, Any]) -> Outcome:
    updates = {k: v for k, v in changes.items() if k in PROFILE_FIELDS}
    updates["updated_at"] = datetime.now(timezone.utc).isoformat(sep=" ")
    try:
        current = get_or_create_profile(db, user)
        if "preferences" in updates:
            prefs = dict(current.preferences)
            prefs.update({k: bool(v) for k, v in (updates["preferences"] or {}).items() if k in DEFAULT_PREFERENCES})
            updates["preferences"] = prefs
        row = db.update_record("profiles", "id", user.id, updates)
    except DatabaseError as e:
        logger.error("Error updating profile: %s", e)
        return Outcome.failure(ErrorKind.REMOTE, "Failed to update profile")
    return Outcome.success("Profile updated successfully!", data=Profile.from_dict(row))


def rename(db: FileBackedDB, user: User, full_name: str, artist_name: Optional[str] = None) -> Outcome:
    """Rename the user and, for sellers, their artist (display) name."""
    if not (full_name or "").strip():
        return Outcome.failure(ErrorKind.VALIDATION, "Name is required")
    now = datetime.now(timezone.utc).isoformat(sep=" ")
    try:
        get_or_create_profile(db, user)
        row = db.update_record("profiles", "id", user.id, {"full_name": full_name.strip(), "updated_at": now})
        if artist_name and artist_name.strip():
            db.update_where("sellers", {"user_id": user.id}, {"display_name": artist_name.strip(), "updated_at": now})
    except DatabaseError as e:
        logger.error("Error updating profile: %s", e)
        return Outcome.failure(ErrorKind.REMOTE, "Failed to update profile")
    return Outcome.success("Profile updated successfully!", data=Profile.from_dict(row))
