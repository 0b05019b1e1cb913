# tribalart/models/user.py
from __future__ import annotations
from dataclasses import dataclass, asdict, field
from datetime import datetime
from typing import Optional, Dict, Any
import json

from tribalart.models.product import parse_datetime

DEFAULT_PREFERENCES = {
    "email_notifications": True,
    "sms_notifications": False,
    "marketing_emails": True,
}


@dataclass
class User:
    """
    Auth identity. The FileBackedDB stores values as strings; these helpers normalize/convert types.
    """
    id: str
    email: str
    full_name: Optional[str] = None
    password_hash: str = ""
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "User":
        if d is None:
            raise ValueError("Cannot construct User from None")
        return cls(
            id=str(d.get("id") or ""),
            email=str(d.get("email") or ""),
            full_name=d.get("full_name") or None,
            password_hash=str(d.get("password_hash") or ""),
            created_at=parse_datetime(d.get("created_at")),
        )

    def mask_secret(self) -> Dict[str, Any]:
        """
        Representation safe to expose on API responses (no password hash).
        """
        return {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "created_at": self.created_at.isoformat(sep=" ") if self.created_at else None,
        }


def _as_bool(raw: Any, default: bool) -> bool:
    if isinstance(raw, bool):
        return raw
    if raw is None or raw == "":
        return default
    return str(raw).strip().lower() in ("1", "true", "yes", "y", "t")


@dataclass
class Profile:
    id: str
    email: str = ""
    full_name: str = ""
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    bio: Optional[str] = None
    date_of_birth: Optional[str] = None
    preferences: Dict[str, bool] = field(default_factory=lambda: dict(DEFAULT_PREFERENCES))

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Profile":
        prefs_raw = d.get("preferences") or {}
        if isinstance(prefs_raw, str):
            try:
                prefs_raw = json.loads(prefs_raw)
            except ValueError:
                prefs_raw = {}
        prefs = {k: _as_bool(prefs_raw.get(k), v) for k, v in DEFAULT_PREFERENCES.items()}
        return cls(
            id=str(d.get("id") or ""),
            email=str(d.get("email") or ""),
            full_name=str(d.get("full_name") or ""),
            phone=d.get("phone") or None,
            address=d.get("address") or None,
            city=d.get("city") or None,
            state=d.get("state") or None,
            pincode=d.get("pincode") or None,
            bio=d.get("bio") or None,
            date_of_birth=d.get("date_of_birth") or None,
            preferences=prefs,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Seller:
    id: str
    user_id: str
    display_name: str = ""
    region: str = ""
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    onboarding_status: str = "approved"
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Seller":
        if d is None:
            raise ValueError("Cannot construct Seller from None")
        return cls(
            id=str(d.get("id") or ""),
            user_id=str(d.get("user_id") or ""),
            display_name=str(d.get("display_name") or ""),
            region=str(d.get("region") or ""),
            bio=d.get("bio") or None,
            avatar_url=d.get("avatar_url") or None,
            onboarding_status=str(d.get("onboarding_status") or "approved"),
            created_at=parse_datetime(d.get("created_at")),
        )

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["created_at"] = self.created_at.isoformat(sep=" ") if self.created_at else None
        return out
