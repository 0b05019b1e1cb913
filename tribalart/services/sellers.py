# tribalart/services/sellers.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional
import logging

from tribalart.core.outcome import ErrorKind, Outcome
from tribalart.database import DatabaseError, FileBackedDB, UniqueViolation
from tribalart.models.product import Product
from tribalart.models.user import Seller, User

logger = logging.getLogger(__name__)


def become_seller(db: FileBackedDB, user: Optional[User], display_name: str, region: str, bio: str = "") -> Outcome:
    """
    Seller onboarding. One seller profile per user; new sellers are approved
    straight away.
    """
    if not user:
        return Outcome.failure(ErrorKind.AUTH_REQUIRED, "Please sign in first")
    if not (region or "").strip():
        return Outcome.failure(ErrorKind.VALIDATION, "Please select your state/region")
    if not (display_name or "").strip():
        return Outcome.failure(ErrorKind.VALIDATION, "Please enter your artist name")

    try:
        if db.get_record("sellers", "user_id", user.id):
            return Outcome.failure(ErrorKind.ALREADY_EXISTS, "You're already registered as a seller!")
        row = db.create_record(
            "sellers",
            {
                "user_id": user.id,
                "display_name": display_name.strip(),
                "bio": (bio or "").strip(),
                "region": region.strip(),
                "onboarding_status": "approved",
            },
            id_field="id",
        )
    except UniqueViolation:
        return Outcome.failure(ErrorKind.ALREADY_EXISTS, "You're already registered as a seller!")
    except DatabaseError as e:
        logger.error("Error creating seller: %s", e)
        return Outcome.failure(ErrorKind.REMOTE, e.message)
    return Outcome.success("Your seller profile has been created successfully.", data=Seller.from_dict(row))


def list_artists(db: FileBackedDB, query: str = "") -> List[Seller]:
    """Sellers newest first, optionally filtered by a case-insensitive name match."""
    rows = db.select("sellers", order_by="created_at", descending=True)
    q = (query or "").strip().lower()
    if q:
        rows = [r for r in rows if q in str(r.get("display_name") or "").lower()]
    return [Seller.from_dict(r) for r in rows]


@dataclass
class PublicProfile:
    seller: Seller
    products: List[Product] = field(default_factory=list)


def public_profile(db: FileBackedDB, seller_id: str) -> Optional[PublicProfile]:
    row = db.get_record("sellers", "id", seller_id)
    if not row:
        return None
    seller = Seller.from_dict(row)
    rows = db.select("products", {"seller_id": seller_id, "status": "active"}, order_by="created_at", descending=True)
    return PublicProfile(seller=seller, products=[Product.from_dict(r) for r in rows])
