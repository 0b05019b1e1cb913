from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, status

from tribalart.api.deps import get_db, raise_for_outcome, require_session
from tribalart.api.schemas.product import ProductOut
from tribalart.api.schemas.seller import PublicProfileOut, SellerCreate, SellerOut
from tribalart.database import FileBackedDB
from tribalart.services import sellers
from tribalart.services.auth_session import AuthSession

router = APIRouter(prefix="/api/sellers", tags=["sellers"])


@router.post("", response_model=SellerOut, status_code=status.HTTP_201_CREATED)
def become_seller(payload: SellerCreate, session: AuthSession = Depends(require_session),
                  db: FileBackedDB = Depends(get_db)):
    """
    Register the signed-in user as a seller (409 if they already are one).
    """
    outcome = raise_for_outcome(
        sellers.become_seller(db, session.user, payload.display_name, payload.region, payload.bio)
    )
    return outcome.data.to_dict()


@router.get("", response_model=List[SellerOut])
def list_artists(q: str = Query("", description="filter by artist name"), db: FileBackedDB = Depends(get_db)):
    return [s.to_dict() for s in sellers.list_artists(db, q)]


@router.get("/{seller_id}", response_model=PublicProfileOut)
def public_profile(seller_id: str, db: FileBackedDB = Depends(get_db)):
    """An artist's public page: the seller and their active products."""
    profile = sellers.public_profile(db, seller_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Artist not found")
    return {
        "seller": profile.seller.to_dict(),
        "products": [ProductOut.from_product(p) for p in profile.products],
    }
