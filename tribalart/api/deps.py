# tribalart/api/deps.py
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from tribalart.core.outcome import ErrorKind, Outcome
from tribalart.database import db, FileBackedDB
from tribalart.services.auth_session import AuthSession
from tribalart.services.cart import CartStore
from tribalart.services.catalog import CatalogCache
from tribalart.services.wishlist import WishlistStore
from tribalart.utils.images import ImageBucket

# anonymous requests are allowed through; routes that need a user use require_session
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)

OUTCOME_STATUS = {
    ErrorKind.AUTH_REQUIRED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.REMOTE: status.HTTP_502_BAD_GATEWAY,
}


def get_db():
    """
    Dependency that returns the file-backed DB object.
    Usage:
        db = Depends(get_db)
    """
    return db


def get_bucket() -> ImageBucket:
    return ImageBucket("images")


def get_catalog(request: Request, db: FileBackedDB = Depends(get_db)) -> CatalogCache:
    """
    The application-wide catalog cache (created in the lifespan). Created lazily
    when the app runs without a lifespan, e.g. a bare TestClient.
    """
    catalog = getattr(request.app.state, "catalog", None)
    if catalog is None or catalog.closed or catalog.db is not db:
        if catalog is not None:
            catalog.close()
        catalog = CatalogCache(db)
        request.app.state.catalog = catalog
    return catalog


def raise_for_outcome(outcome: Outcome) -> Outcome:
    """Turn a failed Outcome into the matching HTTPException; pass successes through."""
    if outcome.ok:
        return outcome
    code = OUTCOME_STATUS.get(outcome.kind, status.HTTP_400_BAD_REQUEST)
    headers = {"WWW-Authenticate": "Bearer"} if code == status.HTTP_401_UNAUTHORIZED else None
    raise HTTPException(status_code=code, detail=outcome.message, headers=headers)


def get_session(request: Request, token: Optional[str] = Depends(oauth2_scheme),
                db: FileBackedDB = Depends(get_db)) -> AuthSession:
    """
    Resolve the session from the Authorization header (Bearer) or the
    'access_token' cookie. Missing/invalid tokens give an anonymous session.
    """
    if not token:
        token = request.cookies.get("access_token")
    return AuthSession.from_token(db, token)


def require_session(session: AuthSession = Depends(get_session)) -> AuthSession:
    if not session.user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session


def get_cart_store(session: AuthSession = Depends(require_session), db: FileBackedDB = Depends(get_db)) -> CartStore:
    return CartStore(db, session)


def get_wishlist_store(session: AuthSession = Depends(require_session),
                       db: FileBackedDB = Depends(get_db)) -> WishlistStore:
    return WishlistStore(db, session)


def ensure_product(db: FileBackedDB, product_id: str) -> dict:
    row = db.get_record("products", "id", product_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return row
