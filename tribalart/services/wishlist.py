# tribalart/services/wishlist.py
from __future__ import annotations
from typing import TYPE_CHECKING, List, Optional
import logging

from tribalart.core.outcome import ErrorKind, Notifier, Outcome
from tribalart.database import DatabaseError, FileBackedDB, UniqueViolation
from tribalart.models.wishlist import WishlistEntry
from tribalart.services.auth_session import AuthSession
from tribalart.services.catalog import embed_products

if TYPE_CHECKING:
    from tribalart.services.cart import CartStore

logger = logging.getLogger(__name__)

WISHLIST_PRODUCT_COLUMNS = (
    "id", "title", "price", "original_price", "category", "region", "featured_image", "seller_id",
)


class WishlistStore:
    """
    Per-user saved-product set.

    add() refetches (the entry needs the joined product and seller);
    remove() filters the local list without a round trip.
    """

    def __init__(self, db: FileBackedDB, session: AuthSession, notifier: Optional[Notifier] = None):
        self.db = db
        self.session = session
        self.notifier = notifier or Notifier()
        self.items: List[WishlistEntry] = []
        self.loading = True
        self._unsubscribe = session.subscribe(lambda _user: self.fetch())
        self.fetch()

    def fetch(self) -> List[WishlistEntry]:
        user_id = self.session.user_id
        if not user_id:
            self.items = []
            self.loading = False
            return self.items
        try:
            rows = self.db.select("wishlist", {"user_id": user_id}, order_by="created_at", descending=True)
            rows = embed_products(self.db, rows, columns=WISHLIST_PRODUCT_COLUMNS)
            self.items = [WishlistEntry.from_dict(r) for r in rows]
        except DatabaseError as e:
            logger.error("Error fetching wishlist: %s", e)
        finally:
            self.loading = False
        return self.items

    def is_member(self, product_id: str) -> bool:
        return any(item.product_id == str(product_id) for item in self.items)

    def add(self, product_id: str) -> Outcome:
        if not self.session.user:
            self.notifier.error("Please sign in to add items to wishlist")
            return Outcome.failure(ErrorKind.AUTH_REQUIRED, "Please sign in to add items to wishlist")
        try:
            self.db.create_record(
                "wishlist", {"user_id": self.session.user_id, "product_id": str(product_id)}, id_field="id"
            )
        except UniqueViolation:
            self.notifier.error("Item already in wishlist")
            return Outcome.failure(ErrorKind.ALREADY_EXISTS, "Item already in wishlist")
        except DatabaseError as e:
            logger.error("Error adding to wishlist: %s", e)
            self.notifier.error("Failed to add to wishlist")
            return Outcome.failure(ErrorKind.REMOTE, "Failed to add to wishlist")
        self.notifier.success("Added to wishlist!")
        self.fetch()
        return Outcome.success("Added to wishlist!")

    def remove(self, product_id: str) -> Outcome:
        if not self.session.user:
            return Outcome.failure(ErrorKind.AUTH_REQUIRED, "Please sign in to update your wishlist")
        try:
            self.db.delete_where("wishlist", {"user_id": self.session.user_id, "product_id": str(product_id)})
        except DatabaseError as e:
            logger.error("Error removing from wishlist: %s", e)
            self.notifier.error("Failed to remove from wishlist")
            return Outcome.failure(ErrorKind.REMOTE, "Failed to remove from wishlist")
        self.notifier.success("Removed from wishlist")
        self.items = [item for item in self.items if item.product_id != str(product_id)]
        return Outcome.success("Removed from wishlist")

    def toggle(self, product_id: str) -> Outcome:
        if self.is_member(product_id):
            return self.remove(product_id)
        return self.add(product_id)

    def move_to_cart(self, product_id: str, cart: "CartStore") -> Outcome:
        """Add the product to the cart, then drop it from the wishlist."""
        outcome = cart.add(product_id)
        if not outcome.ok:
            return outcome
        return self.remove(product_id)

    def close(self) -> None:
        self._unsubscribe()
