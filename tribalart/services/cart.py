# tribalart/services/cart.py
"""
Per-user cart store.

Every mutation is followed by a full refetch of the cart (joined against
product and seller), so a line always shows the product's current title,
price and image. Totals are computed from the current lines on each access.
Remote errors are reported through the notifier and leave the lines as they
were; nothing is retried.
"""
from __future__ import annotations
from typing import Optional
import logging
import math

from tribalart.config import settings
from tribalart.core.outcome import ErrorKind, Notifier, Outcome
from tribalart.database import DatabaseError, FileBackedDB, UniqueViolation
from tribalart.models.cart import Cart, CartLine, CartSummary
from tribalart.services.auth_session import AuthSession
from tribalart.services.catalog import embed_products

logger = logging.getLogger(__name__)

CART_PRODUCT_COLUMNS = ("id", "title", "price", "featured_image", "seller_id")


class CartStore:
    def __init__(self, db: FileBackedDB, session: AuthSession, notifier: Optional[Notifier] = None):
        self.db = db
        self.session = session
        self.notifier = notifier or Notifier()
        self.cart = Cart()
        self.loading = False
        # sign-in / sign-out resets the cart
        self._unsubscribe = session.subscribe(lambda _user: self.fetch())
        self.fetch()

    @property
    def items(self):
        return self.cart.lines

    @property
    def total_items(self) -> int:
        return self.cart.count_items()

    @property
    def total_price(self) -> float:
        return self.cart.total()

    def summary(self) -> CartSummary:
        subtotal = self.total_price
        if not self.cart.lines or subtotal > settings.FREE_SHIPPING_THRESHOLD:
            shipping = 0.0
        else:
            shipping = float(settings.SHIPPING_COST)
        tax = float(math.floor(subtotal * settings.GST_RATE + 0.5))
        return CartSummary(
            subtotal=subtotal,
            total_items=self.total_items,
            shipping=shipping,
            tax=tax,
            total=subtotal + shipping + tax,
        )

    def fetch(self) -> Cart:
        user_id = self.session.user_id
        if not user_id:
            self.cart = Cart()
            return self.cart
        self.loading = True
        try:
            rows = self.db.select("cart_items", {"user_id": user_id}, order_by="created_at")
            rows = embed_products(self.db, rows, columns=CART_PRODUCT_COLUMNS)
            self.cart = Cart(user_id=user_id, lines=[CartLine.from_dict(r) for r in rows])
        except DatabaseError as e:
            logger.error("Error fetching cart: %s", e)
        finally:
            self.loading = False
        return self.cart

    def _match(self, product_id: str) -> dict:
        return {"user_id": self.session.user_id, "product_id": str(product_id)}

    def add(self, product_id: str) -> Outcome:
        if not self.session.user:
            self.notifier.error("Please sign in to add items to cart")
            return Outcome.failure(ErrorKind.AUTH_REQUIRED, "Please sign in to add items to cart")

        existing = self.cart.find(product_id)
        if existing:
            return self.set_quantity(product_id, existing.quantity + 1)

        try:
            self.db.create_record("cart_items", {**self._match(product_id), "quantity": 1}, id_field="id")
        except UniqueViolation:
            # the row exists remotely but not in our last fetch
            self.fetch()
            existing = self.cart.find(product_id)
            if existing:
                return self.set_quantity(product_id, existing.quantity + 1)
            self.notifier.error("Something went wrong")
            return Outcome.failure(ErrorKind.REMOTE, "Something went wrong")
        except DatabaseError as e:
            self.notifier.error(f"Error adding to cart: {e.message}")
            return Outcome.failure(ErrorKind.REMOTE, f"Error adding to cart: {e.message}")

        self.notifier.success("Added to cart!")
        self.fetch()
        return Outcome.success("Added to cart!")

    def add_many(self, product_id: str, quantity: int) -> Outcome:
        """Add `quantity` units one at a time (product detail page)."""
        if int(quantity) > settings.MAX_CART_ADD_QUANTITY:
            return Outcome.failure(
                ErrorKind.VALIDATION, f"You can add at most {settings.MAX_CART_ADD_QUANTITY} at a time"
            )
        outcome = Outcome.failure(ErrorKind.VALIDATION, "Quantity must be at least 1")
        for _ in range(int(quantity)):
            outcome = self.add(product_id)
            if not outcome.ok:
                break
        return outcome

    def set_quantity(self, product_id: str, quantity: int) -> Outcome:
        if not self.session.user:
            return Outcome.failure(ErrorKind.AUTH_REQUIRED, "Please sign in to update your cart")
        if int(quantity) <= 0:
            return self.remove(product_id)
        try:
            updated = self.db.update_where("cart_items", self._match(product_id), {"quantity": int(quantity)})
        except DatabaseError as e:
            self.notifier.error(f"Error updating cart: {e.message}")
            return Outcome.failure(ErrorKind.REMOTE, f"Error updating cart: {e.message}")
        self.fetch()
        if not updated:
            return Outcome.failure(ErrorKind.NOT_FOUND, "Item is not in your cart")
        return Outcome.success("Cart updated")

    def remove(self, product_id: str) -> Outcome:
        if not self.session.user:
            return Outcome.failure(ErrorKind.AUTH_REQUIRED, "Please sign in to update your cart")
        try:
            self.db.delete_where("cart_items", self._match(product_id))
        except DatabaseError as e:
            self.notifier.error(f"Error removing item: {e.message}")
            return Outcome.failure(ErrorKind.REMOTE, f"Error removing item: {e.message}")
        self.fetch()
        return Outcome.success("Removed from cart")

    def clear(self) -> Outcome:
        if not self.session.user:
            return Outcome.failure(ErrorKind.AUTH_REQUIRED, "Please sign in to update your cart")
        try:
            self.db.delete_where("cart_items", {"user_id": self.session.user_id})
        except DatabaseError as e:
            self.notifier.error(f"Error clearing cart: {e.message}")
            return Outcome.failure(ErrorKind.REMOTE, f"Error clearing cart: {e.message}")
        self.cart = Cart(user_id=self.session.user_id)
        return Outcome.success("Cart cleared")

    def close(self) -> None:
        self._unsubscribe()
