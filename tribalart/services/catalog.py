# tribalart/services/catalog.py
from __future__ import annotations
from typing import Any, Dict, List, Optional
import logging

from tribalart.database import DatabaseError, FileBackedDB
from tribalart.models.product import Product
from tribalart.realtime import ChangeEvent, DELETE, INSERT, UPDATE
from tribalart.services import shop_filter

logger = logging.getLogger(__name__)

SELLER_COLUMNS = ("id", "display_name", "region")


def embed_products(db: FileBackedDB, rows: List[Dict[str, Any]], columns=None) -> List[Dict[str, Any]]:
    """
    Embed each row's product (under "product") with that product's seller nested
    inside it. Rows whose product no longer exists are dropped.
    """
    rows = db.embed(rows, "products", local_key="product_id", alias="product", columns=columns)
    kept = []
    for row in rows:
        if row["product"] is None:
            logger.warning("Dropping %s: product %s no longer exists", row.get("id"), row.get("product_id"))
            continue
        kept.append(row)
    products = db.embed([r["product"] for r in kept], "sellers", local_key="seller_id", alias="seller", columns=SELLER_COLUMNS)
    return [{**row, "product": product} for row, product in zip(kept, products)]


def fetch_active_products(db: FileBackedDB) -> List[Product]:
    """All active products, newest first, with the seller embedded."""
    rows = db.select("products", {"status": "active"}, order_by="created_at", descending=True)
    rows = db.embed(rows, "sellers", local_key="seller_id", alias="seller", columns=SELLER_COLUMNS)
    return [Product.from_dict(r) for r in rows]


class CatalogCache:
    """
    Holds the active product list. Fetches on construction and listens to the
    products change feed until close():
      - INSERT / UPDATE -> full refresh (the joined seller data is needed)
      - DELETE          -> local removal, no round trip
    A failed fetch keeps the previous list.
    """

    def __init__(self, db: FileBackedDB, subscribe: bool = True):
        self.db = db
        self.products: List[Product] = []
        self.loading = True
        self._subscription = db.changes.subscribe("products", self._on_change) if subscribe else None
        self.fetch_all()

    def __enter__(self) -> "CatalogCache":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def fetch_all(self) -> List[Product]:
        try:
            self.products = fetch_active_products(self.db)
        except DatabaseError as e:
            logger.error("Error fetching products: %s", e)
        finally:
            self.loading = False
        return self.products

    def refresh(self) -> List[Product]:
        return self.fetch_all()

    def update(self, product_id: str, patch: Dict[str, Any]) -> None:
        self.products = [p.patched(patch) if p.id == product_id else p for p in self.products]

    def remove(self, product_id: str) -> None:
        self.products = [p for p in self.products if p.id != product_id]

    def get(self, product_id: str) -> Optional[Product]:
        for p in self.products:
            if p.id == product_id:
                return p
        return None

    def categories(self) -> List[str]:
        return shop_filter.available_categories(self.products)

    def art_styles(self) -> List[str]:
        return shop_filter.available_art_styles(self.products)

    def _on_change(self, change: ChangeEvent) -> None:
        logger.debug("Real-time update: %s %s", change.event_type, change.new.get("id") or change.old.get("id"))
        if change.event_type == DELETE:
            self.remove(str(change.old.get("id")))
        elif change.event_type in (INSERT, UPDATE):
            self.refresh()

    @property
    def closed(self) -> bool:
        return self._subscription is None or not self._subscription.active

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
