from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional

from tribalart.models.product import Product


@dataclass
class WishlistEntry:
    id: str
    user_id: str
    product_id: str
    created_at: Optional[str] = None
    product: Optional[Product] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "WishlistEntry":
        product_raw = d.get("product")
        return cls(
            id=str(d.get("id") or ""),
            user_id=str(d.get("user_id") or ""),
            product_id=str(d.get("product_id") or ""),
            created_at=d.get("created_at") or None,
            product=Product.from_dict(product_raw) if product_raw else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "product_id": self.product_id,
            "created_at": self.created_at,
            "product": self.product.to_dict() if self.product else None,
        }
