# tribalart/models/cart.py
from __future__ import annotations
from dataclasses import dataclass, asdict, field
from typing import List, Dict, Any, Optional

from tribalart.models.product import parse_float


@dataclass
class CartProduct:
    """Product fields joined into a cart line at read time."""
    id: str
    title: str = ""
    price: float = 0.0
    featured_image: Optional[str] = None
    seller_display_name: str = ""

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CartProduct":
        seller = d.get("seller") or {}
        return cls(
            id=str(d.get("id") or ""),
            title=str(d.get("title") or ""),
            price=parse_float(d.get("price")) or 0.0,
            featured_image=d.get("featured_image") or None,
            seller_display_name=str(seller.get("display_name") or ""),
        )


@dataclass
class CartLine:
    id: str
    product_id: str
    quantity: int = 1
    product: Optional[CartProduct] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CartLine":
        if d is None:
            raise ValueError("Cannot construct CartLine from None")
        try:
            quantity = int(float(d.get("quantity") or 1))
        except (TypeError, ValueError):
            quantity = 1
        product_raw = d.get("product")
        product = CartProduct.from_dict(product_raw) if product_raw else None
        return cls(id=str(d.get("id") or ""), product_id=str(d.get("product_id") or ""), quantity=quantity, product=product)

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["subtotal"] = self.line_total()
        return out

    def line_total(self) -> float:
        price = self.product.price if self.product else 0.0
        return float(price) * int(self.quantity)


@dataclass
class Cart:
    """
    The lines of one user's cart as last fetched. Totals are always computed
    from the current lines, never stored.
    """
    user_id: Optional[str] = None
    lines: List[CartLine] = field(default_factory=list)

    def find(self, product_id: str) -> Optional[CartLine]:
        for line in self.lines:
            if line.product_id == str(product_id):
                return line
        return None

    def total(self) -> float:
        return float(sum(line.line_total() for line in self.lines))

    def count_items(self) -> int:
        return int(sum(line.quantity for line in self.lines))


@dataclass
class CartSummary:
    subtotal: float
    total_items: int
    shipping: float
    tax: float
    total: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
