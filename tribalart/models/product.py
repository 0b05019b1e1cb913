# tribalart/models/product.py
from __future__ import annotations
from dataclasses import dataclass, asdict, field
from typing import Optional, Dict, Any, List
from datetime import datetime
import json

PRODUCT_STATUSES = ("active", "draft", "sold")


def parse_list(raw: Any) -> List[str]:
    """
    List columns are stored as JSON; older rows (and the edit form) may hold a
    comma separated string instead.
    """
    if raw is None or raw == "":
        return []
    if isinstance(raw, (list, tuple)):
        return [str(x) for x in raw if str(x).strip()]
    text = str(raw).strip()
    if text.startswith("["):
        try:
            parsed = json.loads(text)
            if isinstance(parsed, list):
                return [str(x) for x in parsed if str(x).strip()]
        except ValueError:
            pass
    return [p.strip() for p in text.split(",") if p.strip()]


def parse_float(raw: Any) -> Optional[float]:
    if raw is None or raw == "":
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None


def parse_datetime(raw: Any) -> Optional[datetime]:
    if not raw:
        return None
    if isinstance(raw, datetime):
        return raw
    try:
        return datetime.fromisoformat(str(raw))
    except ValueError:
        try:
            return datetime.strptime(str(raw), "%Y-%m-%d %H:%M:%S")
        except ValueError:
            return None


@dataclass
class SellerRef:
    id: Optional[str] = None
    display_name: str = ""
    region: str = ""

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> Optional["SellerRef"]:
        if not d:
            return None
        return cls(id=d.get("id") or None, display_name=str(d.get("display_name") or ""), region=str(d.get("region") or ""))


@dataclass
class Product:
    """
    Product row. The file-backed store keeps everything as strings,
    so from_dict converts numbers, lists and timestamps.
    """
    id: Optional[str] = None
    title: str = ""
    description: str = ""
    price: float = 0.0
    original_price: Optional[float] = None
    category: str = ""
    region: str = ""
    art_form: Optional[str] = None
    dimensions: Optional[str] = None
    materials: List[str] = field(default_factory=list)
    colors: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    images: List[str] = field(default_factory=list)
    featured_image: Optional[str] = None
    status: str = "active"
    seller_id: Optional[str] = None
    seller: Optional[SellerRef] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Product":
        if d is None:
            raise ValueError("Cannot construct Product from None")
        seller_raw = d.get("seller")
        if isinstance(seller_raw, SellerRef):
            seller = seller_raw
        else:
            seller = SellerRef.from_dict(seller_raw)
        status = str(d.get("status") or "active")
        return cls(
            id=d.get("id") or None,
            title=str(d.get("title") or ""),
            description=str(d.get("description") or ""),
            price=parse_float(d.get("price")) or 0.0,
            original_price=parse_float(d.get("original_price")),
            category=str(d.get("category") or ""),
            region=str(d.get("region") or ""),
            art_form=d.get("art_form") or None,
            dimensions=d.get("dimensions") or None,
            materials=parse_list(d.get("materials")),
            colors=parse_list(d.get("colors")),
            tags=parse_list(d.get("tags")),
            images=parse_list(d.get("images")),
            featured_image=d.get("featured_image") or None,
            status=status,
            seller_id=d.get("seller_id") or (seller.id if seller else None),
            seller=seller,
            created_at=parse_datetime(d.get("created_at")),
            updated_at=parse_datetime(d.get("updated_at")),
        )

    @property
    def seller_name(self) -> str:
        return self.seller.display_name if self.seller else ""

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def patched(self, patch: Dict[str, Any]) -> "Product":
        """Return a copy with `patch` applied (same coercions as from_dict)."""
        merged = self.to_dict()
        merged.update(patch)
        return Product.from_dict(merged)

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        for key in ("created_at", "updated_at"):
            value = getattr(self, key)
            out[key] = value.isoformat(sep=" ") if isinstance(value, datetime) else None
        out["price"] = float(self.price)
        return out
