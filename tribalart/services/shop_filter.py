"""
Pure derivations behind the shop/browse view: filter options, the filtered
and sorted product subset, and discount display. Nothing here touches the
store; the same inputs always give the same output.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence
import math

from tribalart.models.product import Product

SORT_NEWEST = "newest"
SORT_PRICE_LOW = "price-low"
SORT_PRICE_HIGH = "price-high"
SORT_KEYS = (SORT_NEWEST, SORT_PRICE_LOW, SORT_PRICE_HIGH)

KNOWN_ART_STYLES = (
    "Gond Art",
    "Warli Art",
    "Madhubani Art",
    "Pithora Art",
    "Dokra Art",
    "Toda Embroidery",
    "Bhil Art",
    "Santhal Art",
    "Saura Art",
    "Kurumba Art",
)


@dataclass(frozen=True)
class PriceRange:
    label: str
    min: float
    max: float

    def contains(self, price: float) -> bool:
        return self.min <= price <= self.max


PRICE_RANGES = (
    PriceRange("Under ₹5,000", 0, 4999),
    PriceRange("₹5,000 - ₹10,000", 5000, 10000),
    PriceRange("₹10,000 - ₹20,000", 10000, 20000),
    PriceRange("Above ₹20,000", 20001, math.inf),
)


def price_range(label: str) -> Optional[PriceRange]:
    for r in PRICE_RANGES:
        if r.label == label:
            return r
    return None


@dataclass
class FilterState:
    query: str = ""
    categories: List[str] = field(default_factory=list)
    art_styles: List[str] = field(default_factory=list)
    price_ranges: List[str] = field(default_factory=list)
    sort: str = SORT_NEWEST


def _style_keys(style: str) -> Sequence[str]:
    full = style.lower()
    return full.replace(" art", "", 1), full


def _text_has_style(text: str, style: str) -> bool:
    text = (text or "").lower()
    return any(key in text for key in _style_keys(style))


def matches_art_style(product: Product, style: str) -> bool:
    """
    Heuristic: the style name (without the " Art" suffix) appears in the
    art form, the title, or any tag.
    """
    short, _ = _style_keys(style)
    if product.art_form and short in product.art_form.lower():
        return True
    if _text_has_style(product.title, style):
        return True
    return any(_text_has_style(tag, style) for tag in product.tags)


def matches_query(product: Product, query: str) -> bool:
    if not query.strip():
        return True
    # only the emptiness check trims; the query itself is matched as typed
    q = query.lower()
    return q in product.title.lower() or q in product.seller_name.lower() or q in product.category.lower()


def matches_price(product: Product, labels: Iterable[str]) -> bool:
    price = float(product.price)
    for label in labels:
        r = price_range(label)
        if r is not None and r.contains(price):
            return True
    return False


def filter_products(products: Sequence[Product], state: FilterState) -> List[Product]:
    filtered = list(products)

    if state.query.strip():
        filtered = [p for p in filtered if matches_query(p, state.query)]

    if state.categories:
        filtered = [p for p in filtered if p.category in state.categories]

    if state.art_styles:
        filtered = [p for p in filtered if any(matches_art_style(p, s) for s in state.art_styles)]

    if state.price_ranges:
        filtered = [p for p in filtered if matches_price(p, state.price_ranges)]

    if state.sort == SORT_PRICE_LOW:
        filtered.sort(key=lambda p: float(p.price))
    elif state.sort == SORT_PRICE_HIGH:
        filtered.sort(key=lambda p: float(p.price), reverse=True)
    # newest: catalog order is already newest first
    return filtered


def available_categories(products: Iterable[Product]) -> List[str]:
    seen: List[str] = []
    for p in products:
        if p.category and p.category not in seen:
            seen.append(p.category)
    return seen


def available_art_styles(products: Iterable[Product]) -> List[str]:
    styles = set()
    for p in products:
        if p.art_form:
            styles.add(p.art_form)
        for style in KNOWN_ART_STYLES:
            if _text_has_style(p.title, style) or any(_text_has_style(t, style) for t in p.tags):
                styles.add(style)
    return sorted(styles)


def discount_percent(original_price: Optional[float], price: Optional[float]) -> int:
    if not original_price or not price:
        return 0
    return int(math.floor((original_price - price) / original_price * 100 + 0.5))
