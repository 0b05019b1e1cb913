from typing import List, Optional
from pydantic import BaseModel, Field

from tribalart.config import settings


class CartAdd(BaseModel):
    product_id: str
    quantity: int = Field(1, ge=1, le=settings.MAX_CART_ADD_QUANTITY)


class CartQuantity(BaseModel):
    quantity: int


class CartProductOut(BaseModel):
    id: str
    title: str
    price: float
    featured_image: Optional[str] = None
    seller_display_name: str = ""


class CartLineOut(BaseModel):
    id: str
    product_id: str
    quantity: int
    subtotal: float
    product: Optional[CartProductOut] = None


class CartSummaryOut(BaseModel):
    subtotal: float
    total_items: int
    shipping: float
    tax: float
    total: float


class CartOut(BaseModel):
    items: List[CartLineOut]
    total_items: int
    total_price: float
    summary: CartSummaryOut
