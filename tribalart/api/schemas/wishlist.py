# --- Pydantic schemas for wishlist endpoints ---
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

from tribalart.api.schemas.product import ProductOut


class WishlistCreate(BaseModel):
    product_id: str = Field(..., description="ID of the product to add to the wishlist")


class WishlistItemOut(BaseModel):
    id: str
    user_id: str
    product_id: str
    created_at: Optional[str] = None
    product: Optional[ProductOut] = None

    model_config = ConfigDict(extra="allow")


class WishlistToggleOut(BaseModel):
    product_id: str
    in_wishlist: bool
