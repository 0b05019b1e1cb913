from typing import List, Optional
from pydantic import BaseModel

from tribalart.api.schemas.product import ProductOut


class SellerCreate(BaseModel):
    display_name: str
    region: str = ""
    bio: str = ""


class SellerOut(BaseModel):
    id: str
    user_id: str
    display_name: str
    region: str = ""
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    onboarding_status: str = "approved"
    created_at: Optional[str] = None


class PublicProfileOut(BaseModel):
    seller: SellerOut
    products: List[ProductOut]
