# tribalart/api/schemas/product.py
from typing import List, Optional
from pydantic import BaseModel, Field

from tribalart.models.product import Product
from tribalart.services.shop_filter import discount_percent


class SellerRefOut(BaseModel):
    id: Optional[str] = None
    display_name: str = ""
    region: str = ""


class ProductOut(BaseModel):
    id: str
    title: str
    description: str = ""
    price: float
    original_price: Optional[float] = None
    discount_percent: int = 0
    category: str = ""
    region: str = ""
    art_form: Optional[str] = None
    dimensions: Optional[str] = None
    materials: List[str] = []
    colors: List[str] = []
    tags: List[str] = []
    images: List[str] = []
    featured_image: Optional[str] = None
    status: str
    seller_id: Optional[str] = None
    seller: Optional[SellerRefOut] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_product(cls, product: Product) -> "ProductOut":
        data = product.to_dict()
        data["discount_percent"] = discount_percent(product.original_price, product.price)
        return cls(**data)


class ProductUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(None, gt=0)
    original_price: Optional[float] = Field(None, gt=0)
    category: Optional[str] = None
    region: Optional[str] = None
    tags: Optional[str] = Field(None, description="comma separated")
    status: Optional[str] = None


class ShopFilters(BaseModel):
    categories: List[str]
    art_styles: List[str]
    price_ranges: List[str]
    sort_keys: List[str]


class ListingOptions(BaseModel):
    art_types: List[str]
    art_forms: List[str]
    regions: List[str]
    max_images: int


class SellerStatsOut(BaseModel):
    total_products: int
    active_products: int
    total_revenue: float
    total_views: int


class SellerDashboardOut(BaseModel):
    products: List[ProductOut]
    stats: SellerStatsOut
