# tribalart/api/routes/products.py
from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile

from tribalart.api.deps import get_bucket, get_catalog, get_db, raise_for_outcome, require_session
from tribalart.api.schemas.product import (
    ListingOptions,
    ProductOut,
    ProductUpdate,
    SellerDashboardOut,
    ShopFilters,
)
from tribalart.config import settings
from tribalart.database import FileBackedDB
from tribalart.models.product import Product
from tribalart.services import listing
from tribalart.services.auth_session import AuthSession
from tribalart.services.catalog import CatalogCache, SELLER_COLUMNS
from tribalart.services.shop_filter import PRICE_RANGES, SORT_KEYS, SORT_NEWEST, FilterState, filter_products
from tribalart.utils.images import ImageBucket

router = APIRouter(prefix="/api/products", tags=["products"])


async def _read_upload(file: UploadFile) -> listing.ImageUpload:
    return listing.ImageUpload(filename=file.filename or "upload.jpg", contents=await file.read(),
                               content_type=file.content_type)


@router.get("", response_model=List[ProductOut])
def list_products(
    q: Optional[str] = Query(None, description="search title, artist or category"),
    category: List[str] = Query([]),
    art_style: List[str] = Query([]),
    price_range: List[str] = Query([], description="price bucket label"),
    sort: str = Query(SORT_NEWEST),
    catalog: CatalogCache = Depends(get_catalog),
):
    """
    Browse the catalog (active products only) with the shop filters applied.
    """
    if sort not in SORT_KEYS:
        raise HTTPException(status_code=400, detail=f"sort must be one of {', '.join(SORT_KEYS)}")
    state = FilterState(query=q or "", categories=category, art_styles=art_style, price_ranges=price_range, sort=sort)
    return [ProductOut.from_product(p) for p in filter_products(catalog.products, state)]


@router.get("/filters", response_model=ShopFilters)
def shop_filters(catalog: CatalogCache = Depends(get_catalog)):
    return {
        "categories": catalog.categories(),
        "art_styles": catalog.art_styles(),
        "price_ranges": [r.label for r in PRICE_RANGES],
        "sort_keys": list(SORT_KEYS),
    }


@router.get("/options", response_model=ListingOptions)
def listing_options():
    """Choices for the add-product form."""
    return {
        "art_types": listing.ART_TYPES,
        "art_forms": listing.ART_FORMS,
        "regions": listing.INDIAN_STATES,
        "max_images": settings.MAX_PRODUCT_IMAGES,
    }


@router.get("/dashboard", response_model=SellerDashboardOut)
def seller_dashboard(session: AuthSession = Depends(require_session), db: FileBackedDB = Depends(get_db)):
    products = listing.seller_products(db, session.user_id)
    if products is None:
        raise HTTPException(status_code=404, detail="Seller not found")
    stats = listing.seller_stats(products)
    return {"products": [ProductOut.from_product(p) for p in products], "stats": asdict(stats)}


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: str, db: FileBackedDB = Depends(get_db)):
    """
    Product detail: a direct query (any status), not served from the catalog cache.
    """
    row = db.get_record("products", "id", product_id)
    if not row:
        raise HTTPException(status_code=404, detail="Product not found")
    row = db.embed([row], "sellers", local_key="seller_id", alias="seller", columns=SELLER_COLUMNS)[0]
    return ProductOut.from_product(Product.from_dict(row))


@router.post("", response_model=ProductOut, status_code=201)
async def create_product(
    title: str = Form(""),
    description: str = Form(""),
    price: str = Form(""),
    original_price: str = Form(""),
    category: str = Form(""),
    art_form: str = Form(""),
    region: str = Form(""),
    dimensions: str = Form(""),
    materials: str = Form("", description="comma separated"),
    colors: str = Form("", description="comma separated"),
    images: List[UploadFile] = File([]),
    session: AuthSession = Depends(require_session),
    db: FileBackedDB = Depends(get_db),
    bucket: ImageBucket = Depends(get_bucket),
):
    """
    List a new artwork (sellers only). Tags are generated from the category,
    art form and region.
    """
    draft = listing.ProductDraft(
        title=title, description=description, price=price, original_price=original_price,
        category=category, art_form=art_form, region=region, dimensions=dimensions,
        materials=materials, colors=colors,
    )
    uploads = [await _read_upload(f) for f in images]
    outcome = raise_for_outcome(listing.create_product(db, bucket, session.user, draft, uploads))
    return ProductOut.from_product(outcome.data)


@router.put("/{product_id}", response_model=ProductOut)
def update_product(
    product_id: str,
    payload: ProductUpdate,
    session: AuthSession = Depends(require_session),
    db: FileBackedDB = Depends(get_db),
    bucket: ImageBucket = Depends(get_bucket),
):
    patch = payload.model_dump(exclude_unset=True)
    outcome = raise_for_outcome(listing.update_product(db, bucket, session.user, product_id, patch))
    return ProductOut.from_product(outcome.data)


@router.post("/{product_id}/image", response_model=ProductOut)
async def replace_featured_image(
    product_id: str,
    file: UploadFile = File(...),
    session: AuthSession = Depends(require_session),
    db: FileBackedDB = Depends(get_db),
    bucket: ImageBucket = Depends(get_bucket),
):
    upload = await _read_upload(file)
    outcome = raise_for_outcome(listing.update_product(db, bucket, session.user, product_id, {}, image=upload))
    return ProductOut.from_product(outcome.data)


@router.delete("/{product_id}")
def delete_product(product_id: str, session: AuthSession = Depends(require_session), db: FileBackedDB = Depends(get_db),
                   bucket: ImageBucket = Depends(get_bucket)):
    raise_for_outcome(listing.delete_product(db, session.user, product_id, bucket=bucket))
    return {"ok": True}
