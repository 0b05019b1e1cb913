# tribalart/services/listing.py
"""
Seller-side product management: the add-product flow (validation, image
upload, tag generation), the edit modal, deletion and dashboard stats.
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging
import math
import os
import secrets
import time

from tribalart.config import settings
from tribalart.core.outcome import ErrorKind, Outcome
from tribalart.database import DatabaseError, FileBackedDB
from tribalart.models.product import PRODUCT_STATUSES, Product, parse_float, parse_list
from tribalart.models.user import Seller, User
from tribalart.utils.images import ImageBucket, StorageError, validate_image

logger = logging.getLogger(__name__)

ART_TYPES = ["Portrait", "Painting", "Sculpture", "Decor", "Pottery", "Textile"]

ART_FORMS = [
    "Madhubani",
    "Warli",
    "Gond",
    "Dhokra",
    "Lippn",
    "Terracotta art",
    "Baster art",
    "Bhil / Pithora",
    "Bamboo craft",
]

INDIAN_STATES = [
    "Andaman and Nicobar Islands", "Andhra Pradesh", "Arunachal Pradesh", "Assam",
    "Bihar", "Chandigarh", "Chhattisgarh", "Dadra and Nagar Haveli and Daman and Diu",
    "Delhi", "Goa", "Gujarat", "Haryana", "Himachal Pradesh", "Jammu and Kashmir",
    "Jharkhand", "Karnataka", "Kerala", "Ladakh", "Lakshadweep", "Madhya Pradesh",
    "Maharashtra", "Manipur", "Meghalaya", "Mizoram", "Nagaland", "Odisha",
    "Puducherry", "Punjab", "Rajasthan", "Sikkim", "Tamil Nadu", "Telangana",
    "Tripura", "Uttar Pradesh", "Uttarakhand", "West Bengal",
]

CATEGORY_TAGS = {
    "Painting": ["handmade", "art", "canvas"],
    "Sculpture": ["3d", "carved", "artistic"],
    "Pottery": ["ceramic", "clay", "traditional"],
    "Textile": ["fabric", "woven", "handloom"],
    "Decor": ["home", "decoration", "interior"],
    "Portrait": ["face", "figure", "realistic"],
}

ART_FORM_TAGS = {
    "Madhubani": ["bihar", "folk", "mithila"],
    "Warli": ["maharashtra", "tribal", "geometric"],
    "Gond": ["madhya pradesh", "dots", "patterns"],
    "Pattachitra": ["odisha", "scroll", "mythological"],
    "Tanjore": ["tamil nadu", "gold", "religious"],
    "Kalamkari": ["andhra pradesh", "pen work", "natural dyes"],
}


def generate_tags(category: Optional[str], art_form: Optional[str], region: Optional[str]) -> List[str]:
    tags: List[str] = []
    for value in (category, art_form, region):
        if value:
            tags.append(value.lower())
    tags.extend(CATEGORY_TAGS.get(category or "", []))
    tags.extend(ART_FORM_TAGS.get(art_form or "", []))
    # dedupe, keep first occurrence
    return list(dict.fromkeys(tags))


def service_fee(price: Any) -> int:
    value = parse_float(price)
    if value is None:
        return 0
    return int(math.floor(value * settings.SERVICE_FEE_RATE + 0.5))


def split_csv(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [p.strip() for p in raw.split(",") if p.strip()]


@dataclass
class ImageUpload:
    filename: str
    contents: bytes
    content_type: Optional[str] = None


@dataclass
class ProductDraft:
    title: str = ""
    description: str = ""
    price: Any = ""
    original_price: Any = ""
    category: str = ""
    art_form: str = ""
    region: str = ""
    dimensions: str = ""
    materials: str = ""
    colors: str = ""

    def missing_fields(self) -> List[str]:
        required = ("title", "description", "price", "category", "region")
        return [name for name in required if not str(getattr(self, name) or "").strip()]

    def validate(self) -> Optional[str]:
        if self.missing_fields():
            return "Please fill in all required fields"
        price = parse_float(self.price)
        if price is None or price <= 0:
            return "Price must be a positive number"
        if str(self.original_price or "").strip() and parse_float(self.original_price) is None:
            return "Original price must be a number"
        return None

    def tags(self) -> List[str]:
        return generate_tags(self.category, self.art_form, self.region)


def validate_images(images: List[ImageUpload], existing: int = 0) -> Optional[str]:
    if len(images) + existing > settings.MAX_PRODUCT_IMAGES:
        return f"You can upload maximum {settings.MAX_PRODUCT_IMAGES} images per product"
    for image in images:
        error = validate_image(image.filename, image.contents, image.content_type)
        if error:
            return error
    return None


def _object_name(user_id: str, index: int, filename: str) -> str:
    ext = os.path.splitext(filename)[1].lstrip(".").lower() or "jpg"
    return f"{user_id}-{int(time.time() * 1000)}-{secrets.token_hex(6)}-{index}.{ext}"


def upload_images(bucket: ImageBucket, user_id: str, images: List[ImageUpload]) -> List[str]:
    """
    Upload each image and return the public URLs. A failed upload is logged and
    skipped; the caller decides what an empty result means.
    """
    urls = []
    for i, image in enumerate(images):
        name = _object_name(user_id, i, image.filename)
        try:
            bucket.upload(name, image.contents)
        except StorageError as e:
            logger.error("Upload %d failed: %s", i + 1, e)
            continue
        urls.append(bucket.get_public_url(name))
    return urls


def get_seller(db: FileBackedDB, user_id: str) -> Optional[Seller]:
    row = db.get_record("sellers", "user_id", user_id)
    return Seller.from_dict(row) if row else None


def create_product(db: FileBackedDB, bucket: ImageBucket, user: Optional[User],
                   draft: ProductDraft, images: List[ImageUpload]) -> Outcome:
    if not user:
        return Outcome.failure(ErrorKind.AUTH_REQUIRED, "Please sign in to add products")
    error = draft.validate()
    if error:
        return Outcome.failure(ErrorKind.VALIDATION, error)
    if not images:
        return Outcome.failure(ErrorKind.VALIDATION, "Please upload at least one image")
    error = validate_images(images)
    if error:
        return Outcome.failure(ErrorKind.VALIDATION, error)

    try:
        seller = get_seller(db, user.id)
    except DatabaseError as e:
        return Outcome.failure(ErrorKind.REMOTE, e.message)
    if not seller:
        return Outcome.failure(ErrorKind.NOT_FOUND, "Please create a seller profile first")

    image_urls = upload_images(bucket, user.id, images)
    if not image_urls:
        return Outcome.failure(ErrorKind.REMOTE, "Failed to upload images. Please try again.")

    data = {
        "seller_id": seller.id,
        "title": draft.title.strip(),
        "description": draft.description.strip(),
        "price": parse_float(draft.price),
        "original_price": parse_float(draft.original_price),
        "category": draft.category,
        "art_form": draft.art_form or None,
        "region": draft.region,
        "dimensions": draft.dimensions or None,
        "materials": split_csv(draft.materials),
        "colors": split_csv(draft.colors),
        "tags": draft.tags(),
        "images": image_urls,
        "featured_image": image_urls[0],
        "status": "active",
    }
    try:
        row = db.create_record("products", data, id_field="id")
    except DatabaseError as e:
        logger.error("Error creating product: %s", e)
        return Outcome.failure(ErrorKind.REMOTE, e.message)
    return Outcome.success("Your artwork has been listed successfully", data=Product.from_dict(row))


def _owned_product(db: FileBackedDB, user: User, product_id: str):
    row = db.get_record("products", "id", product_id)
    if not row:
        return None, Outcome.failure(ErrorKind.NOT_FOUND, "Product not found")
    seller = get_seller(db, user.id)
    if not seller or seller.id != row.get("seller_id"):
        return None, Outcome.failure(ErrorKind.FORBIDDEN, "Not allowed")
    return row, None


EDITABLE_FIELDS = ("title", "description", "price", "original_price", "category", "region", "tags", "status")


def update_product(db: FileBackedDB, bucket: ImageBucket, user: User, product_id: str,
                   patch: Dict[str, Any], image: Optional[ImageUpload] = None) -> Outcome:
    """
    Apply the edit form. An optional new image replaces the featured image; if
    its upload fails the previous image is kept.
    """
    try:
        row, denied = _owned_product(db, user, product_id)
    except DatabaseError as e:
        return Outcome.failure(ErrorKind.REMOTE, e.message)
    if denied:
        return denied

    updates = {k: v for k, v in patch.items() if k in EDITABLE_FIELDS}
    if "title" in updates and not str(updates["title"] or "").strip():
        return Outcome.failure(ErrorKind.VALIDATION, "Title is required")
    if "price" in updates:
        price = parse_float(updates["price"])
        if price is None or price <= 0:
            return Outcome.failure(ErrorKind.VALIDATION, "Price must be a positive number")
        updates["price"] = price
    if "original_price" in updates:
        updates["original_price"] = parse_float(updates["original_price"])
    if "status" in updates and updates["status"] not in PRODUCT_STATUSES:
        return Outcome.failure(ErrorKind.VALIDATION, f"Status must be one of {', '.join(PRODUCT_STATUSES)}")
    if "tags" in updates:
        updates["tags"] = parse_list(updates["tags"])

    if image is not None:
        error = validate_image(image.filename, image.contents, image.content_type)
        if error:
            return Outcome.failure(ErrorKind.VALIDATION, error)
        urls = upload_images(bucket, user.id, [image])
        if urls:
            updates["featured_image"] = urls[0]
            images = parse_list(row.get("images"))
            if urls[0] not in images:
                updates["images"] = [urls[0]] + images

    updates["updated_at"] = datetime.now(timezone.utc).isoformat(sep=" ")
    try:
        updated = db.update_record("products", "id", product_id, updates)
    except DatabaseError as e:
        logger.error("Error updating product: %s", e)
        return Outcome.failure(ErrorKind.REMOTE, "Failed to update product. Please try again.")
    if not updated:
        return Outcome.failure(ErrorKind.NOT_FOUND, "Product not found")
    return Outcome.success("Product updated successfully!", data=Product.from_dict(updated))


def _object_path(bucket: ImageBucket, url: str) -> Optional[str]:
    prefix = bucket.get_public_url("")
    return url[len(prefix):] if url.startswith(prefix) and len(url) > len(prefix) else None


def delete_product(db: FileBackedDB, user: User, product_id: str, bucket: Optional[ImageBucket] = None) -> Outcome:
    """
    Hard delete. With a bucket, the product's stored images are removed too;
    URLs outside the bucket are left alone.
    """
    try:
        row, denied = _owned_product(db, user, product_id)
        if denied:
            return denied
        deleted = db.delete_where("products", {"id": product_id})
    except DatabaseError as e:
        logger.error("Error deleting product: %s", e)
        return Outcome.failure(ErrorKind.REMOTE, f"Database delete failed: {e.message}")
    if not deleted:
        return Outcome.failure(ErrorKind.REMOTE, "No rows were deleted")
    if bucket is not None:
        urls = parse_list(row.get("images"))
        if row.get("featured_image") and row["featured_image"] not in urls:
            urls.append(row["featured_image"])
        for url in urls:
            path = _object_path(bucket, url)
            if not path:
                continue
            try:
                bucket.remove(path)
            except StorageError as e:
                logger.warning("Could not remove image %s: %s", path, e)
    return Outcome.success("Product deleted")


def seller_products(db: FileBackedDB, user_id: str) -> Optional[List[Product]]:
    """All of the seller's products (any status), newest first. None if not a seller."""
    seller = get_seller(db, user_id)
    if not seller:
        return None
    rows = db.select("products", {"seller_id": seller.id}, order_by="created_at", descending=True)
    return [Product.from_dict(r) for r in rows]


@dataclass
class SellerStats:
    total_products: int = 0
    active_products: int = 0
    total_revenue: float = 0.0
    total_views: int = 0


def seller_stats(products: List[Product]) -> SellerStats:
    total = len(products)
    return SellerStats(
        total_products=total,
        active_products=len([p for p in products if p.status == "active"]),
        total_revenue=float(sum(p.price or 0 for p in products)),
        # no view tracking yet: estimated
        total_views=total * 12,
    )
