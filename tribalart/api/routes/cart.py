from fastapi import APIRouter, Depends, status

from tribalart.api.deps import ensure_product, get_cart_store, get_db, raise_for_outcome
from tribalart.api.schemas.cart import CartAdd, CartOut, CartQuantity
from tribalart.database import FileBackedDB
from tribalart.services.cart import CartStore

router = APIRouter(prefix="/api/cart", tags=["cart"])


def cart_response(store: CartStore) -> dict:
    return {
        "items": [line.to_dict() for line in store.items],
        "total_items": store.total_items,
        "total_price": store.total_price,
        "summary": store.summary().to_dict(),
    }


@router.get("", response_model=CartOut)
def get_cart(store: CartStore = Depends(get_cart_store)):
    """
    The current user's cart with product/seller data joined at read time,
    totals and the checkout summary (shipping, GST).
    """
    return cart_response(store)


@router.post("/items", response_model=CartOut, status_code=status.HTTP_201_CREATED)
def add_item(payload: CartAdd, store: CartStore = Depends(get_cart_store), db: FileBackedDB = Depends(get_db)):
    """
    Add a product. An existing line is incremented instead of duplicated.
    """
    ensure_product(db, payload.product_id)
    raise_for_outcome(store.add_many(payload.product_id, payload.quantity))
    return cart_response(store)


@router.put("/items/{product_id}", response_model=CartOut)
def set_quantity(product_id: str, payload: CartQuantity, store: CartStore = Depends(get_cart_store)):
    """Set a line's quantity; zero or less removes the line."""
    raise_for_outcome(store.set_quantity(product_id, payload.quantity))
    return cart_response(store)


@router.delete("/items/{product_id}", response_model=CartOut)
def remove_item(product_id: str, store: CartStore = Depends(get_cart_store)):
    raise_for_outcome(store.remove(product_id))
    return cart_response(store)


@router.delete("", response_model=CartOut)
def clear_cart(store: CartStore = Depends(get_cart_store)):
    raise_for_outcome(store.clear())
    return cart_response(store)
