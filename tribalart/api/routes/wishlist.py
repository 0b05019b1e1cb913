from typing import List
from fastapi import APIRouter, Depends, Response, status

from tribalart.api.deps import ensure_product, get_cart_store, get_db, get_wishlist_store, raise_for_outcome
from tribalart.api.schemas.cart import CartOut
from tribalart.api.schemas.product import ProductOut
from tribalart.api.schemas.wishlist import WishlistCreate, WishlistItemOut, WishlistToggleOut
from tribalart.api.routes.cart import cart_response
from tribalart.database import FileBackedDB
from tribalart.models.wishlist import WishlistEntry
from tribalart.services.cart import CartStore
from tribalart.services.wishlist import WishlistStore

router = APIRouter(prefix="/api/wishlist", tags=["wishlist"])


def _entry_out(entry: WishlistEntry) -> dict:
    out = entry.to_dict()
    out["product"] = ProductOut.from_product(entry.product) if entry.product else None
    return out


@router.get("", response_model=List[WishlistItemOut])
def list_wishlist(store: WishlistStore = Depends(get_wishlist_store)):
    return [_entry_out(e) for e in store.items]


@router.post("", status_code=status.HTTP_201_CREATED, response_model=List[WishlistItemOut])
def add_to_wishlist(payload: WishlistCreate, store: WishlistStore = Depends(get_wishlist_store),
                    db: FileBackedDB = Depends(get_db)):
    """
    Save a product. Saving it twice answers 409 ("Item already in wishlist").
    """
    ensure_product(db, payload.product_id)
    raise_for_outcome(store.add(payload.product_id))
    return [_entry_out(e) for e in store.items]


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_from_wishlist(product_id: str, store: WishlistStore = Depends(get_wishlist_store)):
    raise_for_outcome(store.remove(product_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{product_id}/toggle", response_model=WishlistToggleOut)
def toggle_wishlist(product_id: str, store: WishlistStore = Depends(get_wishlist_store),
                    db: FileBackedDB = Depends(get_db)):
    ensure_product(db, product_id)
    raise_for_outcome(store.toggle(product_id))
    return {"product_id": product_id, "in_wishlist": store.is_member(product_id)}


# --- move wishlist item to cart ---
@router.post("/{product_id}/move-to-cart", status_code=status.HTTP_201_CREATED, response_model=CartOut)
def move_to_cart(product_id: str, store: WishlistStore = Depends(get_wishlist_store),
                 cart: CartStore = Depends(get_cart_store), db: FileBackedDB = Depends(get_db)):
    """
    Add the saved product to the cart and drop it from the wishlist.
    Returns the updated cart.
    """
    ensure_product(db, product_id)
    raise_for_outcome(store.move_to_cart(product_id, cart))
    return cart_response(cart)
