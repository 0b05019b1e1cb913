import pytest

from tribalart.core.outcome import ErrorKind, Notifier
from tribalart.database import DatabaseError
from tribalart.services.auth_session import AuthSession
from tribalart.services.cart import CartStore


@pytest.fixture
def cart(db, user_session):
    store = CartStore(db, user_session)
    yield store
    store.close()


def test_add_twice_increments_quantity(cart, make_product):
    product = make_product(price=1200)
    assert cart.add(product["id"]).ok
    assert cart.add(product["id"]).ok
    assert len(cart.items) == 1
    assert cart.items[0].quantity == 2
    assert cart.total_items == 2
    assert cart.total_price == 2400


def test_lines_carry_joined_product_and_seller(cart, make_product, seller):
    product = make_product(title="Peacock", price=900)
    cart.add(product["id"])
    line = cart.items[0]
    assert line.product.title == "Peacock"
    assert line.product.price == 900
    assert line.product.seller_display_name == seller.display_name


def test_totals_follow_current_price(cart, db, make_product):
    product = make_product(price=1000)
    cart.add_many(product["id"], 3)
    db.update_record("products", "id", product["id"], {"price": 1500})
    cart.fetch()
    assert cart.total_price == 4500


@pytest.mark.parametrize("quantity", [0, -1])
def test_non_positive_quantity_removes_line(cart, make_product, quantity):
    product = make_product()
    cart.add(product["id"])
    assert cart.set_quantity(product["id"], quantity).ok
    assert cart.items == []


def test_set_quantity_for_missing_line(cart, make_product):
    product = make_product()
    outcome = cart.set_quantity(product["id"], 4)
    assert outcome.kind == ErrorKind.NOT_FOUND


def test_add_requires_sign_in(db, make_product):
    notifier = Notifier()
    store = CartStore(db, AuthSession(db=db), notifier=notifier)
    outcome = store.add(make_product()["id"])
    assert outcome.kind == ErrorKind.AUTH_REQUIRED
    assert notifier.last().message == "Please sign in to add items to cart"
    assert store.items == []


def test_remote_error_leaves_lines_unchanged(cart, db, make_product, monkeypatch):
    first = make_product(title="First")
    second = make_product(title="Second")
    cart.add(first["id"])

    def failing_create(*args, **kwargs):
        raise DatabaseError("connection reset")

    monkeypatch.setattr(db, "create_record", failing_create)
    outcome = cart.add(second["id"])
    assert outcome.kind == ErrorKind.REMOTE
    assert "connection reset" in cart.notifier.last().message
    assert [line.product_id for line in cart.items] == [first["id"]]


def test_row_added_elsewhere_is_incremented(cart, db, user_session, make_product):
    product = make_product()
    # same user, another device
    db.create_record("cart_items", {"user_id": user_session.user_id, "product_id": product["id"], "quantity": 2})
    assert cart.add(product["id"]).ok
    assert cart.items[0].quantity == 3


def test_clear_and_sign_out_reset_the_cart(cart, make_product, user_session):
    cart.add(make_product()["id"])
    assert cart.clear().ok
    assert cart.items == []

    cart.add(make_product()["id"])
    user_session.sign_out()
    assert cart.items == []
    assert cart.total_items == 0


def test_orphaned_lines_are_dropped(cart, db, make_product):
    keep = make_product(title="Keep")
    gone = make_product(title="Gone")
    cart.add(keep["id"])
    cart.add(gone["id"])
    db.delete_record("products", "id", gone["id"])
    cart.fetch()
    assert [line.product_id for line in cart.items] == [keep["id"]]


def test_summary_shipping_and_gst(cart, make_product):
    empty = cart.summary()
    assert (empty.shipping, empty.tax, empty.total) == (0, 0, 0)

    cheap = make_product(price=1001)
    cart.add(cheap["id"])
    summary = cart.summary()
    assert summary.shipping == 500
    assert summary.tax == 180  # 180.18 rounded
    assert summary.total == 1001 + 500 + 180

    cart.clear()
    pricey = make_product(price=60000)
    cart.add(pricey["id"])
    assert cart.summary().shipping == 0


# --- API ---

def test_cart_endpoints(client, auth_header, user_session, make_product):
    product = make_product(price=2500)
    hdr = auth_header(user_session)

    r = client.post("/api/cart/items", json={"product_id": product["id"], "quantity": 2}, headers=hdr)
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["total_items"] == 2
    assert body["items"][0]["subtotal"] == 5000
    assert body["summary"]["tax"] == 900

    r = client.put(f"/api/cart/items/{product['id']}", json={"quantity": 5}, headers=hdr)
    assert r.json()["total_items"] == 5

    r = client.delete(f"/api/cart/items/{product['id']}", headers=hdr)
    assert r.status_code == 200
    assert r.json()["items"] == []


def test_cart_unknown_product_and_anonymous(client, auth_header, user_session):
    r = client.post("/api/cart/items", json={"product_id": "nope"}, headers=auth_header(user_session))
    assert r.status_code == 404
    assert client.get("/api/cart").status_code == 401


def test_add_many_is_capped(cart, db, make_product):
    product = make_product()
    outcome = cart.add_many(product["id"], 11)
    assert outcome.kind == ErrorKind.VALIDATION
    assert db.select("cart_items") == []
    assert cart.add_many(product["id"], 10).ok
    assert cart.total_items == 10


def test_cart_add_quantity_limit(client, auth_header, user_session, make_product):
    product = make_product()
    r = client.post("/api/cart/items", json={"product_id": product["id"], "quantity": 11},
                    headers=auth_header(user_session))
    assert r.status_code == 422
