from conftest import PASSWORD


def _signup(client, email, name):
    r = client.post("/api/auth/signup", json={"email": email, "password": PASSWORD, "full_name": name})
    assert r.status_code == 201, r.text
    client.cookies.clear()
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


def test_seller_lists_and_buyer_checks_out(client, make_sample_jpeg_bytes):
    artist = _signup(client, "artist@example.com", "Bhuri Bai")
    buyer = _signup(client, "buyer@example.com", "Meera")

    r = client.post("/api/sellers", json={"display_name": "Bhuri Bai", "region": "Madhya Pradesh"}, headers=artist)
    assert r.status_code == 201, r.text

    # catalog is live before the listing exists
    assert client.get("/api/products").json() == []

    form = {"title": "Bhil Festival", "description": "Dots on canvas", "price": "30000",
            "category": "Painting", "art_form": "Bhil / Pithora", "region": "Madhya Pradesh"}
    files = [("images", ("festival.jpg", make_sample_jpeg_bytes(), "image/jpeg"))]
    created = client.post("/api/products", data=form, files=files, headers=artist)
    assert created.status_code == 201, created.text
    product_id = created.json()["id"]

    shop = client.get("/api/products", params={"q": "bhuri"}).json()
    assert [p["id"] for p in shop] == [product_id]
    assert shop[0]["seller"]["display_name"] == "Bhuri Bai"

    assert client.post("/api/wishlist", json={"product_id": product_id}, headers=buyer).status_code == 201
    moved = client.post(f"/api/wishlist/{product_id}/move-to-cart", headers=buyer)
    assert moved.status_code == 201

    cart = client.put(f"/api/cart/items/{product_id}", json={"quantity": 2}, headers=buyer).json()
    assert cart["summary"] == {"subtotal": 60000, "total_items": 2, "shipping": 0, "tax": 10800, "total": 70800}

    # the artist removes the listing: it leaves the shop and the buyer's cart
    assert client.delete(f"/api/products/{product_id}", headers=artist).status_code == 200
    assert client.get("/api/products").json() == []
    assert client.get("/api/cart", headers=buyer).json()["items"] == []


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
    assert r.headers["X-Content-Type-Options"] == "nosniff"
