import io

import pytest
from PIL import Image

from tribalart.core.outcome import ErrorKind
from tribalart.services import listing
from tribalart.services.listing import ImageUpload, ProductDraft


def _draft(**overrides):
    fields = dict(title="Village Harvest", description="Warli on cloth", price="8200", category="Painting",
                  art_form="Warli", region="Maharashtra", materials="cloth, mud", colors="white,brown")
    fields.update(overrides)
    return ProductDraft(**fields)


@pytest.fixture
def jpeg(make_sample_jpeg_bytes):
    return ImageUpload("harvest.jpg", make_sample_jpeg_bytes(), "image/jpeg")


def test_generate_tags_dedupes_in_order():
    tags = listing.generate_tags("Painting", "Madhubani", "Bihar")
    assert tags == ["painting", "madhubani", "bihar", "handmade", "art", "canvas", "folk", "mithila"]
    assert listing.generate_tags(None, None, "Goa") == ["goa"]


def test_service_fee():
    assert listing.service_fee(1000) == 50
    assert listing.service_fee("1010") == 51
    assert listing.service_fee("") == 0


def test_draft_validation():
    assert _draft().validate() is None
    assert _draft(region="").validate() == "Please fill in all required fields"
    assert _draft(price="abc").validate() == "Price must be a positive number"
    assert _draft(original_price="n/a").validate() == "Original price must be a number"


def test_create_product(db, bucket, seller_session, seller, jpeg):
    outcome = listing.create_product(db, bucket, seller_session.user, _draft(), [jpeg])
    assert outcome.ok, outcome.message
    product = outcome.data
    assert product.seller_id == seller.id
    assert product.status == "active"
    assert product.materials == ["cloth", "mud"]
    assert product.tags[:3] == ["painting", "warli", "maharashtra"]
    assert product.featured_image == product.images[0]
    assert product.featured_image.startswith("/static/images/images/")
    assert len(list(bucket.root.iterdir())) == 1


def test_create_requires_seller_profile(db, bucket, user_session, jpeg):
    outcome = listing.create_product(db, bucket, user_session.user, _draft(), [jpeg])
    assert outcome.kind == ErrorKind.NOT_FOUND
    assert outcome.message == "Please create a seller profile first"


def test_create_image_rules(db, bucket, seller_session, seller, jpeg):
    none = listing.create_product(db, bucket, seller_session.user, _draft(), [])
    assert none.message == "Please upload at least one image"
    too_many = listing.create_product(db, bucket, seller_session.user, _draft(), [jpeg] * 4)
    assert too_many.message == "You can upload maximum 3 images per product"
    not_image = ImageUpload("notes.jpg", b"plain text", "image/jpeg")
    bad = listing.create_product(db, bucket, seller_session.user, _draft(), [not_image])
    assert bad.kind == ErrorKind.VALIDATION
    assert db.select("products") == []


def test_update_product(db, bucket, seller_session, make_product, jpeg):
    product = make_product(price=1000)
    outcome = listing.update_product(db, bucket, seller_session.user, product["id"],
                                     {"price": "1500", "tags": "warli, tribal", "seller_id": "hijack"})
    assert outcome.ok
    assert outcome.data.price == 1500
    assert outcome.data.tags == ["warli", "tribal"]
    assert outcome.data.seller_id == product["seller_id"]

    replaced = listing.update_product(db, bucket, seller_session.user, product["id"], {}, image=jpeg)
    assert replaced.data.featured_image != product["featured_image"]
    assert replaced.data.images[0] == replaced.data.featured_image


def test_update_validation(db, bucket, seller_session, make_product):
    product = make_product()
    assert listing.update_product(db, bucket, seller_session.user, product["id"], {"price": 0}).kind == ErrorKind.VALIDATION
    assert listing.update_product(db, bucket, seller_session.user, product["id"], {"status": "gone"}).kind == ErrorKind.VALIDATION
    assert listing.update_product(db, bucket, seller_session.user, "missing", {}).kind == ErrorKind.NOT_FOUND


def test_only_the_owner_can_edit_or_delete(db, bucket, user_session, make_product):
    product = make_product()
    assert listing.update_product(db, bucket, user_session.user, product["id"], {"title": "x"}).kind == ErrorKind.FORBIDDEN
    assert listing.delete_product(db, user_session.user, product["id"]).kind == ErrorKind.FORBIDDEN
    assert db.get_record("products", "id", product["id"]) is not None


def test_delete_product(db, seller_session, make_product):
    product = make_product()
    assert listing.delete_product(db, seller_session.user, product["id"]).ok
    assert db.get_record("products", "id", product["id"]) is None


def test_seller_stats(db, seller_session, make_product):
    make_product(price=1000)
    make_product(price=2500, status="draft")
    products = listing.seller_products(db, seller_session.user_id)
    stats = listing.seller_stats(products)
    assert stats.total_products == 2
    assert stats.active_products == 1
    assert stats.total_revenue == 3500
    assert stats.total_views == 24
    assert listing.seller_products(db, "not-a-seller") is None


# --- API ---

def test_list_and_filter_products(client, make_product):
    make_product(title="Small", price=3000, created_at="2024-01-01 00:00:00")
    make_product(title="Medium", price=7000, created_at="2024-01-02 00:00:00")
    make_product(title="Large", price=22000, created_at="2024-01-03 00:00:00")
    make_product(title="Hidden", price=100, status="draft")

    r = client.get("/api/products")
    assert r.status_code == 200
    assert [p["title"] for p in r.json()] == ["Large", "Medium", "Small"]

    r = client.get("/api/products", params={"price_range": ["Under ₹5,000", "Above ₹20,000"], "sort": "price-low"})
    assert [p["title"] for p in r.json()] == ["Small", "Large"]

    assert client.get("/api/products", params={"sort": "cheapest"}).status_code == 400


def test_filters_and_options(client, make_product):
    make_product(category="Sculpture", art_form="Dhokra")
    filters = client.get("/api/products/filters").json()
    assert filters["categories"] == ["Sculpture"]
    assert "Dhokra" in filters["art_styles"]
    assert filters["price_ranges"][0] == "Under ₹5,000"

    options = client.get("/api/products/options").json()
    assert options["max_images"] == 3
    assert "Warli" in options["art_forms"]


def test_product_detail(client, make_product, seller):
    product = make_product(original_price=6000, price=4500, status="draft")
    r = client.get(f"/api/products/{product['id']}")
    assert r.status_code == 200
    body = r.json()
    assert body["seller"]["display_name"] == seller.display_name
    assert body["discount_percent"] == 25
    assert client.get("/api/products/missing").status_code == 404


def test_create_product_endpoint(client, auth_header, seller_session, seller, make_sample_jpeg_bytes):
    form = {"title": "Pithora Horse", "description": "Wall painting", "price": "12000",
            "category": "Painting", "art_form": "Bhil / Pithora", "region": "Gujarat"}
    files = [("images", ("horse.jpg", make_sample_jpeg_bytes(), "image/jpeg"))]
    r = client.post("/api/products", data=form, files=files, headers=auth_header(seller_session))
    assert r.status_code == 201, r.text
    created = r.json()
    assert created["seller_id"] == seller.id
    assert "gujarat" in created["tags"]

    listed = client.get("/api/products").json()
    assert [p["id"] for p in listed] == [created["id"]]


def test_create_product_missing_fields(client, auth_header, seller_session, seller, make_sample_jpeg_bytes):
    files = [("images", ("a.jpg", make_sample_jpeg_bytes(), "image/jpeg"))]
    r = client.post("/api/products", data={"title": "Only a title"}, files=files, headers=auth_header(seller_session))
    assert r.status_code == 400
    assert r.json()["detail"] == "Please fill in all required fields"


def test_update_and_delete_endpoints(client, auth_header, seller_session, user_session, make_product):
    product = make_product()
    url = f"/api/products/{product['id']}"

    forbidden = client.put(url, json={"title": "Mine now"}, headers=auth_header(user_session))
    assert forbidden.status_code == 403

    r = client.put(url, json={"title": "Renamed", "status": "sold"}, headers=auth_header(seller_session))
    assert r.status_code == 200, r.text
    assert r.json()["title"] == "Renamed"
    assert r.json()["status"] == "sold"

    r = client.delete(url, headers=auth_header(seller_session))
    assert r.json() == {"ok": True}
    assert client.get(url).status_code == 404


def test_dashboard(client, auth_header, seller_session, user_session, make_product):
    make_product(price=1000)
    r = client.get("/api/products/dashboard", headers=auth_header(seller_session))
    assert r.status_code == 200
    assert r.json()["stats"]["total_views"] == 12
    assert client.get("/api/products/dashboard", headers=auth_header(user_session)).status_code == 404


def _bmp_bytes():
    bio = io.BytesIO()
    Image.new("RGB", (20, 20), (10, 20, 30)).save(bio, format="BMP")
    return bio.getvalue()


def test_unsupported_extension_is_a_validation_error(db, bucket, seller_session, seller):
    bmp = ImageUpload("art.bmp", _bmp_bytes(), "image/bmp")
    outcome = listing.create_product(db, bucket, seller_session.user, _draft(), [bmp])
    assert outcome.kind == ErrorKind.VALIDATION
    assert outcome.message == "art.bmp must be a JPG, PNG, WEBP or GIF image"
    assert not bucket.root.exists()
    assert db.select("products") == []


def test_replace_image_rejects_unsupported_extension(client, auth_header, seller_session, make_product):
    product = make_product()
    files = {"file": ("art.bmp", _bmp_bytes(), "image/bmp")}
    r = client.post(f"/api/products/{product['id']}/image", files=files, headers=auth_header(seller_session))
    assert r.status_code == 400
    assert client.get(f"/api/products/{product['id']}").json()["featured_image"] == product["featured_image"]


def test_delete_removes_stored_images(db, bucket, seller_session, seller, jpeg):
    created = listing.create_product(db, bucket, seller_session.user, _draft(), [jpeg]).data
    assert len(list(bucket.root.iterdir())) == 1
    assert listing.delete_product(db, seller_session.user, created.id, bucket=bucket).ok
    assert list(bucket.root.iterdir()) == []


def test_delete_endpoint_removes_stored_images(client, auth_header, seller_session, seller, bucket,
                                               make_sample_jpeg_bytes):
    form = {"title": "Gond Deer", "description": "Ink", "price": "5000", "category": "Painting", "region": "Madhya Pradesh"}
    files = [("images", ("deer.jpg", make_sample_jpeg_bytes(), "image/jpeg"))]
    created = client.post("/api/products", data=form, files=files, headers=auth_header(seller_session)).json()
    r = client.delete(f"/api/products/{created['id']}", headers=auth_header(seller_session))
    assert r.status_code == 200
    assert list(bucket.root.iterdir()) == []
