# tests/conftest.py
import io
import os
import shutil
import sys
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from PIL import Image

# ensure project root is importable
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

# point the settings at a temp dir before anything under tribalart is imported:
# the module-level db and the static mount are created at import time
_tmp_root = tempfile.mkdtemp(prefix="tribalart_test_")
os.environ["DATA_DIR"] = str(Path(_tmp_root) / "data")
os.environ["IMAGE_DIR"] = str(Path(_tmp_root) / "images")
Path(os.environ["IMAGE_DIR"]).mkdir(parents=True, exist_ok=True)

from tribalart.api.deps import get_bucket, get_db  # noqa: E402
from tribalart.database import FileBackedDB  # noqa: E402
from tribalart.main import app  # noqa: E402
from tribalart.services import sellers  # noqa: E402
from tribalart.services.auth_session import AuthSession  # noqa: E402
from tribalart.utils.images import ImageBucket  # noqa: E402

PASSWORD = "secret123"


def pytest_sessionfinish(session, exitstatus):
    shutil.rmtree(_tmp_root, ignore_errors=True)


@pytest.fixture
def db(tmp_path):
    """A fresh, empty set of tables per test."""
    return FileBackedDB(data_dir=tmp_path / "data")


@pytest.fixture
def bucket(tmp_path):
    return ImageBucket("images", base_dir=tmp_path / "storage", base_url="/static/images")


@pytest.fixture
def client(db, bucket):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_bucket] = lambda: bucket
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        catalog = getattr(app.state, "catalog", None)
        if catalog is not None:
            catalog.close()


@pytest.fixture
def auth_header():
    """
    Build an Authorization header from a session or a raw token.
    Usage: hdr = auth_header(session)
    """
    def _h(session_or_token):
        token = getattr(session_or_token, "access_token", session_or_token)
        return {"Authorization": f"Bearer {token}"}
    return _h


@pytest.fixture
def make_user(db):
    """
    Sign up a user directly against the tables and return the signed-in AuthSession.
    Usage: session = make_user("asha@example.com", "Asha")
    """
    counter = {"n": 0}

    def _fn(email=None, full_name="Test Buyer", password=PASSWORD):
        counter["n"] += 1
        email = email or f"user{counter['n']}@example.com"
        session = AuthSession(db=db)
        outcome = session.sign_up(email, password, full_name)
        assert outcome.ok, outcome.message
        return session
    return _fn


@pytest.fixture
def user_session(make_user):
    return make_user("buyer@example.com", "Buyer One")


@pytest.fixture
def seller_session(make_user):
    return make_user("artist@example.com", "Artist One")


@pytest.fixture
def seller(db, seller_session):
    outcome = sellers.become_seller(db, seller_session.user, "Sita Devi", "Bihar", "Madhubani painter")
    assert outcome.ok, outcome.message
    return outcome.data


@pytest.fixture
def make_product(db, seller):
    """
    Insert a product row for the seeded seller; keyword arguments override the defaults.
    Usage: p = make_product(title="Warli Village", price=3000)
    """
    def _fn(**fields):
        data = {
            "seller_id": seller.id,
            "title": "Fish Pair",
            "description": "Hand painted on handmade paper",
            "price": 4500,
            "category": "Painting",
            "art_form": "Madhubani",
            "region": "Bihar",
            "tags": ["painting", "madhubani"],
            "images": ["/static/images/images/fish.jpg"],
            "featured_image": "/static/images/images/fish.jpg",
            "status": "active",
        }
        data.update(fields)
        return db.create_record("products", data, id_field="id")
    return _fn


@pytest.fixture
def make_sample_jpeg_bytes():
    """
    Return a callable that generates JPEG bytes for tests that need image uploads.
    Usage: jpg = make_sample_jpeg_bytes(size=(200,200))
    """
    def _fn(size=(200, 200), color=(180, 120, 60)):
        bio = io.BytesIO()
        im = Image.new("RGB", size, color)
        im.save(bio, format="JPEG", quality=85)
        bio.seek(0)
        return bio.read()
    return _fn
