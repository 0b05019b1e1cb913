from tribalart.core.outcome import ErrorKind
from tribalart.services import profiles, sellers


def test_become_seller_once(db, user_session):
    outcome = sellers.become_seller(db, user_session.user, " Jivya ", "Maharashtra", "Warli painter")
    assert outcome.ok
    assert outcome.data.display_name == "Jivya"
    assert outcome.data.onboarding_status == "approved"

    again = sellers.become_seller(db, user_session.user, "Jivya", "Maharashtra")
    assert again.kind == ErrorKind.ALREADY_EXISTS
    assert again.message == "You're already registered as a seller!"


def test_become_seller_validation(db, user_session):
    assert sellers.become_seller(db, user_session.user, "Name", "").kind == ErrorKind.VALIDATION
    assert sellers.become_seller(db, None, "Name", "Goa").kind == ErrorKind.AUTH_REQUIRED


def test_list_artists_filter(db, make_user):
    for email, name in (("a@example.com", "Bhajju Shyam"), ("b@example.com", "Sita Devi")):
        sellers.become_seller(db, make_user(email).user, name, "Bihar")
    assert [s.display_name for s in sellers.list_artists(db, "shyam")] == ["Bhajju Shyam"]
    assert len(sellers.list_artists(db)) == 2


def test_public_profile_shows_active_products(db, seller, make_product):
    make_product(title="On sale")
    make_product(title="Hidden", status="draft")
    profile = sellers.public_profile(db, seller.id)
    assert profile.seller.id == seller.id
    assert [p.title for p in profile.products] == ["On sale"]
    assert sellers.public_profile(db, "missing") is None


def test_profile_created_on_first_access(db, user_session):
    profile = profiles.get_or_create_profile(db, user_session.user)
    assert profile.full_name == "Buyer One"
    assert profile.email == "buyer@example.com"
    assert profile.preferences["email_notifications"] is True
    assert len(db.select("profiles")) == 1
    profiles.get_or_create_profile(db, user_session.user)
    assert len(db.select("profiles")) == 1


def test_update_profile_keeps_known_fields(db, user_session):
    outcome = profiles.update_profile(db, user_session.user, {
        "city": "Patna", "pincode": "800001", "email": "spoof@example.com",
        "preferences": {"sms_notifications": True, "unknown": True},
    })
    assert outcome.ok
    assert outcome.data.city == "Patna"
    assert outcome.data.email == "buyer@example.com"
    assert outcome.data.preferences == {"email_notifications": True, "sms_notifications": True, "marketing_emails": True}


def test_rename_updates_artist_name(db, seller_session, seller):
    outcome = profiles.rename(db, seller_session.user, "Sita Devi Jha", "Sita Jha")
    assert outcome.ok
    assert outcome.data.full_name == "Sita Devi Jha"
    assert db.get_record("sellers", "id", seller.id)["display_name"] == "Sita Jha"
    assert profiles.rename(db, seller_session.user, "  ").kind == ErrorKind.VALIDATION


# --- API ---

def test_seller_endpoints(client, auth_header, user_session):
    hdr = auth_header(user_session)
    r = client.post("/api/sellers", json={"display_name": "Ganga Devi", "region": "Bihar"}, headers=hdr)
    assert r.status_code == 201, r.text
    seller_id = r.json()["id"]
    assert client.post("/api/sellers", json={"display_name": "Again", "region": "Bihar"}, headers=hdr).status_code == 409

    assert [s["id"] for s in client.get("/api/sellers", params={"q": "ganga"}).json()] == [seller_id]
    page = client.get(f"/api/sellers/{seller_id}").json()
    assert page["seller"]["display_name"] == "Ganga Devi"
    assert page["products"] == []
    assert client.get("/api/sellers/missing").status_code == 404


def test_profile_endpoints(client, auth_header, user_session):
    hdr = auth_header(user_session)
    r = client.get("/api/profile", headers=hdr)
    assert r.status_code == 200
    assert r.json()["full_name"] == "Buyer One"

    r = client.put("/api/profile", json={"phone": "9876543210", "preferences": {"marketing_emails": False}}, headers=hdr)
    assert r.status_code == 200, r.text
    assert r.json()["phone"] == "9876543210"
    assert r.json()["preferences"]["marketing_emails"] is False

    r = client.post("/api/profile/rename", json={"full_name": "Buyer Renamed"}, headers=hdr)
    assert r.json()["full_name"] == "Buyer Renamed"
    assert client.get("/api/profile").status_code == 401
