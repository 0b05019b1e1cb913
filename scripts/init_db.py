"""Creates the data/ tables and image folder and seeds a demo seller with a few artworks."""
import logging

from tribalart.config import settings
from tribalart.database import db
from tribalart.services import sellers
from tribalart.services.auth_session import AuthSession
from tribalart.services.listing import generate_tags

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("init_db")

DEMO_EMAIL = "demo.artist@example.com"
DEMO_PASSWORD = "tribal-demo"

DEMO_PRODUCTS = [
    ("Fish of Mithila", "Painting", "Madhubani", "Bihar", 4500, 5200),
    ("Harvest Dance", "Painting", "Warli", "Maharashtra", 8200, None),
    ("Forest Spirit", "Painting", "Gond", "Madhya Pradesh", 15800, 18000),
    ("Dhokra Horse", "Sculpture", "Dhokra", "Chhattisgarh", 24500, None),
]


settings.IMAGE_DIR.mkdir(parents=True, exist_ok=True)

if db.get_record("users", "email", DEMO_EMAIL):
    logger.info("%s already exists, nothing to seed", DEMO_EMAIL)
else:
    session = AuthSession(db=db)
    outcome = session.sign_up(DEMO_EMAIL, DEMO_PASSWORD, "Demo Artist")
    if not outcome.ok:
        raise SystemExit(f"Could not create demo user: {outcome.message}")
    outcome = sellers.become_seller(db, session.user, "Demo Artist", "Bihar", "Folk art collective")
    if not outcome.ok:
        raise SystemExit(f"Could not create demo seller: {outcome.message}")
    seller = outcome.data
    for title, category, art_form, region, price, original in DEMO_PRODUCTS:
        db.create_record(
            "products",
            {
                "seller_id": seller.id,
                "title": title,
                "description": f"{art_form} artwork from {region}",
                "price": price,
                "original_price": original,
                "category": category,
                "art_form": art_form,
                "region": region,
                "tags": generate_tags(category, art_form, region),
                "images": [],
                "status": "active",
            },
        )
    logger.info("Seeded %s (password %s) with %d products", DEMO_EMAIL, DEMO_PASSWORD, len(DEMO_PRODUCTS))
