# tribalart/main.py
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
import logging
from contextlib import asynccontextmanager

from tribalart.config import settings
from tribalart.database import db
from tribalart.api.routes import auth as auth_routes
from tribalart.api.routes import products as product_routes
from tribalart.api.routes import cart as cart_routes
from tribalart.api.routes import wishlist as wishlist_routes
from tribalart.api.routes import sellers as seller_routes
from tribalart.api.routes import profile as profile_routes
from tribalart.middleware.cors_config import configure_cors
from tribalart.middleware.security_headers import add_security_headers
from tribalart.services.catalog import CatalogCache


logger = logging.getLogger("uvicorn.error")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context: load the catalog and keep it subscribed to product
    changes while the app serves; drop the subscription on shutdown.
    """
    # --- startup logic ---
    products_path = db._file_path("products")
    if not products_path.exists():
        logger.warning(
            "Products file not found at %s, the shop will be empty (run scripts/init_db.py to seed demo data).",
            products_path,
        )
    app.state.catalog = CatalogCache(db)
    logger.info("Catalog loaded with %d active products", len(app.state.catalog.products))

    yield
    # --- shutdown logic ---
    app.state.catalog.close()
    logger.info("Shutting down Tribal Art Store API")


app = FastAPI(title="Tribal Art Store API", version="0.1.0", lifespan=lifespan)
configure_cors(app)
add_security_headers(app)

# uploaded artwork images are served from the bucket directory
if settings.IMAGE_DIR.is_dir():
    app.mount(settings.PUBLIC_BASE_URL, StaticFiles(directory=str(settings.IMAGE_DIR)), name="images")

app.include_router(auth_routes.router)
app.include_router(product_routes.router)
app.include_router(cart_routes.router)
app.include_router(wishlist_routes.router)
app.include_router(seller_routes.router)
app.include_router(profile_routes.router)


@app.get("/health", tags=["root"])
async def health():
    return {"status": "ok", "service": "Tribal Art Store API"}
