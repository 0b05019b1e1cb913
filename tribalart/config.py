# tribalart/config.py
from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from pathlib import Path
from functools import lru_cache

class Settings(BaseSettings):
    ENV: str = "development"
    DATA_DIR: Path = Path("data")  # where CSV / XLSX tables live
    USERS_FILE: str = "users.csv"
    PROFILES_FILE: str = "profiles.csv"
    SELLERS_FILE: str = "sellers.csv"
    PRODUCTS_FILE: str = "products.csv"
    CART_ITEMS_FILE: str = "cart_items.csv"
    WISHLIST_FILE: str = "wishlist.csv"
    PASSWORD_RESETS_FILE: str = "password_resets.csv"

    # object storage for product images
    IMAGE_DIR: Path = Path("static/images")
    PUBLIC_BASE_URL: str = "/static/images"
    MAX_PRODUCT_IMAGES: int = 3
    MAX_CART_ADD_QUANTITY: int = 10
    MAX_IMAGE_BYTES: int = 5 * 1024 * 1024

    # auth
    JWT_SECRET: str = "dev-secret-change-me"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    PASSWORD_RESET_EXPIRE_MINUTES: int = 60
    MIN_PASSWORD_LENGTH: int = 6

    # pricing (INR)
    FREE_SHIPPING_THRESHOLD: float = 50000.0
    SHIPPING_COST: float = 500.0
    GST_RATE: float = 0.18
    SERVICE_FEE_RATE: float = 0.05

    CORS_ORIGINS: str = ""  # comma separated

    # Example .env:
    # DATA_DIR=./data
    # PRODUCTS_FILE=products.xlsx

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

@lru_cache()
def get_settings() -> Settings:
    """Return cached Settings instance."""
    return Settings()

settings = Settings()
