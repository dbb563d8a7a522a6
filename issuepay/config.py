import os
from functools import lru_cache
from pathlib import Path
from dotenv import load_dotenv

# Force-load .env (Windows-safe, reload-safe)
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(dotenv_path=BASE_DIR / ".env")


class Settings:
    """Runtime configuration read from the environment."""

    def __init__(self):
        self.DATABASE_URL = os.getenv("DATABASE_URL")

        self.STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY")
        self.STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET")
        self.CHECKOUT_CURRENCY = os.getenv("CHECKOUT_CURRENCY", "USD")

        # {site} is replaced with SITE_DOMAIN, {CHECKOUT_SESSION_ID} is left for Stripe
        self.SITE_DOMAIN = os.getenv("SITE_DOMAIN", "http://localhost:5173").rstrip("/")
        self.SUCCESS_URL_TEMPLATE = os.getenv(
            "SUCCESS_URL_TEMPLATE",
            "{site}/dashboard/payment-success?session_id={CHECKOUT_SESSION_ID}",
        )
        self.LEGACY_SUCCESS_URL_TEMPLATE = os.getenv(
            "LEGACY_SUCCESS_URL_TEMPLATE", "{site}/dashboard/payment-success"
        )
        self.CANCEL_URL_TEMPLATE = os.getenv(
            "CANCEL_URL_TEMPLATE", "{site}/dashboard/payment-cancelled"
        )

        self.JWT_SECRET = os.getenv("JWT_SECRET")
        self.JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
        self.JWT_AUDIENCE = os.getenv("JWT_AUDIENCE") or None

        self.CORS_ORIGINS = [
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", "*").split(",")
            if origin.strip()
        ]
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.PORT = int(os.getenv("PORT", "3000"))

    def redirect_url(self, template: str) -> str:
        # str.format would choke on Stripe's own placeholder
        return template.replace("{site}", self.SITE_DOMAIN)


@lru_cache
def get_settings() -> Settings:
    return Settings()
