"""
Configuration management for the TechVault Store API.

Loads settings from .env via pydantic-settings.

Notes:
    - validate_production_settings() enforces strict CORS and required
      secrets in production
    - pricing constants (shipping threshold, tax rate) live here so checkout
      and the storefront agree on them
"""
import logging

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── Application ─────────────────────────────────────────────────
    app_name: str = "TechVault Store API"
    app_version: str = "1.0.0"
    environment: str = "development"

    # ── Database ────────────────────────────────────────────────────
    database_url: str = "sqlite:///./data/store.db"

    # ── Auth (JWT) ──────────────────────────────────────────────────
    jwt_secret: str = ""
    jwt_issuer: str = "techvault-api"
    jwt_access_ttl_days: int = 30
    bcrypt_rounds: int = 12

    # ── Stripe ──────────────────────────────────────────────────────
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    stripe_api_version: str = "2023-10-16"

    # ── Checkout pricing ────────────────────────────────────────────
    free_shipping_threshold: float = 50.0
    flat_shipping_price: float = 9.99
    tax_rate: float = 0.08

    # ── Transactional email ─────────────────────────────────────────
    email_api_url: str = "https://api.resend.com/emails"
    email_api_key: str = ""
    email_sender: str = "TechVault <orders@techvault.com>"

    # ── Seed data ───────────────────────────────────────────────────
    admin_email: str = "admin@techvault.com"
    admin_password: str = "admin123"

    # ── CORS ────────────────────────────────────────────────────────
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # allow unknown .env keys without crashing
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate_production_settings(self):
        """
        Validate settings for production safety.

        Called during app startup. Raises in production, warns elsewhere.
        """
        if self.is_production:
            if "*" in self.cors_origins:
                raise ValueError(
                    "CORS_ORIGINS must not contain '*' in production. "
                    "Set explicit allowed origins."
                )
            if not self.jwt_secret:
                raise ValueError(
                    "JWT_SECRET must be set in production. "
                    "It is used to sign customer and admin access tokens."
                )
            if not self.stripe_secret_key:
                raise ValueError(
                    "STRIPE_SECRET_KEY must be set in production. "
                    "Checkout cannot create payment intents without it."
                )
            if self.admin_password == "admin123":
                raise ValueError("ADMIN_PASSWORD must be changed in production.")
            logger.info("Production settings validated")
        else:
            warnings = []
            if not self.jwt_secret:
                warnings.append("JWT_SECRET is empty (login will fail)")
            if not self.stripe_secret_key:
                warnings.append("STRIPE_SECRET_KEY is empty (payments disabled)")
            if not self.stripe_webhook_secret:
                warnings.append("STRIPE_WEBHOOK_SECRET is empty (webhooks rejected)")
            if "*" in self.cors_origins:
                warnings.append("CORS_ORIGINS contains '*' (open access)")
            for w in warnings:
                logger.warning(w)


# Global settings instance
settings = Settings()
