from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Pydantic V2 Configuration for loading from .env
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding='utf-8',
        extra="ignore",
    )

    # --- Stripe (Must be defined, as they have no default value)
    STRIPE_SECRET_KEY: str = Field(min_length=1)
    STRIPE_WEBHOOK_SECRET: str = Field(min_length=1)
    STRIPE_WEBHOOK_TOLERANCE: int = 300  # seconds

    # --- App Settings (Uses default values if not present in .env)
    APP_NAME: str = "Guard my email API"
    DEBUG: bool = False
    PORT: int = 3000
    CORS_ORIGINS: List[str] = ["*"]

    # --- Frontend URLs handed to Stripe-hosted pages
    FRONTEND_URL: str = "https://guardmyemail.com"
    CHECKOUT_SUCCESS_PATH: str = "/success?session_id={CHECKOUT_SESSION_ID}"
    CHECKOUT_CANCEL_PATH: str = "/upgrade"
    PORTAL_RETURN_PATH: str = "/account"

    @property
    def checkout_success_url(self) -> str:
        return self.FRONTEND_URL.rstrip("/") + self.CHECKOUT_SUCCESS_PATH

    @property
    def checkout_cancel_url(self) -> str:
        return self.FRONTEND_URL.rstrip("/") + self.CHECKOUT_CANCEL_PATH

    @property
    def portal_return_url(self) -> str:
        return self.FRONTEND_URL.rstrip("/") + self.PORTAL_RETURN_PATH


@lru_cache
def get_settings() -> Settings:
    """Build settings once per process. Raises ValidationError if Stripe secrets are missing."""
    return Settings()
