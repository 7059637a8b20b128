"""
config/settings.py
Application settings loaded from environment variables.
Uses Pydantic BaseSettings for validation and type safety.
"""

from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Application ──────────────────────────────────────────
    APP_NAME: str = "Dream Education Studio"
    APP_ENV: str = "development"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # ── Server ───────────────────────────────────────────────
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    WORKERS: int = 1            # one process owns the ledger

    # ── Persistent Store ─────────────────────────────────────
    STORE_BACKEND: str = "redis"        # redis | memory
    STORE_KEY_PREFIX: str = "dream_"
    REDIS_URL: str = "redis://localhost:6379/0"

    # ── JWT ──────────────────────────────────────────────────
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 120
    JWT_REMEMBER_EXPIRE_DAYS: int = 30
    BCRYPT_ROUNDS: int = 12

    # ── Admin credential ─────────────────────────────────────
    ADMIN_EMAIL: str = "admin@dreamedu.com"
    ADMIN_PASSWORD: str

    # ── CORS ─────────────────────────────────────────────────
    ALLOWED_ORIGINS: str = "http://localhost:3000"

    # ── Messaging (booking request link) ─────────────────────
    MESSAGING_BASE_URL: str = "https://wa.me"
    MESSAGING_COUNTRY_CODE: str = "94"

    # ── Business Config ──────────────────────────────────────
    STUDIO_OPEN_HOUR: int = 8
    STUDIO_CLOSE_HOUR: int = 24
    MAX_BOOKING_HOURS: int = 5
    STUDIO_UTC_OFFSET_MINUTES: int = 330    # studio wall clock, Asia/Colombo
    SEED_DEMO_TEACHER: bool = True

    @property
    def allowed_origins_list(self) -> List[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",")]


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()


settings = get_settings()
