"""Configuration management for the Kurasi marketplace backend.

Loads settings from .env file with Pydantic validation. DATABASE_URL selects the
SQLAlchemy engine (SQLite for tests, Postgres for production); Supabase is used
for identity verification only. Storage and email credentials are optional.
"""
import os
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Validates and provides defaults for all configuration values.
    Business constants (point tables, review threshold) live in services/,
    not here.
    """
    model_config = SettingsConfigDict(env_file=os.getenv("ENV_FILE", ".env"), case_sensitive=True, extra="ignore")

    # Database: sqlite:///./test.db for tests, postgresql+psycopg://... in production
    DATABASE_URL: Optional[str] = None

    # Supabase auth (JWT verification in production)
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""  # service_role key for backend

    # CORS - strict allowlist for security
    FRONTEND_URL: str = "https://localhost:3000"
    PRODUCTION_URL: str = ""

    # Test mode settings (dev-token-<id> authentication)
    TEST_MODE: bool = False

    # Secret key for signing
    SECRET_KEY: str = "dev-secret-key-change-in-production"

    # Cloudinary file storage (optional)
    CLOUDINARY_CLOUD_NAME: Optional[str] = None
    CLOUDINARY_API_KEY: Optional[str] = None
    CLOUDINARY_API_SECRET: Optional[str] = None

    # Brevo transactional email (optional; logged when unset)
    BREVO_API_KEY: Optional[str] = None
    BREVO_FROM_EMAIL: str = "no-reply@kurasi.local"
    BREVO_FROM_NAME: str = "Kurasi Marketplace"


@lru_cache()
def get_settings(env_file: str = ".env") -> Settings:
    """Get cached settings instance.

    Uses LRU cache to avoid re-parsing .env on every import.
    Allows env_file override for testing with isolated configurations.
    """
    return Settings(_env_file=env_file)


def load_settings_from_env() -> Settings:
    """Build a fresh, uncached settings instance.

    Used by startup checks and auth so patched environments are observed.
    """
    return Settings(_env_file=os.getenv("ENV_FILE", ".env"))


# Default settings instance (respects ENV_FILE when set)
settings = get_settings(os.getenv("ENV_FILE", ".env"))
