# backend/tintura/core/settings.py
"""
Tintura SST - Configuration Management with pydantic-settings

- Loads from environment and root .env
- Validates and normalizes values
- Cached singleton via get_settings()
"""
from functools import lru_cache
from pathlib import Path
from typing import Optional, List
from decimal import Decimal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Calculate path to .env in project root (4 levels up from this file)
# backend/tintura/core/settings.py -> <repo>/.env
_ENV_FILE = Path(__file__).resolve().parent.parent.parent.parent / ".env"

STORAGE_BACKENDS = ("database", "memory")


class Settings(BaseSettings):
    """
    Application settings with validation.

    Environment variables take precedence over .env file values.
    """

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ===================
    # Application Settings
    # ===================
    PROJECT_NAME: str = "Tintura SST"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    DEBUG: bool = Field(default=False, description="Enable debug mode")
    ENVIRONMENT: str = Field(default="development", description="Deployment environment")

    # ===================
    # Database Settings
    # ===================
    DB_HOST: str = Field(default="localhost", description="PostgreSQL host")
    DB_PORT: int = Field(default=5432, description="PostgreSQL port")
    DB_NAME: str = Field(default="tintura", description="Database name")
    DB_USER: str = Field(default="postgres", description="Database user")
    DB_PASSWORD: str = Field(default="postgres", description="Database password")
    DATABASE_URL: Optional[str] = Field(
        default=None, description="Full database URL (overrides DB_* settings)"
    )

    @property
    def database_url(self) -> str:
        """Build PostgreSQL database URL from components or use explicit URL."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    # ===================
    # Storage Backend
    # ===================
    STORAGE_BACKEND: str = Field(
        default="database", description="database or memory (SQLite in-memory demo store)"
    )
    DEGRADED_FALLBACK: bool = Field(
        default=False,
        description="Switch to the in-memory store when the database is unreachable at startup",
    )
    SEED_DEMO_DATA: bool = Field(
        default=True, description="Seed fixture data into the in-memory store"
    )

    @field_validator("STORAGE_BACKEND")
    @classmethod
    def check_storage_backend(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in STORAGE_BACKENDS:
            raise ValueError(f"STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}")
        return v

    # ===================
    # CORS Settings
    # ===================
    ALLOWED_ORIGINS: List[str] = Field(
        default=[
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ],
        description="Allowed CORS origins",
    )

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # ===================
    # Logging
    # ===================
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # json or text
    LOG_FILE: Optional[str] = None

    # ===================
    # Orders & Barcodes
    # ===================
    ORDER_NO_PREFIX: str = "ORD-"
    ORDER_NO_START: int = 10001
    BARCODE_SERIAL_WIDTH: int = Field(default=5, ge=1, le=12)
    MAX_BARCODE_BATCH: int = Field(default=1000, ge=1)
    SERIAL_CAS_RETRIES: int = Field(default=3, ge=1)

    # ===================
    # Sales
    # ===================
    UNIT_PRICE: float = 25.00
    INVOICE_NO_PREFIX: str = "INV-"

    @property
    def unit_price(self) -> Decimal:
        return Decimal(str(self.UNIT_PRICE)).quantize(Decimal("0.01"))

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Singleton settings loader (cached)."""
    return Settings()


# Convenience alias used across the application
settings = get_settings()
