"""
Application Configuration

Uses Pydantic Settings for environment variable management.
Supports both development (SQLite) and production (PostgreSQL).
"""
from typing import Literal, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # ===========================================
    # APPLICATION
    # ===========================================
    APP_NAME: str = "CRM Access"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = Field(default=False, alias="DEBUG")
    LOG_LEVEL: str = Field(default="INFO", alias="LOG_LEVEL")

    # ===========================================
    # DATABASE
    # ===========================================
    # Use SQLite for development, PostgreSQL for production
    DATABASE_URL: str = Field(
        default="sqlite:///./data/crm.db",
        alias="DATABASE_URL"
    )

    # PostgreSQL settings (when DATABASE_URL starts with postgresql://)
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10

    # ===========================================
    # JWT AUTHENTICATION
    # ===========================================
    JWT_SECRET_KEY: str = Field(default="jwt-secret-change-me", alias="JWT_SECRET_KEY")
    JWT_ALGORITHM: str = "HS256"

    # ===========================================
    # PERMISSIONS
    # ===========================================
    # Resolved permission sets are reused for this long (5 minutes)
    PERMISSION_CACHE_TTL_SECONDS: float = Field(default=300, alias="PERMISSION_CACHE_TTL_SECONDS")
    # Statement timeout for custom role lookups (None = no timeout)
    PERMISSION_STORE_TIMEOUT_SECONDS: Optional[float] = Field(
        default=None,
        alias="PERMISSION_STORE_TIMEOUT_SECONDS"
    )
    # What an active custom role without any permissions resolves to:
    # "fallback" uses the fixed role table, "deny" grants nothing
    EMPTY_CUSTOM_ROLE_POLICY: Literal["fallback", "deny"] = Field(
        default="fallback",
        alias="EMPTY_CUSTOM_ROLE_POLICY"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @property
    def is_sqlite(self) -> bool:
        """Check if using SQLite database"""
        return self.DATABASE_URL.startswith("sqlite")

    @property
    def is_postgres(self) -> bool:
        """Check if using PostgreSQL database"""
        return self.DATABASE_URL.startswith("postgresql")


# Global settings instance
settings = Settings()
