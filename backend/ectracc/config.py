"""
Configuration settings for the ECTRACC API.

Loads environment variables from .env file and provides typed configuration.
"""

from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    API_PREFIX: str = "/api"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = Field(default="development", description="Deployment environment")
    CORS_ORIGINS: List[str] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:3050",
            "http://localhost:3051",
            "http://localhost:3052",
        ],
        description="Allowed CORS origins",
    )

    # Identity provider (Supabase) configuration
    SUPABASE_JWT_SECRET: str = Field(
        default="super-secret-jwt-token-with-at-least-32-characters-long",
        description="Secret used by the identity provider to sign access tokens",
    )
    JWT_AUDIENCE: str = Field(
        default="authenticated", description="Expected audience claim of access tokens"
    )

    # Catalog (MongoDB) Configuration
    MONGODB_URI: str = Field(
        default="mongodb://localhost:27017", description="MongoDB connection string"
    )
    MONGODB_DATABASE: str = Field(default="ectracc", description="MongoDB database name")
    PRODUCTS_COLLECTION: str = Field(default="products", description="Product collection")
    MONGODB_TIMEOUT_MS: int = Field(
        default=5000, description="Server selection timeout in milliseconds"
    )

    # Footprint (relational) Database Configuration
    DATABASE_URL: str = Field(
        default="sqlite:///./data/footprints.db", description="Footprint database URL"
    )
    DATABASE_ECHO: bool = Field(
        default=False, description="Echo SQL queries (for debugging)"
    )

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = Field(default=True, description="Enable request rate limits")
    SEARCH_RATE_LIMIT: str = "30/minute"
    BARCODE_RATE_LIMIT: str = "60/minute"
    TRACK_RATE_LIMIT: str = "30/minute"

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()
