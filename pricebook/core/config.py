"""
Application configuration.

Settings are loaded from environment variables (and an optional .env file)
with pydantic-settings. Pricing defaults live here so every call site that
needs a fallback margin or exchange rate resolves the same value.
"""

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # Application
    app_name: str = Field("Pricebook API", alias="APP_NAME")
    app_version: str = Field("1.0.0", alias="APP_VERSION")
    ENVIRONMENT: str = Field("development", alias="ENVIRONMENT")
    debug: bool = Field(False, alias="DEBUG")
    LOG_LEVEL: str = Field("INFO", alias="LOG_LEVEL")

    # Server
    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(8000, alias="PORT")
    reload: bool = Field(False, alias="RELOAD")

    # CORS (comma-separated list)
    CORS_ORIGINS: str = Field("*", alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(True, alias="CORS_ALLOW_CREDENTIALS")

    # Database
    DATABASE_URL: str = Field("sqlite:///./pricebook.db", alias="DATABASE_URL")
    DB_ECHO: bool = Field(False, alias="DB_ECHO")

    # JWT
    JWT_SECRET: str = Field("change-me-in-production", alias="JWT_SECRET")
    JWT_ALGORITHM: str = Field("HS256", alias="JWT_ALGORITHM")
    JWT_EXPIRATION_HOURS: int = Field(24, alias="JWT_EXPIRATION_HOURS")

    # Pricing
    DEFAULT_CURRENCY: str = Field("FCFA", alias="DEFAULT_CURRENCY")
    DEFAULT_MARGIN: float = Field(30.0, alias="DEFAULT_MARGIN", ge=0, le=99)
    DEFAULT_EXCHANGE_RATE: float = Field(100.0, alias="DEFAULT_EXCHANGE_RATE", gt=0)
    LOW_MARGIN_WARNING_THRESHOLD: float = Field(15.0, alias="LOW_MARGIN_WARNING_THRESHOLD")
    LOW_MARGIN_CONFIRM_THRESHOLD: float = Field(10.0, alias="LOW_MARGIN_CONFIRM_THRESHOLD")
    OVERRIDE_WRITE_RETRIES: int = Field(3, alias="OVERRIDE_WRITE_RETRIES", ge=1)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def log_format(self) -> str:
        return "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


settings = get_settings()
