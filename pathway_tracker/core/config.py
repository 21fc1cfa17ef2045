"""
Application settings, read from the environment or a ``.env`` file
"""

import json
from typing import Annotated, List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Application
    ENVIRONMENT: Literal["development", "staging", "production", "test"] = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./pathway_tracker.db",
        description="postgresql:// (asyncpg) or sqlite+aiosqlite:// URL"
    )
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = Field(default=30, description="Seconds to wait for a pooled connection")
    DB_POOL_RECYCLE: int = Field(default=3600, description="Seconds before a connection is replaced")

    # Tokens; access and refresh tokens use separate secrets
    JWT_SECRET_KEY: str = Field(
        default="change-me-pathway-tracker-access-secret-min-32-chars", min_length=32
    )
    JWT_REFRESH_SECRET_KEY: str = Field(
        default="change-me-pathway-tracker-refresh-secret-min-32-chars", min_length=32
    )
    JWT_ALGORITHM: Literal["HS256", "HS384", "HS512"] = "HS256"
    JWT_ISSUER: str = "pathway-tracker"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    JWT_REFRESH_TOKEN_EXPIRE_DAYS: int = 30

    # First SUPER_ADMIN, created at startup when missing
    BOOTSTRAP_ADMIN_EMAIL: str = "admin@pathwaytracker.local"
    BOOTSTRAP_ADMIN_PASSWORD: str = "ChangeMe123!"
    BOOTSTRAP_ADMIN_FIRST_NAME: str = "Pathway"
    BOOTSTRAP_ADMIN_LAST_NAME: str = "Administrator"

    # SMTP; an empty host means simulation mode
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM: str = "noreply@yourchurch.org"
    SMTP_USE_TLS: bool = True
    SMTP_USE_SSL: bool = False
    SMTP_TIMEOUT_SECONDS: int = 15
    SMTP_MAX_RETRIES: int = 2

    # Twilio; missing credentials mean simulation mode
    TWILIO_ACCOUNT_SID: str = ""
    TWILIO_AUTH_TOKEN: str = ""
    TWILIO_PHONE_NUMBER: str = ""
    TWILIO_API_BASE_URL: str = "https://api.twilio.com/2010-04-01"

    # Gemini; AI endpoints answer 503 without a key
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_API_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_TIMEOUT_SECONDS: float = 30.0

    # HTTP
    BCRYPT_ROUNDS: int = Field(default=12, ge=4, le=31)
    ALLOWED_HOSTS: Annotated[List[str], NoDecode] = ["*"]
    CORS_ORIGINS: Annotated[List[str], NoDecode] = ["http://localhost:3000"]
    RATE_LIMIT_PER_MINUTE: int = Field(default=100, ge=1)

    @field_validator("CORS_ORIGINS", "ALLOWED_HOSTS", mode="before")
    @classmethod
    def split_csv(cls, v):
        """Accept ``a,b,c`` as well as a JSON list"""
        if not isinstance(v, str):
            return v
        if v.lstrip().startswith("["):
            return json.loads(v)
        return [item.strip() for item in v.split(",") if item.strip()]

    @field_validator("LOG_LEVEL")
    @classmethod
    def known_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def database_pool_options(self) -> dict:
        return {
            "pool_size": self.DB_POOL_SIZE,
            "max_overflow": self.DB_MAX_OVERFLOW,
            "pool_timeout": self.DB_POOL_TIMEOUT,
            "pool_recycle": self.DB_POOL_RECYCLE,
            "pool_pre_ping": True,
        }


settings = Settings()
