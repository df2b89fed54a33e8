"""Application configuration."""
from collections import Counter
from functools import lru_cache
import math
from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings


def _estimated_entropy_bits(value: str) -> float:
    counts = Counter(value)
    entropy_per_char = -sum((count / len(value)) * math.log2(count / len(value)) for count in counts.values())
    return entropy_per_char * len(value)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    app_name: str = "Vidhub"
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Database
    database_url: str = "sqlite:///./data/vidhub.db"

    # Auth
    access_token_secret: str
    refresh_token_secret: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 15
    refresh_token_expire_days: int = 10
    cookie_secure: bool = True
    cookie_samesite: str = "lax"

    # Media
    base_dir: Path = Path(__file__).parent
    media_dir: Path = base_dir.parent / "data" / "media"
    media_url_prefix: str = "/media"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @field_validator("access_token_secret", "refresh_token_secret")
    @classmethod
    def validate_token_secret(cls, value: str, info) -> str:
        """Fail closed if a signing secret is weak or placeholder quality."""
        name = info.field_name.upper()
        if not value:
            raise ValueError(f"{name} must be set.")

        if len(value) < 32:
            raise ValueError(f"{name} must be at least 32 characters.")

        weak_values = {"changeme", "changeme-in-production", "secret", "password", "test"}
        lowered = value.lower()
        if lowered in weak_values or "changeme" in lowered:
            raise ValueError(f"{name} must not be a placeholder value.")

        if _estimated_entropy_bits(value) < 100:
            raise ValueError(f"{name} entropy is too low; use a cryptographically random value.")

        return value

    @model_validator(mode="after")
    def validate_distinct_secrets(self) -> "Settings":
        """Access and refresh tokens must not be interchangeable."""
        if self.access_token_secret == self.refresh_token_secret:
            raise ValueError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must differ.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
