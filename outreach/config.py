from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Values in .env are only a fallback; the environment wins.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_ignore_empty=True,
    )

    # Document store connection string (SQLAlchemy URL)
    DATABASE_URL: str

    LOG_LEVEL: str

    # Bearer token accepted by the auth gate
    AUTH_TOKEN: str


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache so the environment is only read once per process.
    """
    return Settings()


settings = get_settings()
