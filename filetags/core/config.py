"""Application configuration."""
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)

    PROJECT_NAME: str = "File Tags API"

    # Database
    DATABASE_PATH: str = "data/tags.db"
    DATABASE_URL: Optional[str] = None
    SQL_ECHO: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"

    # Content hashing
    HASH_CHUNK_SIZE: int = 1024 * 1024

    # Calling-layer conventions
    TAG_DELETE_SENTINEL: str = "-"
    RATING_TAG_TYPE: str = "rating"

    # CORS
    ALLOWED_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost"]

    @property
    def SQLALCHEMY_DATABASE_URL(self) -> str:
        """SQLite database URL for SQLAlchemy."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"sqlite:///{self.DATABASE_PATH}"


settings = Settings()
