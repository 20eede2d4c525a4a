"""
Configuration management for the credential service
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL
from typing import List, Optional


class Settings(BaseSettings):
    """Credential service configuration loaded from environment variables"""

    # Database Configuration
    DATABASE_URL: Optional[str] = None
    DB_HOST: Optional[str] = None
    DB_PORT: int = 5432
    DB_USER: Optional[str] = None
    DB_PASS: Optional[str] = None
    DB_NAME: Optional[str] = None
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_ECHO: bool = False

    # Credential Configuration
    SALT_SIZE: int = 32

    # Development switches
    RESET_DB_ON_STARTUP: bool = False
    DEV_MODE: bool = False

    # Logging Configuration
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None

    # CORS Configuration
    CORS_ORIGINS: List[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    @property
    def database_url(self) -> str:
        """
        Resolve the effective SQLAlchemy URL.

        An explicit DATABASE_URL wins. Otherwise a PostgreSQL URL is built
        from the DB_* pieces when DB_HOST is set, and a local SQLite file
        is used as the last resort.
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL
        if self.DB_HOST:
            url = URL.create(
                "postgresql+psycopg2",
                username=self.DB_USER,
                password=self.DB_PASS,
                host=self.DB_HOST,
                port=self.DB_PORT,
                database=self.DB_NAME,
            )
            return url.render_as_string(hide_password=False)
        return "sqlite:///./accounts.db"


# Global settings instance
settings = Settings()
