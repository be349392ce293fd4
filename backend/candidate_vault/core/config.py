"""Application configuration loaded from environment variables and secrets files."""

from pathlib import Path
from urllib.parse import quote_plus, urlsplit, urlunsplit

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed settings for the candidate persistence core."""

    PROJECT_NAME: str = "Candidate Vault"
    VERSION: str = "0.1.0"
    ENVIRONMENT: str = Field(default="local", alias="ENV")
    DEBUG: bool = False

    # Database
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "candidate-vault"
    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""
    DB_PASSWORD_FILE: str = ""
    DATABASE_URL_OVERRIDE: str = Field(default="", alias="DATABASE_URL")
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_RECYCLE: int = 3600
    DB_POOL_TIMEOUT: int = 30

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    @property
    def resolved_db_password(self) -> str:
        """Resolve database password from secrets file or environment.

        Returns:
            str: Password read from ``DB_PASSWORD_FILE`` when available,
            otherwise the ``DB_PASSWORD`` setting.
        """
        if self.DB_PASSWORD_FILE:
            try:
                password_file = Path(self.DB_PASSWORD_FILE)
                if password_file.is_file():
                    return password_file.read_text(encoding="utf-8").rstrip()
            except OSError:
                return self.DB_PASSWORD
        return self.DB_PASSWORD

    @property
    def DATABASE_URL(self) -> str:
        """Build the async SQLAlchemy database URL from DB_* fields.

        Returns:
            str: SQLAlchemy async PostgreSQL URL.

        Raises:
            ValueError: If the configured URL does not use PostgreSQL.
        """
        override = self.DATABASE_URL_OVERRIDE.strip()
        if override:
            return self._normalize_async_database_url(override)

        db_user = quote_plus(self.DB_USER)
        db_password = quote_plus(self.resolved_db_password)
        return (
            f"postgresql+asyncpg://{db_user}:{db_password}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    def _normalize_async_database_url(self, database_url: str) -> str:
        """Normalize PostgreSQL URL to SQLAlchemy asyncpg format.

        Args:
            database_url: Raw database connection URL.

        Returns:
            str: URL with ``postgresql+asyncpg`` scheme.

        Raises:
            ValueError: If the scheme is not PostgreSQL-compatible.
        """
        parsed_url = urlsplit(database_url)
        scheme = parsed_url.scheme.lower()

        if not (
            scheme in {"postgres", "postgresql"} or scheme.startswith("postgresql+")
        ):
            raise ValueError(
                "DATABASE_URL must use postgres/postgresql scheme for async SQLAlchemy"
            )

        return urlunsplit(
            (
                "postgresql+asyncpg",
                parsed_url.netloc,
                parsed_url.path,
                parsed_url.query,
                parsed_url.fragment,
            )
        )


settings = Settings()
