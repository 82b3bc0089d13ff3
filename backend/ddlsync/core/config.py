"""Application configuration"""

from pathlib import Path
from typing import List, Literal

from pydantic_settings import BaseSettings

from ddlsync.core.errors import ConfigurationError


class Settings(BaseSettings):
    """Application settings"""

    # Source/target catalog dialect
    DB_DIALECT: Literal["oracle", "postgres"] = "oracle"

    # Oracle connection (reference deployment)
    ORACLE_USER: str = ""
    ORACLE_PASSWORD: str = ""
    ORACLE_CONNECT_STRING: str = ""
    ORACLE_POOL_MIN: int = 2
    ORACLE_POOL_MAX: int = 10
    ORACLE_POOL_INCREMENT: int = 1

    # PostgreSQL connection
    POSTGRES_URL: str = ""
    POSTGRES_SCHEMA: str = "public"
    POSTGRES_POOL_MIN_SIZE: int = 1
    POSTGRES_POOL_MAX_SIZE: int = 10

    # Pool establishment retry (fixed backoff)
    POOL_RETRY_ATTEMPTS: int = 3
    POOL_RETRY_DELAY_SECONDS: float = 2.0

    # Analysis
    TABLE_PREFIX: str = "HRMS_"
    # "catalog" reads real index columns, "name" derives them from the index name
    INDEX_COLUMN_SOURCE: Literal["catalog", "name"] = "catalog"

    # Artifacts
    OUTPUT_DIR: str = "."
    ANALYSIS_FILENAME: str = "exact-source-analysis.json"
    MIGRATION_SCRIPT_FILENAME: str = "exact_migration.py"

    # Logging
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    # Sentry Error Tracking (optional - leave empty to disable)
    SENTRY_DSN: str = ""  # Override in .env

    @property
    def analysis_path(self) -> Path:
        return Path(self.OUTPUT_DIR) / self.ANALYSIS_FILENAME

    @property
    def migration_script_path(self) -> Path:
        return Path(self.OUTPUT_DIR) / self.MIGRATION_SCRIPT_FILENAME

    def required_connection_vars(self) -> List[str]:
        """Names of the connection settings the selected dialect needs"""
        if self.DB_DIALECT == "oracle":
            return ["ORACLE_USER", "ORACLE_PASSWORD", "ORACLE_CONNECT_STRING"]
        return ["POSTGRES_URL"]

    def validate_connection(self) -> None:
        """Connection parameters are opaque; they only have to be non-empty.

        Raises:
            ConfigurationError: If any required connection setting is empty
        """
        missing = [
            var for var in self.required_connection_vars() if not getattr(self, var)
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required database configuration: {', '.join(missing)}. "
                f"Please set them in your .env file or environment.",
                missing=missing,
            )

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "extra": "ignore",  # Ignore extra environment variables not defined in Settings
    }


def get_settings() -> Settings:
    """Build settings from the current process environment."""
    return Settings()

