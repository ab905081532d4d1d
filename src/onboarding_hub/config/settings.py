"""
Configuration management for OnboardingHub.

This module provides environment-based configuration using Pydantic BaseSettings,
allowing for flexible deployment across development, testing, and production
environments while maintaining secure credential management.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

import structlog
from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger(__name__)

# Determine project root for resolving .env by default
PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_ENV_FILE = PROJECT_ROOT / ".env"
ENV_FILE_OVERRIDE = os.getenv("OBH_ENV_FILE")
if ENV_FILE_OVERRIDE:
    env_file_candidate = Path(ENV_FILE_OVERRIDE).expanduser()
    if not env_file_candidate.is_absolute():
        env_file_candidate = PROJECT_ROOT / env_file_candidate
    SETTINGS_ENV_FILE = env_file_candidate
else:
    SETTINGS_ENV_FILE = DEFAULT_ENV_FILE


class DatabaseSettings:
    """
    Database settings compatibility layer for unified DSN retrieval.

    Supports both component-based and URI-based connection string generation.
    """

    def __init__(
        self,
        host: str,
        port: int = 5432,
        user: str = "",
        password: str = "",
        db: str = "",
        uri: Optional[str] = None,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.db = db
        self.uri = uri

    def get_connection_string(self) -> str:
        """
        Get PostgreSQL connection string.

        Returns:
            Database connection string (DSN)
        """
        if self.uri:
            return self.uri
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.db}"


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Environment variables are automatically loaded with the OBH_ prefix.
    For example, OBH_EXCEL_PATH will override the excel_path setting.

    Fields without prefix (uppercase names):
    - ENVIRONMENT: Deployment environment (dev, staging, prod)
    - LOG_LEVEL: Logging level (uppercase)
    - DB_BATCH_SIZE: Batch size for database inserts
    """

    ENVIRONMENT: Literal["dev", "staging", "prod"] = Field(
        default="dev",
        validation_alias="ENVIRONMENT",
        description="Deployment environment",
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level (uppercase)",
    )
    DB_BATCH_SIZE: int = Field(
        default=500,
        validation_alias="DB_BATCH_SIZE",
        description="Batch size for database insert statements",
    )

    app_name: str = Field(default="OnboardingHub", description="Application name")

    # Input configuration
    excel_path: str = Field(
        default="./data/onboarding.xlsx",
        description="Default onboarding workbook path",
    )
    sheet_mappings_config: str = Field(
        default="./config/sheet_mappings.yml",
        description="YAML file with sheet aliases and column mappings",
    )

    # Identifier and default policy
    reference_code_prefix: str = Field(
        default="PT", description="Prefix for registration reference codes"
    )
    change_request_code_prefix: str = Field(
        default="USERCR", description="Prefix for user change request codes"
    )
    code_generation_max_attempts: int = Field(
        default=5,
        ge=1,
        description="Attempts before giving up on a non-conflicting code",
    )
    code_seed: Optional[int] = Field(
        default=None,
        description="Seed for reproducible code generation (None = cryptographic source)",
    )
    default_role_id: int = Field(
        default=3, description="Role id for user rows with an unrecognized role label"
    )

    # Database configuration
    database_host: str = Field(default="localhost", description="Database host")
    database_port: int = Field(default=5432, description="Database port")
    database_user: str = Field(default="user", description="Database user")
    database_password: str = Field(default="password", description="Database password")
    database_db: str = Field(default="database", description="Database name")
    database_schema: Optional[str] = Field(
        default=None, description="Database schema holding the onboarding tables"
    )
    database_uri: Optional[str] = Field(
        default=None,
        description="Complete database URI",
        validation_alias=AliasChoices("DATABASE__URI", "DATABASE_URI"),
    )

    def get_database_connection_string(self) -> str:
        """Get the database connection string.

        Priority order:
        1) OBH_DATABASE__URI / OBH_DATABASE_URI environment variables
        2) database_uri field (from .env)
        3) Construct from individual OBH_DATABASE_* components

        Automatically corrects 'postgres://' scheme to 'postgresql://' for
        SQLAlchemy compatibility.
        """
        env_uri = os.getenv("OBH_DATABASE__URI") or os.getenv("OBH_DATABASE_URI")

        if env_uri:
            final_uri = env_uri
        elif self.database_uri:
            final_uri = self.database_uri
        else:
            final_uri = self.database.get_connection_string()

        if final_uri.startswith("postgres://"):
            final_uri = final_uri.replace("postgres://", "postgresql://", 1)

        return final_uri

    @property
    def database(self) -> DatabaseSettings:
        """Database settings assembled from individual configuration fields."""
        return DatabaseSettings(
            host=self.database_host,
            port=self.database_port,
            user=self.database_user,
            password=self.database_password,
            db=self.database_db,
            uri=self.database_uri,
        )

    @model_validator(mode="after")
    def validate_production_database_url(self) -> "Settings":
        """Validate that production environment uses PostgreSQL.

        Raises:
            ValueError: If ENVIRONMENT is 'prod' and database URL is not PostgreSQL
        """
        db_url = self.get_database_connection_string()

        if self.ENVIRONMENT == "prod" and not db_url.startswith("postgresql://"):
            logger.error(
                "configuration.invalid_production_database",
                database_url_preview=db_url[:20],
            )
            raise ValueError(
                "Production environment requires PostgreSQL database. "
                f"Database URL must start with 'postgresql://', "
                f"got: {db_url[:20]}..."
            )

        return self

    @model_validator(mode="after")
    def validate_code_prefixes(self) -> "Settings":
        """Reference and change request codes must be distinguishable."""
        if self.reference_code_prefix == self.change_request_code_prefix:
            raise ValueError(
                "reference_code_prefix and change_request_code_prefix must differ, "
                f"both are '{self.reference_code_prefix}'"
            )
        return self

    model_config = SettingsConfigDict(
        env_prefix="OBH_",
        env_file=str(SETTINGS_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance with loaded configuration
    """
    return Settings()
