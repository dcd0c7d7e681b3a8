"""
Configuration management for the Leave Entitlement Engine
"""
import re
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Shared (cross-tenant) store: company registry only
    SHARED_DATABASE_URL: str = Field(
        default="sqlite:///./shared.db",
        description="Database URL of the shared registry store",
    )
    # Each tenant gets its own database; {company_id} is substituted at resolve time
    TENANT_DATABASE_URL_TEMPLATE: str = Field(
        default="sqlite:///./tenants/{company_id}.db",
        description="URL template for tenant stores, must contain {company_id}",
    )
    MAX_OPEN_TENANT_STORES: int = Field(
        default=32,
        description="Upper bound on tenant engines kept open by the locator",
    )

    EMPLOYEE_CODE_PATTERN: str = Field(
        default=r"^EMP-\d+$",
        description="Regex matching canonical employee codes",
    )

    APP_ENV: str = Field(default="local", description="Application environment: local, staging, prod")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level: DEBUG, INFO, WARNING, ERROR")

    VERSION: Optional[str] = Field(default=None, description="Application version (git SHA or semver)")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"

    @field_validator("APP_ENV")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """Validate APP_ENV"""
        allowed = ["local", "staging", "prod"]
        if v not in allowed:
            raise ValueError(f"APP_ENV must be one of {allowed}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate LOG_LEVEL"""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {allowed}")
        return v.upper()

    @field_validator("TENANT_DATABASE_URL_TEMPLATE")
    @classmethod
    def validate_tenant_template(cls, v: str) -> str:
        if "{company_id}" not in v:
            raise ValueError("TENANT_DATABASE_URL_TEMPLATE must contain '{company_id}'")
        return v

    @field_validator("MAX_OPEN_TENANT_STORES")
    @classmethod
    def validate_max_open(cls, v: int) -> int:
        if v < 1:
            raise ValueError("MAX_OPEN_TENANT_STORES must be at least 1")
        return v

    @field_validator("EMPLOYEE_CODE_PATTERN")
    @classmethod
    def validate_code_pattern(cls, v: str) -> str:
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"EMPLOYEE_CODE_PATTERN is not a valid regex: {e}")
        return v

    def validate_production(self) -> None:
        """
        Validate settings for production environment

        Raises:
            ValueError: If production settings are invalid
        """
        if self.APP_ENV == "prod":
            if self.SHARED_DATABASE_URL.startswith("sqlite"):
                raise ValueError("SHARED_DATABASE_URL must not be SQLite in production environment")
            if self.TENANT_DATABASE_URL_TEMPLATE.startswith("sqlite"):
                raise ValueError("TENANT_DATABASE_URL_TEMPLATE must not be SQLite in production environment")


# Create settings instance
settings = Settings()

# Validate production settings if in prod
if settings.APP_ENV == "prod":
    settings.validate_production()
