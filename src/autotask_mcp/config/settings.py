"""Autotask MCP Configuration Settings."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ZONE_LOOKUP_URL = (
    "https://webservices.autotask.net/atservicesrest/v1.0/zoneInformation"
)


class Settings(BaseSettings):
    """Autotask MCP settings with validation and type safety."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # ============================================================================
    # AUTOTASK CREDENTIALS & ENDPOINT
    # ============================================================================

    autotask_username: str | None = Field(
        default=None, description="API user name (usually an email address)"
    )
    autotask_secret: str | None = Field(
        default=None, description="API user secret"
    )
    autotask_integration_code: str | None = Field(
        default=None, description="Tracking identifier of the API integration"
    )
    autotask_api_url: str | None = Field(
        default=None,
        description="REST base URL, e.g. https://webservices5.autotask.net/atservicesrest/v1.0 "
        "(discovered through the zone information endpoint when unset)",
    )
    autotask_zone_lookup_url: str = Field(
        default=DEFAULT_ZONE_LOOKUP_URL,
        description="Zone information endpoint used to discover the REST base URL",
    )

    # ============================================================================
    # REQUEST PROCESSING & LIMITS
    # ============================================================================

    request_timeout: int = Field(
        default=30, ge=1, le=300, description="Request timeout in seconds"
    )
    max_retries: int = Field(
        default=3, ge=0, le=10, description="Retries for HTTP 429 and transient errors"
    )
    retry_delay: float = Field(
        default=1.0, ge=0, description="Initial backoff delay in seconds"
    )
    rate_limit_min_interval: float = Field(
        default=0.1, ge=0, description="Minimum spacing between request starts"
    )
    rate_limit_max_per_minute: int = Field(
        default=150,
        ge=0,
        description="Maximum request starts per rolling minute (0 disables the budget)",
    )

    # ============================================================================
    # NAME MAPPING CACHE
    # ============================================================================

    mapping_cache_ttl_seconds: int = Field(
        default=1800, description="Identifier cache TTL in seconds (30 minutes)"
    )
    company_cache_page_size: int = Field(
        default=2000, ge=1, description="Companies loaded per company cache refresh"
    )
    resource_cache_page_size: int = Field(
        default=2000, ge=1, description="Resources loaded per resource cache refresh"
    )
    enhance_results: bool = Field(
        default=True, description="Add company/resource names to tool results"
    )

    # ============================================================================
    # LOGGING CONFIGURATION
    # ============================================================================

    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )

    @field_validator("mapping_cache_ttl_seconds")
    @classmethod
    def validate_cache_ttl(cls, v: int) -> int:
        """Validate cache TTL."""
        if v < 0:
            raise ValueError("Cache TTL must be non-negative")
        return v

    @field_validator("autotask_api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip().rstrip("/")
        return v or None

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    def missing_credentials(self) -> list[str]:
        """Return the names of credential fields that are not set."""
        required = {
            "AUTOTASK_USERNAME": self.autotask_username,
            "AUTOTASK_SECRET": self.autotask_secret,
            "AUTOTASK_INTEGRATION_CODE": self.autotask_integration_code,
        }
        return [name for name, value in required.items() if not value]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Note:
        For testing, call ``get_settings.cache_clear()`` to re-read the
        environment.
    """
    return Settings()
