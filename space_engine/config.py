"""
Configuration management for Space Engine.

Uses Pydantic Settings for type-safe environment variable loading.
Configured via .env file in project root.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be configured via .env file or environment variables.
    """

    # Python & Application
    python_env: Literal["development", "production"] = Field(
        default="development",
        description="Application environment"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level"
    )

    # Database
    database_url: str = Field(
        default="sqlite:///./data/space_engine.db",
        description="Database connection URL"
    )

    # API Configuration
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host"
    )
    api_port: int = Field(
        default=8000,
        description="API server port"
    )
    api_reload: bool = Field(
        default=True,
        description="Enable auto-reload in development"
    )

    # Geocoding (OpenStreetMap Nominatim)
    geocoder_enabled: bool = Field(
        default=True,
        description="Fall back to the external geocoder when the gazetteer misses"
    )
    geocoder_base_url: str = Field(
        default="https://nominatim.openstreetmap.org/search",
        description="Nominatim search endpoint"
    )
    geocoder_user_agent: str = Field(
        default="SpaceEngine/0.1",
        description="User-Agent sent to the geocoder (required by Nominatim usage policy)"
    )
    geocoder_country_codes: str = Field(
        default="gb",
        description="Comma-separated ISO country codes to restrict geocoding to"
    )
    geocoder_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Upper bound on a single location lookup, including retries"
    )

    # Search
    search_page_size: int = Field(
        default=20,
        ge=1,
        le=100,
        description="Results per search page"
    )
    search_overfetch_limit: int = Field(
        default=100,
        ge=1,
        description="Rows fetched before in-memory radius/amenity filtering"
    )
    default_search_radius_km: float = Field(
        default=25.0,
        gt=0,
        description="Radius used when a query does not specify one"
    )

    # Pricing
    daily_rate_threshold_hours: float = Field(
        default=8.0,
        gt=0,
        description="Bookings at or above this many hours are charged the daily rate"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.python_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.python_env == "production"

    @property
    def uses_postgresql(self) -> bool:
        """Check if PostgreSQL is the configured database."""
        return "postgresql" in self.database_url.lower()

    @property
    def geocoder_country_list(self) -> list[str]:
        """Country codes as a list, blanks removed."""
        return [c.strip() for c in self.geocoder_country_codes.split(",") if c.strip()]

    def validate_production_config(self) -> None:
        """
        Validate configuration for production environment.

        Raises:
            ValueError: If required production settings are missing or invalid
        """
        if not self.is_production:
            return

        errors = []

        # The overlap exclusion constraint only exists on PostgreSQL
        if not self.uses_postgresql:
            errors.append(
                "Production requires PostgreSQL. "
                "Set DATABASE_URL to a PostgreSQL connection string."
            )

        if self.geocoder_enabled and not self.geocoder_user_agent.strip():
            errors.append("GEOCODER_USER_AGENT is required when the geocoder is enabled.")

        if errors:
            raise ValueError("Production configuration errors:\n- " + "\n- ".join(errors))


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance loaded from environment

    Example:
        >>> from space_engine.config import get_settings
        >>> settings = get_settings()
        >>> print(settings.database_url)
    """
    return Settings()
