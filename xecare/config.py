"""Client configuration settings."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Client configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="XECARE_",
        env_file=ENV_FILE,
        env_file_encoding=ENV_FILE_ENCODING,
        extra="ignore",
    )

    api_base_url: str = Field(
        default="http://localhost:8080",
        description="Base URL of the XeCare backend",
        min_length=1,
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout applied to every backend request",
        gt=0,
    )
    notification_poll_interval_seconds: float = Field(
        default=10.0,
        description="Period between two unread count refreshes",
        gt=0,
    )
    bell_ring_duration_seconds: float = Field(
        default=2.0,
        description="How long the notification bell keeps ringing after an increase",
        gt=0,
    )
    notifications_path: str = Field(
        default="/notifications",
        description="Route opened when the notification bell is clicked",
    )
    geocoding_base_url: str = Field(
        default="https://nominatim.openstreetmap.org",
        description="Base URL of the Nominatim geocoding service",
    )
    geocoding_user_agent: str = Field(
        default="XeCare-Garage-App",
        description="User-Agent header sent to the geocoding service",
    )
    geocoding_country_codes: str = Field(default="vn")
    geocoding_language: str = Field(default="vi")
    geocoding_debounce_seconds: float = Field(
        default=1.0,
        description="Pause in typing required before an address is geocoded",
        ge=0,
    )
    geocoding_min_address_length: int = Field(default=10, ge=0)
    location_timeout_seconds: float = Field(default=15.0, gt=0)
    fresh_location_timeout_seconds: float = Field(default=20.0, gt=0)
    location_maximum_age_seconds: float = Field(
        default=300.0,
        description="Maximum age of a cached position accepted by a normal request",
        ge=0,
    )
    app_timezone: str = Field(
        default="Asia/Ho_Chi_Minh",
        description="Timezone used to interpret naive backend timestamps",
    )
    nearby_max_distance_km: float = Field(default=50.0, gt=0)
    nearby_search_radius_km: float = Field(default=10.0, gt=0)
    storage_dir: Path = Field(
        default=Path.home() / ".xecare",
        description="Directory holding the persisted token and user",
    )
    log_level: str = Field(default="INFO")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    @model_validator(mode="after")
    def _validate_location_timeouts(self) -> "Settings":
        if self.fresh_location_timeout_seconds < self.location_timeout_seconds:
            raise ValueError(
                "XECARE_FRESH_LOCATION_TIMEOUT_SECONDS must not be shorter than "
                "XECARE_LOCATION_TIMEOUT_SECONDS"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached client settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
