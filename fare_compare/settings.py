from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    currency: str = "EGP"
    rounding_unit: float = Field(default=5.0, gt=0.0)
    road_distance_factor: float = Field(
        default=1.20,
        ge=1.0,
        le=3.0,
        description="Multiplier turning great-circle distance into driving distance",
    )
    search_radius_km: float = Field(default=5.0, gt=0.0, le=50.0)

    # Collaborator timeouts; a timeout counts as "no data", never as a failure
    capture_timeout_seconds: float = Field(default=2.0, gt=0.0, le=30.0)
    driver_lookup_timeout_seconds: float = Field(default=3.0, gt=0.0, le=30.0)

    observed_price_max_age_seconds: int = Field(
        default=300,
        ge=1,
        description="Captured prices older than this are treated as absent",
    )
    default_sort_policy: Literal["lowest_price", "best_service", "fastest_arrival"] = (
        "lowest_price"
    )
    timezone: str = Field(
        default="Africa/Cairo",
        description="Zone whose wall clock drives surge and traffic windows",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["text", "json"] = "text"
    environment: str = "development"

    model_config = SettingsConfigDict(env_prefix="COMPARE_")

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v


class PricingSourceSettings(BaseSettings):
    config_url: str = Field(
        default="",
        description="JSON endpoint with per-provider fare records; empty uses built-in defaults",
    )
    timeout_seconds: float = Field(default=2.0, gt=0.0, le=30.0)

    model_config = SettingsConfigDict(env_prefix="PRICING_")

    @field_validator("config_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if v and not v.startswith(("http://", "https://")):
            raise ValueError("Pricing config URL must start with http:// or https://")
        return v.rstrip("/")


class DriverLookupSettings(BaseSettings):
    base_url: str = ""
    api_key: str = ""
    timeout_seconds: float = Field(default=2.5, gt=0.0, le=30.0)
    max_retries: int = Field(default=2, ge=1, le=5)

    model_config = SettingsConfigDict(env_prefix="DRIVERS_")

    @field_validator("base_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if v and not v.startswith(("http://", "https://")):
            raise ValueError("Driver lookup base URL must start with http:// or https://")
        return v.rstrip("/")

    @model_validator(mode="after")
    def validate_credentials_provided(self) -> "DriverLookupSettings":
        if self.base_url and not self.api_key:
            raise ValueError("Required credential not provided: DRIVERS_API_KEY")
        return self


class CaptureSettings(BaseSettings):
    bridge_url: str = Field(
        default="",
        description="Device bridge exposing captured prices; empty disables live prices",
    )
    timeout_seconds: float = Field(default=1.5, gt=0.0, le=30.0)

    model_config = SettingsConfigDict(env_prefix="CAPTURE_")

    @field_validator("bridge_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if v and not v.startswith(("http://", "https://")):
            raise ValueError("Capture bridge URL must start with http:// or https://")
        return v.rstrip("/")


class APISettings(BaseSettings):
    key: str = ""
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = SettingsConfigDict(env_prefix="API_")


class CORSSettings(BaseSettings):
    origins: str = "http://localhost:5173,http://localhost:3000"

    model_config = SettingsConfigDict(env_prefix="CORS_")


class Settings(BaseSettings):
    engine: EngineSettings = Field(default_factory=EngineSettings)
    pricing: PricingSourceSettings = Field(default_factory=PricingSourceSettings)
    drivers: DriverLookupSettings = Field(default_factory=DriverLookupSettings)
    capture: CaptureSettings = Field(default_factory=CaptureSettings)
    api: APISettings = Field(default_factory=APISettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )


def get_settings() -> Settings:
    """Load and validate settings from environment variables."""
    return Settings()
