"""Application settings using Pydantic for environment-based configuration."""
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application Configuration
    app_name: str = Field(default="payments-service", description="Service name (OTel service.name)")
    app_env: str = Field(default="development", description="Environment (development/production)")
    app_version: str = Field(default="1.0.0", description="Service version")
    log_level: str = Field(default="INFO", description="Logging level")

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=3000, description="API port")

    # OpenTelemetry
    otel_enabled: bool = Field(default=True, description="Export traces and metrics via OTLP")
    otlp_endpoint: str = Field(
        default="http://otel-collector:4318", description="OTel Collector OTLP/HTTP base URL"
    )
    otel_export_interval_ms: int = Field(
        default=10000, gt=0, description="Metric push interval (milliseconds)"
    )

    # Simulated latency for the orders listing
    orders_latency_min_ms: int = Field(default=50, ge=0, description="Lower latency bound (ms)")
    orders_latency_max_ms: int = Field(default=300, ge=0, description="Upper latency bound (ms)")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v.upper()

    @field_validator("otlp_endpoint")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @model_validator(mode="after")
    def validate_latency_bounds(self) -> "Settings":
        if self.orders_latency_max_ms < self.orders_latency_min_ms:
            raise ValueError("orders_latency_max_ms must be >= orders_latency_min_ms")
        return self

    @property
    def traces_endpoint(self) -> str:
        return f"{self.otlp_endpoint}/v1/traces"

    @property
    def metrics_endpoint(self) -> str:
        return f"{self.otlp_endpoint}/v1/metrics"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env.lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
