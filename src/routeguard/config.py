"""Application configuration using Pydantic settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="routeguard", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")
    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Environment"
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Root log level when debug mode is off"
    )
    log_auth_denials: bool = Field(
        default=True, description="Log denied API token requests at INFO"
    )

    # Server
    host: str = Field(default="0.0.0.0", description="Host to bind to")
    port: int = Field(default=8000, description="Port to bind to")
    reload: bool = Field(default=False, description="Auto-reload on code changes")

    # Database
    database_url: str = Field(
        default="sqlite:///./routeguard.db",
        description="Database connection URL (PostgreSQL or SQLite)",
    )
    db_pool_size: int = Field(default=10, description="Database connection pool size")
    db_max_overflow: int = Field(default=20, description="Database max overflow connections")
    db_echo: bool = Field(default=False, description="Echo SQL statements")
    db_create_tables: bool = Field(
        default=False, description="Create missing tables on startup instead of running migrations"
    )

    # Routing
    api_prefix: str = Field(default="/api/v1", description="Prefix of all versioned API routes")
    strict_route_prefix: bool = Field(
        default=True,
        description="Fail at startup when a session-gated route lives outside the API prefix",
    )

    # Tokens
    api_token_prefix: str = Field(default="tk_", description="Prefix of plaintext API tokens")
    session_token_expire_days: int = Field(
        default=14, description="Session token expiration in days"
    )

    # CORS
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        description="Allowed CORS origins",
    )

    # OpenTelemetry
    otel_enabled: bool = Field(default=True, description="Enable OpenTelemetry")
    otel_service_name: str = Field(default="routeguard", description="Service name for traces")
    otel_exporter_otlp_endpoint: str = Field(
        default="http://localhost:4318", description="OTLP exporter endpoint"
    )
    otel_exporter_otlp_headers: str = Field(
        default="", description="OTLP headers (comma-separated key=value pairs)"
    )
    otel_resource_attributes: str = Field(
        default="", description="Resource attributes (comma-separated key=value pairs)"
    )
    otel_traces_exporter: Literal["otlp", "console", "none"] = Field(
        default="otlp", description="Traces exporter"
    )
    otel_metrics_exporter: Literal["otlp", "console", "none"] = Field(
        default="otlp", description="Metrics exporter"
    )

    @property
    def route_prefix(self) -> str:
        """API prefix normalized to the form the classifier strips (``/api/v1/``)."""
        return "/" + self.api_prefix.strip("/") + "/"

    def get_otlp_headers(self) -> dict[str, str]:
        """Parse OTLP headers from comma-separated string."""
        if not self.otel_exporter_otlp_headers:
            return {}
        return dict(
            item.split("=", 1)
            for item in self.otel_exporter_otlp_headers.split(",")
            if "=" in item
        )

    def get_resource_attributes(self) -> dict[str, str]:
        """Parse resource attributes from comma-separated string."""
        if not self.otel_resource_attributes:
            return {}
        return dict(
            item.split("=", 1) for item in self.otel_resource_attributes.split(",") if "=" in item
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
