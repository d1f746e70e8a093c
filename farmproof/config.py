"""
Application configuration using Pydantic settings.
"""
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Storage API Configuration
    storage_api_base_url: str = Field(
        default="https://storage.example.com",
        description="Base URL for the farm records storage API"
    )
    storage_api_key: str = Field(
        default="",
        description="API key for authentication"
    )

    # Retry Configuration
    max_retry_attempts: int = Field(
        default=3,
        description="Maximum number of retry attempts for storage calls"
    )
    retry_backoff_multiplier: int = Field(
        default=1,
        description="Multiplier for exponential backoff"
    )
    retry_min_wait: int = Field(
        default=4,
        description="Minimum wait time in seconds between retries"
    )
    retry_max_wait: int = Field(
        default=10,
        description="Maximum wait time in seconds between retries"
    )

    # Geofencing
    geofence_buffer_meters: float = Field(
        default=20.0,
        description="Tolerance around farm boundaries for photo capture locations"
    )

    # Farm sizing
    earth_radius_meters: float = Field(
        default=6371000.0,
        description="Spherical Earth radius used for polygon area"
    )

    # Production cycle
    months_per_cycle: int = Field(
        default=12,
        description="Number of monthly updates in a production cycle"
    )
    tree_label_length: int = Field(
        default=8,
        description="Length of the truncated tree id used when a tree has no number"
    )

    # Certificate metadata
    certificate_work_scope: list[str] = Field(
        default=["Specialty coffee", "Data", "Traceability"],
        description="Work scope written into certificate metadata"
    )
    certificate_impact_scope: list[str] = Field(
        default=["All"],
        description="Impact scope written into certificate metadata"
    )
    certificate_rights: list[str] = Field(
        default=["Public Display"],
        description="Rights written into certificate metadata"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins (use specific origins in production)"
    )

    # Rate Limiting
    rate_limit_requests: int = Field(
        default=100,
        description="Maximum requests per minute per client"
    )

    # Application Settings
    app_name: str = Field(
        default="Farmproof Batch Certification Service",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode"
    )

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
