"""
Configuration Settings

Centralized configuration management using Pydantic and environment variables.
"""
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All sensitive values should be stored in .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Database settings (snapshot store)
    database_url: str = "sqlite:///canvassing.db"
    database_pool_size: int = 5
    database_max_overflow: int = 10
    database_pool_timeout: int = 30
    database_pool_recycle: int = 3600
    database_echo: bool = False  # Set to True for SQL query logging
    snapshot_key: str = "default"

    # Location tracking
    min_displacement_meters: float = 10.0
    geolocation_timeout_seconds: float = 10.0
    geolocation_maximum_age_seconds: float = 30.0
    geolocation_high_accuracy: bool = True

    # Route planning
    route_minutes_per_mile: float = 8.0

    # Reports
    minutes_per_knock: float = 5.0
    report_timezone: str = "UTC"

    # Reverse geocoding (Nominatim-compatible endpoint)
    geocoder_enabled: bool = False
    geocoder_url: str = "https://nominatim.openstreetmap.org/reverse"
    geocoder_user_agent: str = "canvasser/0.1"
    geocoder_timeout_seconds: float = 5.0

    # Map defaults
    default_map_lat: float = 40.7608
    default_map_lng: float = -111.8910
    default_map_zoom: int = 18

    territory_colors: List[str] = [
        "#3B82F6", "#EF4444", "#10B981", "#F59E0B", "#8B5CF6",
        "#EC4899", "#14B8A6", "#F97316", "#6366F1", "#84CC16",
    ]

    # API settings
    api_cors_origins: List[str] = ["http://localhost:3000"]

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "json"

    # Application settings
    environment: str = "development"
    debug: bool = False


# Singleton instance
settings = Settings()
