# backend/config.py
"""
Configuration management for the Gateway Planner backend
Loads settings from environment variables
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    app_env: str = "development"
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    debug: bool = True

    # Database (exported plan history)
    database_url: str = "sqlite:///./gateway_planner.db"
    persist_exports: bool = True

    # CORS Settings
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    cors_allow_credentials: bool = True

    # Gateway catalog
    # JSON object of extra gateway types, e.g.
    # {"32ch": {"maxStreams": 32, "maxThroughput": 1280, "maxStorage": 24}}
    gateway_extra_types: str = ""

    # Planning
    capacity_warning_percent: float = 90.0
    storage_cost_per_tb: float = 150.0
    power_base_watts: float = 45.0
    power_per_stream_watts: float = 5.0

    # Planning sessions
    session_ttl_minutes: int = 120
    max_sessions: Optional[int] = 500

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Ignore extra fields in .env file


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings"""
    return settings
