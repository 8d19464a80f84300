"""
Application configuration using Pydantic Settings.
Loads from HOSTLOG_* environment variables and .env file.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    model_config = SettingsConfigDict(
        env_prefix="HOSTLOG_",
        env_file=".env",
        env_file_encoding="utf-8",
    )
    
    # Application Settings
    app_name: str = "hostlog"
    debug: bool = False
    log_level: str = "INFO"
    
    # Listeners (ports used by the syslog receiver and the HTTP API)
    syslog_port: int = 514
    http_port: int = 8080
    
    # Database
    db_path: str = "logs.db"
    db_timeout_seconds: float = 30.0
    
    # Queries
    page_size: int = 100
    recent_limit: int = 100
    top_hosts: int = 3
    
    # Visibility scoring
    score_alpha: float = 10.0
    score_lambda: float = 0.2
    score_beta: float = 0.5
    score_gamma: float = 5.0
    score_min: float = 0.1
    volume_cap: int = 100
    volume_window_hours: float = 1.0
    severity_window_hours: float = 24.0


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
