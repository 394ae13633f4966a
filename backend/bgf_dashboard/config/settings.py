"""Application Settings - Central Configuration"""
from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # MongoDB
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db: str = "bgf_dashboard_dev"

    # Backend base URL (used for links in companion emails)
    api_url: str = "http://localhost:5001"

    # Token signing
    # Change this in production!
    jwt_secret: str = "bgf-dashboard-secret-key"
    jwt_algorithm: str = "HS256"

    # Staff access-code login
    staff_token_cookie: str = "bgf-staff-token"
    staff_token_expiry_seconds: int = 60 * 60 * 4  # 4 hours
    staff_code_cache_ttl_seconds: int = 5 * 60  # 5 minutes

    # Regular user sessions
    session_token_expiry_seconds: int = 60 * 60 * 12

    # Logging
    logs_path: str = "./logs"
    log_level: str = "INFO"

    # CORS - set to "*" to allow all origins
    cors_origins: str = "http://localhost:3000"

    # Frontend URL (for email links)
    frontend_url: str = "http://localhost:3000"

    # Notifications
    notification_retention_days: int = 90

    # Environment
    environment: str = "development"
    debug: bool = True

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string to list"""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.environment.lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
