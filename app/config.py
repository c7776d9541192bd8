"""
Application Configuration
"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database
    DATABASE_URL: str = "sqlite:///./muslim_app.db"
    DATABASE_ECHO: bool = False

    # API
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "Muslim App API"
    DEBUG: bool = True
    PUBLIC_API_KEY: str = ""
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: str = "120/minute"

    # Firebase (FCM only)
    FCM_CREDENTIALS_PATH: str = "firebase-admin-sdk.json"

    # Local time used for prayer times, cache keys and cron triggers
    APP_TIMEZONE: str = "Asia/Jakarta"

    # External sources
    PRAYER_API_BASE: str = "https://api.aladhan.com/v1"
    PRAYER_CALCULATION_METHOD: int = 2
    QURAN_API_BASE: str = "https://api.alquran.cloud/v1"
    LOCATIONIQ_API_BASE: str = "https://us1.locationiq.com/v1"
    LOCATIONIQ_API_KEY: str = ""
    HTTP_TIMEOUT_SECONDS: float = 15.0

    # Notifications
    DEFAULT_NOTIFY_BEFORE_MINUTES: int = 5
    DELIVERY_LEASE_SECONDS: int = 120
    SENT_NOTIFICATION_RETENTION_DAYS: int = 7

    # Housekeeping
    INACTIVE_DEVICE_DAYS: int = 30
    LOCATION_CACHE_DAYS: int = 30

    # Startup
    SCHEDULER_ENABLED: bool = True
    INIT_QURAN_CACHE_ON_STARTUP: bool = False

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
