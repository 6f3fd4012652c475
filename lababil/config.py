from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_NAME: str = "Lababil Sales System"
    ENVIRONMENT: str = "development"

    # Remote document store
    SUPABASE_URL: Optional[str] = None
    SUPABASE_KEY: Optional[str] = None

    # Local cache and cross-process sync
    REDIS_URL: str = "redis://localhost:6379"
    CACHE_PREFIX: str = "lababil"
    SYNC_CHANNEL: str = "lababil-sync"
    SYNC_POLL_SECONDS: int = 5

    # Reporting
    TIMEZONE: str = "Asia/Jakarta"

    # Activity log housekeeping
    ACTIVITY_LOG_RETENTION_DAYS: int = 90
    CLEANUP_INTERVAL_SECONDS: int = 86400

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    @property
    def remote_store_configured(self) -> bool:
        return bool(self.SUPABASE_URL) and bool(self.SUPABASE_KEY)


@lru_cache
def get_settings() -> Settings:
    return Settings()
