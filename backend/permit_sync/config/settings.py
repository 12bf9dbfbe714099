"""Application Settings - Central Configuration"""
from functools import lru_cache
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
    mongo_db: str = "permit_sync_dev"
    mongo_timeout_ms: int = 5000

    # PEACH API
    peach_api_path: str = "http://localhost:3000/api/v1"
    peach_api_timeout_seconds: float = 10.0

    # PEACH sync job
    peach_sync_enabled: bool = True
    peach_sync_interval_minutes: int = 60
    peach_sync_actor: str = "PEACH-SYNC"  # Written to updated_by on synced permits

    # Logging
    logs_path: str = "./logs"
    log_to_file: bool = True
    log_level: str = "INFO"

    @property
    def peach_api_base_url(self) -> str:
        """PEACH API path without a trailing slash"""
        return self.peach_api_path.rstrip("/")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
