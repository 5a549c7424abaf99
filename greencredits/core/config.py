from __future__ import annotations

from datetime import timedelta, timezone, tzinfo
from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "Green Credits - Waste Management"
    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")

    mongo_uri: str = Field("mongodb://localhost:27017", validation_alias="MONGO_URI")
    mongo_db: str = Field("green_credits", validation_alias="MONGO_DB")

    min_description_length: int = Field(10, validation_alias="MIN_DESCRIPTION_LENGTH")
    report_id_start: int = Field(1001, validation_alias="REPORT_ID_START")
    report_id_attempts: int = Field(12, validation_alias="REPORT_ID_ATTEMPTS")

    # calendar days for streaks are counted in this offset (Gonda is UTC+5:30)
    streak_utc_offset_hours: float = Field(5.5, validation_alias="STREAK_UTC_OFFSET_HOURS")

    reward_retry_after_seconds: int = Field(120, validation_alias="REWARD_RETRY_AFTER_SECONDS")
    reward_scan_interval_seconds: int = Field(60, validation_alias="REWARD_SCAN_INTERVAL_SECONDS")
    reward_reconciler_enabled: bool = Field(True, validation_alias="REWARD_RECONCILER_ENABLED")

    upload_dir: str = Field("uploads", validation_alias="UPLOAD_DIR")
    max_upload_bytes: int = Field(10 * 1024 * 1024, validation_alias="MAX_UPLOAD_BYTES")

    cors_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ],
        validation_alias="CORS_ORIGINS",
    )

    @property
    def streak_timezone(self) -> tzinfo:
        return timezone(timedelta(hours=self.streak_utc_offset_hours))


@lru_cache
def get_settings() -> Settings:
    return Settings()
