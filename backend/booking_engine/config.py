# backend/booking_engine/config.py

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # project root


class Settings(BaseSettings):
    database_url: str = "sqlite:///./booking.db"
    redis_url: Optional[str] = None

    default_timezone: str = "UTC"

    # Slot engine tuning (per-business columns take precedence)
    slot_step_minutes: Optional[int] = None
    min_lead_minutes: int = 0
    horizon_days: int = 60
    max_batch_days: int = 31

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            # Relative sqlite path is anchored at the project root
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            return f"sqlite:///{absolute_path}"
        return url


settings = Settings()
