# interview_schedule/config.py

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/interview_schedule.db"

    # Empty = no Redis: in-memory rate limiting, notifications only logged
    redis_url: str = ""

    rate_limit_backend: str = "memory"  # memory / redis
    rate_limit_sweep_interval_ms: int = 60000

    default_onsite_block_minutes: int = 60
    default_online_block_minutes: int = 30

    notifications_queue: str = "events:p2p"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            # Relative SQLite paths are anchored at the project root
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            return f"sqlite:///{absolute_path}"
        return url

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


settings = Settings()
