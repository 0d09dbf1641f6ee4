import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


@dataclass(frozen=True)
class Settings:
    trending_refresh_interval_s: int = field(default_factory=lambda: _int_env("TRENDING_REFRESH_INTERVAL_S", 3600))
    batch_retry_delay_s: int = field(default_factory=lambda: _int_env("BATCH_RETRY_DELAY_S", 15))
    trending_topics_lookback_hours: int = field(
        default_factory=lambda: _int_env("TRENDING_TOPICS_LOOKBACK_HOURS", 24)
    )
    trending_topics_limit: int = field(default_factory=lambda: _int_env("TRENDING_TOPICS_LIMIT", 20))
    trending_topics_lock_key: int = field(default_factory=lambda: _int_env("TRENDING_TOPICS_LOCK_KEY", 72_001))
    trending_window_days: int = field(default_factory=lambda: _int_env("TRENDING_WINDOW_DAYS", 7))
    recommendation_lookback_days: int = field(
        default_factory=lambda: _int_env("RECOMMENDATION_LOOKBACK_DAYS", 30)
    )


settings = Settings()
