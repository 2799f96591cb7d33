# ============================
# 📁 supplywatch/config.py
# (zentrale Konfiguration aus Umgebungsvariablen / .env)

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _env_int(key: str, default: int) -> int:
    try:
        return int((os.getenv(key) or "").strip())
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    v = (os.getenv(key) or "").strip().lower()
    if v in ("1", "true", "yes", "on"):
        return True
    if v in ("0", "false", "no", "off"):
        return False
    return default


@dataclass
class Settings:
    database_url: str = "sqlite:///supplywatch.sqlite3"
    news_api_key: str | None = None
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    google_geocoding_api_key: str | None = None
    port: int = 5001
    rate_limit_max: int = 100
    rate_limit_window_seconds: int = 15 * 60
    trust_proxy: bool = False
    scrape_schedule_hour: int = 8
    scrape_schedule_minute: int = 0
    scheduler_enabled: bool = True
    http_timeout_seconds: int = 15
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            news_api_key=os.getenv("NEWS_API_KEY"),
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            openai_model=os.getenv("OPENAI_MODEL", cls.openai_model),
            google_geocoding_api_key=os.getenv("GOOGLE_GEOCODING_API_KEY"),
            port=_env_int("PORT", cls.port),
            rate_limit_max=_env_int("RATE_LIMIT_MAX", cls.rate_limit_max),
            rate_limit_window_seconds=_env_int("RATE_LIMIT_WINDOW_SECONDS", cls.rate_limit_window_seconds),
            trust_proxy=_env_bool("TRUST_PROXY", cls.trust_proxy),
            scrape_schedule_hour=_env_int("SCRAPE_SCHEDULE_HOUR", cls.scrape_schedule_hour),
            scrape_schedule_minute=_env_int("SCRAPE_SCHEDULE_MINUTE", cls.scrape_schedule_minute),
            scheduler_enabled=_env_bool("SCHEDULER_ENABLED", cls.scheduler_enabled),
            http_timeout_seconds=_env_int("HTTP_TIMEOUT_SECONDS", cls.http_timeout_seconds),
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
        )


# Tabellenname: wird nur beim Import des ORM-Modells gelesen, nicht pro Settings-Instanz
COLLECTION_NAME = os.getenv("COLLECTION_NAME", "articles")


def setup_logging(level: str = "INFO") -> None:
    """Konsolen-Logging für Server und Scheduler einrichten."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
