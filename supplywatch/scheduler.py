# supplywatch/scheduler.py
"""
Täglicher Scrape-Job im Server-Prozess (Default 08:00 UTC, 7 Tage Rückblick).
Der Job tickt jede Minute über fastapi_utils.repeat_every und feuert einmal
pro Tag, sobald die Uhrzeit erreicht ist.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone

from fastapi import FastAPI
from fastapi_utils.tasks import repeat_every

from supplywatch.errors import SupplyWatchError

logger = logging.getLogger(__name__)

TICK_SECONDS = 60


class DailyTrigger:
    """Merkt sich den letzten Lauf; feuert höchstens einmal pro UTC-Tag."""

    def __init__(self, hour: int, minute: int, now: datetime | None = None):
        self.hour = hour
        self.minute = minute
        now = now or datetime.now(timezone.utc)
        # Start nach der Uhrzeit: heute nicht nachholen (wie ein Cron)
        self.last_run: date | None = now.date() if self._past_slot(now) else None

    def _past_slot(self, now: datetime) -> bool:
        return (now.hour, now.minute) >= (self.hour, self.minute)

    def is_due(self, now: datetime) -> bool:
        return self.last_run != now.date() and self._past_slot(now)

    def mark_run(self, now: datetime) -> None:
        self.last_run = now.date()


def install_daily_scrape(app: FastAPI, hour: int, minute: int) -> DailyTrigger:
    trigger = DailyTrigger(hour, minute)

    @app.on_event("startup")
    @repeat_every(seconds=TICK_SECONDS)
    def scheduled_scrape() -> None:
        now = datetime.now(timezone.utc)
        if not trigger.is_due(now):
            return
        trigger.mark_run(now)
        logger.info("[SCHEDULER] ⏱ Täglicher Scrape gestartet...")
        try:
            result = app.state.pipeline.run()
            logger.info("[SCHEDULER] ✅ %s (%d Artikel)", result.message, result.total)
        except SupplyWatchError as e:
            logger.warning("[SCHEDULER] Scrape übersprungen: %s", e.message)
        except Exception:
            logger.exception("[SCHEDULER] Scrape fehlgeschlagen")

    return trigger
