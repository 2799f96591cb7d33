# supplywatch/services/ingestion.py
"""
Scrape-Pipeline: NewsAPI-Batch holen und pro Artikel seriell

    Dedup -> Störungstyp -> Schweregrad/Ort -> Geocoding -> Radius -> Zusammenfassung

durchlaufen; danach Upsert per URL.

Fehler in den Anreicherungsschritten werden zentral über STEP_POLICY behandelt:

    Schritt             | Fehler  | Default
    --------------------+---------+-----------------------------------------
    classify            | skip    | –  ("Unknown" wird ebenfalls verworfen)
    severity_location   | default | Severity "Low", Ort per Länder-Fallback
    geocode             | default | lat/lng/radius = None
    summarize           | default | Originaltext

Fehler beim Abruf der News (HTTP, Payload) brechen den ganzen Lauf ab.
"""

from __future__ import annotations

import logging
import threading
from datetime import date
from typing import Any, Callable, Literal

from sqlalchemy.orm import Session

from supplywatch.api.date_range_spec import parse_published, resolve_scrape_range
from supplywatch.core.geo import REFERENCE_LAT, REFERENCE_LNG, GoogleGeocoder, calculate_radius
from supplywatch.core.newsapi import NewsApiClient
from supplywatch.errors import NoArticlesFound, ScrapeInProgress, ValidationError
from supplywatch.repositories.articles import article_exists, upsert_articles
from supplywatch.schemas import ArticleIn, ScrapeResult
from supplywatch.services import enrichment
from supplywatch.services.enrichment import UNKNOWN, StepResult
from supplywatch.services.llm import ChatClient

logger = logging.getLogger(__name__)

Action = Literal["skip", "default"]

STEP_POLICY: dict[str, Action] = {
    "classify": "skip",
    "severity_location": "default",
    "geocode": "default",
    "summarize": "default",
}


class IngestionPipeline:
    def __init__(
        self,
        news: NewsApiClient,
        llm: ChatClient,
        geocoder: GoogleGeocoder,
        session_factory: Callable[[], Session],
    ) -> None:
        self.news = news
        self.llm = llm
        self.geocoder = geocoder
        self.session_factory = session_factory
        # verhindert parallele Läufe (Cron + manueller Refresh)
        self._lock = threading.Lock()

    def run(self, from_date: str | None = None, to_date: str | None = None, today: date | None = None) -> ScrapeResult:
        try:
            start, end = resolve_scrape_range(from_date, to_date, today=today)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        if not self._lock.acquire(blocking=False):
            raise ScrapeInProgress("Scrape already in progress.")
        try:
            return self._run(start, end)
        finally:
            self._lock.release()

    def _run(self, start: date, end: date) -> ScrapeResult:
        logger.info("[SCRAPE] Scraping articles from %s to %s", start, end)
        raw_articles = self.news.fetch_articles(start, end)
        if not raw_articles:
            raise NoArticlesFound("No articles found for the given date range.")

        with self.session_factory() as db:
            batch: list[ArticleIn] = []
            for raw in raw_articles:
                url = raw.get("url")
                if not url or article_exists(db, url):
                    continue
                article = self.process_article(raw)
                if article is None:
                    continue
                batch.append(article)
                logger.info("[SCRAPE] Prepared article: %s", article.title)

            upsert_articles(db, batch)

        return ScrapeResult(message="Articles processed successfully.", total=len(batch))

    def _resolve(self, step: str, result: StepResult, default: Any) -> tuple[bool, Any]:
        """(weiter?, Wert) gemäß STEP_POLICY."""
        if result.ok:
            return True, result.value
        if STEP_POLICY[step] == "skip":
            logger.warning("[SCRAPE] Schritt %s fehlgeschlagen – Artikel verworfen.", step)
            return False, None
        return True, default

    def process_article(self, raw: dict[str, Any]) -> ArticleIn | None:
        """Reichert einen NewsAPI-Artikel an; None = verwerfen."""
        text = enrichment.first_text(raw)

        keep, disruption_type = self._resolve("classify", enrichment.detect_disruption_type(self.llm, text), None)
        if not keep or disruption_type == UNKNOWN:
            return None

        _, (severity, location) = self._resolve(
            "severity_location",
            enrichment.detect_severity_and_location(self.llm, text),
            (enrichment.DEFAULT_SEVERITY, enrichment.resolve_location(None, text)),
        )

        _, geo = self._resolve("geocode", enrichment.geocode_location(self.geocoder, location), None)
        lat = lng = radius = None
        if geo is not None:
            lat, lng = geo.latitude, geo.longitude
            radius = calculate_radius(lat, lng, REFERENCE_LAT, REFERENCE_LNG)

        _, summary = self._resolve("summarize", enrichment.summarize_article(self.llm, text), text)

        source = raw.get("source") or {}
        return ArticleIn(
            title=raw.get("title") or "No Title",
            url=raw["url"],
            image_url=raw.get("urlToImage") or "No Image",
            disruption_type=disruption_type,
            published_date=parse_published(raw.get("publishedAt")),
            location=location,
            lat=lat,
            lng=lng,
            radius=radius,
            severity=severity,
            raw_text=text,
            text=summary,
            source_name=source.get("name") if isinstance(source, dict) else None,
            isdeleted=False,
        )
