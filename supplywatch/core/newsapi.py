# ============================
# 📁 supplywatch/core/newsapi.py
# (Artikel-Batch von NewsAPI /v2/everything holen)

from __future__ import annotations

import logging
from datetime import date
from typing import List

import requests

logger = logging.getLogger(__name__)

DEFAULT_QUERY = "'supply chain disruption' OR 'global disruption'"
DEFAULT_PAGE_SIZE = 20


class NewsApiError(RuntimeError):
    pass


class NewsApiClient:
    """Dünner Wrapper um den NewsAPI-Endpunkt `/v2/everything`."""

    endpoint = "https://newsapi.org/v2/everything"

    def __init__(
        self,
        api_key: str | None,
        query: str = DEFAULT_QUERY,
        page_size: int = DEFAULT_PAGE_SIZE,
        timeout: int = 15,
    ) -> None:
        self.api_key = api_key
        self.query = query
        self.page_size = page_size
        self.timeout = timeout

    def fetch_articles(self, from_date: date, to_date: date) -> List[dict]:
        """
        Ein Batch (page_size) passender Artikel, neueste zuerst.
        HTTP-Fehler und Payloads mit status != "ok" brechen ab.
        """
        if not self.api_key:
            raise NewsApiError("NEWS_API_KEY is not configured.")
        params = {
            "q": self.query,
            "from": from_date.isoformat(),
            "to": to_date.isoformat(),
            "language": "en",
            "sortBy": "publishedAt",
            "pageSize": self.page_size,
        }
        logger.info("[NEWS] Abruf %s bis %s", params["from"], params["to"])
        response = requests.get(
            self.endpoint,
            params=params,
            headers={"X-Api-Key": self.api_key},
            timeout=self.timeout,
        )
        response.raise_for_status()
        payload = response.json()
        if payload.get("status") != "ok":
            raise NewsApiError(f"Unexpected NewsAPI payload: {payload.get('message') or payload}")
        return list(payload.get("articles") or [])
