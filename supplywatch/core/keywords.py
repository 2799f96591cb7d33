# ============================
# 📁 supplywatch/core/keywords.py
# (Keyword-Cloud aus den verlinkten Artikelseiten)

from __future__ import annotations

import logging
from collections import Counter
from typing import Callable, Iterable

import requests

from supplywatch.core.clean_utils import clean_html, extract_relevant_words

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; SupplyWatch/1.0; +https://example.com)"
}

PageFetcher = Callable[[str], str]


def fetch_page(url: str, timeout: int = 15) -> str:
    resp = requests.get(url, headers=DEFAULT_HEADERS, timeout=timeout)
    resp.raise_for_status()
    return resp.text


def keyword_cloud(urls: Iterable[str], fetch: PageFetcher = fetch_page) -> list[dict]:
    """
    Holt jede Seite live, zählt relevante Wörter und liefert
    [{word, count}] absteigend nach Häufigkeit.
    Nicht erreichbare Seiten werden geloggt und übersprungen.
    """
    counter: Counter = Counter()
    for url in urls:
        try:
            html = fetch(url)
        except requests.RequestException as e:
            logger.warning("[KEYWORDS] Fehler beim Abruf von %s: %s", url, e)
            continue
        counter.update(extract_relevant_words(clean_html(html)))

    return [{"word": w, "count": n} for w, n in counter.most_common()]
