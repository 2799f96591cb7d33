# tests/conftest.py
from datetime import datetime, timezone

import pytest
import requests
from fastapi.testclient import TestClient

from supplywatch.config import Settings
from supplywatch.core.geo import GeocodeResult
from supplywatch.database import Database
from supplywatch.main import create_app
from supplywatch.repositories.articles import upsert_articles
from supplywatch.schemas import ArticleIn
from supplywatch.services import enrichment
from supplywatch.services.ingestion import IngestionPipeline


class FakeLLM:
    """Antwortet je nach System-Prompt; Exceptions können pro Schritt gesetzt werden."""

    def __init__(self, category="Port Disruption", severity="Severity: High, Location: Vietnam", summary="Short summary."):
        self.category = category
        self.severity = severity
        self.summary = summary
        self.fail: set[str] = set()
        self.calls: list[str] = []

    def complete(self, system, prompt, max_tokens):
        if system == enrichment.CLASSIFY_SYSTEM:
            step, answer = "classify", self.category
        elif system == enrichment.SEVERITY_SYSTEM:
            step, answer = "severity", self.severity
        else:
            step, answer = "summary", self.summary
        self.calls.append(step)
        if step in self.fail:
            raise RuntimeError(f"{step} unavailable")
        return answer(prompt) if callable(answer) else answer


class FakeGeocoder:
    COORDS = {"Vietnam": (14.0583, 108.2772), "China": (35.8617, 104.1954)}

    def __init__(self):
        self.fail = False
        self.calls: list[str] = []

    def lookup(self, location):
        self.calls.append(location)
        if self.fail:
            raise RuntimeError("geocoder down")
        coords = self.COORDS.get(location)
        if coords is None:
            return None
        return GeocodeResult(query=location, latitude=coords[0], longitude=coords[1])


class FakeNews:
    def __init__(self, articles=None):
        self.articles = articles if articles is not None else []
        self.calls: list[tuple] = []
        self.error: Exception | None = None

    def fetch_articles(self, from_date, to_date):
        self.calls.append((from_date, to_date))
        if self.error:
            raise self.error
        return list(self.articles)


def news_item(url, title="Port closure", content="Port disruption in Vietnam", **extra):
    item = {
        "source": {"id": None, "name": "Reuters"},
        "title": title,
        "url": url,
        "urlToImage": None,
        "publishedAt": "2024-03-05T10:00:00Z",
        "description": None,
        "content": content,
    }
    item.update(extra)
    return item


def make_article(url="https://example.com/a", **overrides) -> ArticleIn:
    data = dict(
        title="Factory fire halts output",
        url=url,
        image_url="No Image",
        disruption_type="Factory Fire",
        published_date=datetime(2024, 3, 5, 10, 0, tzinfo=timezone.utc),
        location="China",
        lat=35.8617,
        lng=104.1954,
        radius=0.0,
        severity="High",
        raw_text="raw",
        text="summary",
        source_name="Reuters",
    )
    data.update(overrides)
    return ArticleIn(**data)


@pytest.fixture
def database():
    db = Database("sqlite://")
    db.open()
    yield db
    db.close()


@pytest.fixture
def session(database):
    with database.session() as s:
        yield s


@pytest.fixture
def save(session):
    def _save(*articles):
        upsert_articles(session, list(articles))
    return _save


@pytest.fixture
def llm():
    return FakeLLM()


@pytest.fixture
def geocoder():
    return FakeGeocoder()


@pytest.fixture
def news():
    return FakeNews()


@pytest.fixture
def pipeline(news, llm, geocoder, database):
    return IngestionPipeline(news=news, llm=llm, geocoder=geocoder, session_factory=database.session)


@pytest.fixture
def pages():
    return {}


@pytest.fixture
def client(database, pipeline, pages):
    settings = Settings(database_url="sqlite://", scheduler_enabled=False, rate_limit_max=10_000)

    def fetch(url):
        if url not in pages:
            raise requests.ConnectionError(url)
        return pages[url]

    app = create_app(settings, database=database, pipeline=pipeline, page_fetcher=fetch)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
