# supplywatch/services/enrichment.py
"""
Anreicherungsschritte für einen gescrapten Artikel:
Störungstyp, Schweregrad + Ort, Geocoding, Zusammenfassung.

Jeder Schritt liefert ein StepResult. Ob ein Fehler den Artikel verwirft
oder durch einen Default ersetzt wird, entscheidet die Pipeline anhand
von STEP_POLICY (services/ingestion.py).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

from supplywatch.core.geo import GeocodeResult, GoogleGeocoder, detect_country_fallback
from supplywatch.schemas import SEVERITY_LEVELS
from supplywatch.services.llm import ChatClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

UNKNOWN = "Unknown"
NO_LOCATION = "No Location Detected"
DEFAULT_SEVERITY = "Low"

# Feste Störungskategorien
CATEGORIES = [
    "Airport Disruption",
    "Bankruptcy",
    "Business Spin-Off",
    "Business Sale",
    "Chemical Spill",
    "Corruption",
    "Company Split",
    "Cyber Attack",
    "FDA/EMA/OSHA Action",
    "Factory Fire",
    "Geopolitical",
    "Leadership Transition",
    "Legal Action",
    "Merger & Acquisition",
    "Port Disruption",
    "Protest/Riot",
    "Supply Shortage",
    "Earthquake",
    "Extreme Weather",
    "Flood",
    "Hurricane",
    "Tornado",
    "Volcano",
    "Human Health",
    "Power Outage",
    "CNA",
]

_CATEGORY_LOOKUP = {c.lower(): c for c in CATEGORIES}


@dataclass
class StepResult(Generic[T]):
    ok: bool
    value: Optional[T] = None
    error: Optional[Exception] = None

    @classmethod
    def success(cls, value: T) -> "StepResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: Exception) -> "StepResult[T]":
        return cls(ok=False, error=error)


# -----------------------------
# Störungstyp
# -----------------------------
CLASSIFY_SYSTEM = "You are an assistant that categorizes disruptions based on the context, even if inferred."


def normalize_category(answer: str | None) -> str:
    """Modellantwort auf eine Kategorie aus CATEGORIES abbilden, sonst 'Unknown'."""
    if not answer:
        return UNKNOWN
    cleaned = answer.strip().strip("'\"").rstrip(".").strip()
    return _CATEGORY_LOOKUP.get(cleaned.lower(), UNKNOWN)


def detect_disruption_type(llm: ChatClient, text: str) -> StepResult[str]:
    formatted = ", ".join(f"'{c}'" for c in CATEGORIES)
    prompt = (
        f'Based on the following information about an article: "{text}"\n\n'
        f"Classify the disruption described in this article into one of these categories:\n"
        f"{formatted}\n\n"
        "Select only one category from the list above that best fits the type of disruption. "
        "Do not provide any additional text or explanation, just respond with the single category name."
    )
    try:
        answer = llm.complete(CLASSIFY_SYSTEM, prompt, max_tokens=10)
    except Exception as e:
        logger.error("[LLM] Klassifikation fehlgeschlagen: %s", e)
        return StepResult.failure(e)
    return StepResult.success(normalize_category(answer))


# -----------------------------
# Schweregrad + Ort
# -----------------------------
SEVERITY_SYSTEM = (
    "You are an assistant that categorizes disruption severity and always provides "
    "a primary affected country based on the context, even if inferred."
)

_SEVERITY_RE = re.compile(r"severity\s*:\s*([^,\n]*)", re.IGNORECASE)
_LOCATION_RE = re.compile(r"location\s*:\s*([^\n]*)", re.IGNORECASE)


def clamp_severity(value: str | None) -> str:
    """Nur Low/Medium/High zulassen; alles andere wird zu Low."""
    for level in SEVERITY_LEVELS:
        if value and value.strip().strip("\"'.").lower() == level.lower():
            return level
    if value:
        logger.warning("[LLM] Unerwarteter Schweregrad %r – verwende %s", value, DEFAULT_SEVERITY)
    return DEFAULT_SEVERITY


def parse_severity_location(answer: str | None) -> tuple[str, str | None]:
    """
    Parst 'Severity: X, Location: Y'. Fehlende Teile -> (Low, None).
    """
    answer = answer or f"Severity: {DEFAULT_SEVERITY}, Location: {NO_LOCATION}"
    sev_match = _SEVERITY_RE.search(answer)
    loc_match = _LOCATION_RE.search(answer)
    severity = clamp_severity(sev_match.group(1) if sev_match else None)
    location = loc_match.group(1).strip().strip("\"'.").strip() if loc_match else None
    return severity, location or None


def resolve_location(location: str | None, text: str) -> str:
    if not location or location in (UNKNOWN, NO_LOCATION):
        return detect_country_fallback(text)
    return location


def detect_severity_and_location(llm: ChatClient, text: str) -> StepResult[tuple[str, str]]:
    prompt = (
        f'Given the following information about an article "{text}":\n\n'
        "Based on this information, please:\n"
        '1. Determine the severity level of the disruption mentioned, selecting from: "Low," "Medium," or "High."\n'
        "   - Consider the overall tone and language used to assess impact level.\n"
        "2. Identify the primary country affected by the disruption.\n"
        "   - If multiple countries are mentioned, select the one that is most frequently referenced.\n"
        "   - If no clear country is specified, try to infer the location from contextual clues, "
        'but never respond with "Unknown" as the location.\n'
        'Format the response EXACTLY as: "Severity: <Low/Medium/High>, Location: <Country Name>". '
        "No further explanation needed."
    )
    try:
        answer = llm.complete(SEVERITY_SYSTEM, prompt, max_tokens=50)
    except Exception as e:
        logger.error("[LLM] Schweregrad/Ort fehlgeschlagen: %s", e)
        return StepResult.failure(e)
    severity, location = parse_severity_location(answer)
    return StepResult.success((severity, resolve_location(location, text)))


# -----------------------------
# Geocoding
# -----------------------------
def geocode_location(geocoder: GoogleGeocoder, location: str | None) -> StepResult[Optional[GeocodeResult]]:
    try:
        return StepResult.success(geocoder.lookup(location))
    except Exception as e:
        logger.error("[GEO] Geocoding für %r fehlgeschlagen: %s", location, e)
        return StepResult.failure(e)


# -----------------------------
# Zusammenfassung
# -----------------------------
SUMMARY_SYSTEM = "You are an assistant that provides brief and informative summaries of articles."


def summarize_article(llm: ChatClient, text: str) -> StepResult[str]:
    prompt = (
        "Summarize the following article into a concise overview of no more than four sentences. "
        f'Focus on the main points, events, or conclusions described: "{text}"'
    )
    try:
        answer = llm.complete(SUMMARY_SYSTEM, prompt, max_tokens=100)
    except Exception as e:
        logger.error("[LLM] Zusammenfassung fehlgeschlagen: %s", e)
        return StepResult.failure(e)
    return StepResult.success(answer or text)


def first_text(article: dict[str, Any]) -> str:
    """Content, sonst Description, sonst Titel."""
    for key in ("content", "description", "title"):
        value = article.get(key)
        if value and str(value).strip():
            return str(value)
    return "No Content Available"
