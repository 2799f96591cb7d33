# ============================
# 📁 supplywatch/core/geo.py
# (Geocoding, Haversine-Radius und Länder-Fallback)

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

import requests

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0

# Referenzpunkt für den Radius (Lieferanten-Standort, aktuell China)
REFERENCE_LAT = 35.8617
REFERENCE_LNG = 104.1954

DEFAULT_COUNTRY = "United States of America"

COUNTRIES = [
    "Afghanistan", "Albania", "Algeria", "Andorra", "Angola", "Antigua and Barbuda",
    "Argentina", "Armenia", "Australia", "Austria", "Azerbaijan", "Bahamas", "Bahrain",
    "Bangladesh", "Barbados", "Belarus", "Belgium", "Belize", "Benin", "Bhutan", "Bolivia",
    "Bosnia and Herzegovina", "Botswana", "Brazil", "Brunei", "Bulgaria", "Burkina Faso",
    "Burundi", "Cabo Verde", "Cambodia", "Cameroon", "Canada", "Central African Republic",
    "Chad", "Chile", "China", "Colombia", "Comoros", "Congo (Congo-Brazzaville)",
    "Costa Rica", "Croatia", "Cuba", "Cyprus", "Czechia (Czech Republic)", "Denmark",
    "Djibouti", "Dominica", "Dominican Republic", "Ecuador", "Egypt", "El Salvador",
    "Equatorial Guinea", "Eritrea", "Estonia", "Eswatini (fmr. Swaziland)", "Ethiopia",
    "Fiji", "Finland", "France", "Gabon", "Gambia", "Georgia", "Germany", "Ghana", "Greece",
    "Grenada", "Guatemala", "Guinea", "Guinea-Bissau", "Guyana", "Haiti", "Honduras",
    "Hungary", "Iceland", "India", "Indonesia", "Iran", "Iraq", "Ireland", "Israel", "Italy",
    "Jamaica", "Japan", "Jordan", "Kazakhstan", "Kenya", "Kiribati", "Kuwait", "Kyrgyzstan",
    "Laos", "Latvia", "Lebanon", "Lesotho", "Liberia", "Libya", "Liechtenstein", "Lithuania",
    "Luxembourg", "Madagascar", "Malawi", "Malaysia", "Maldives", "Mali", "Malta",
    "Marshall Islands", "Mauritania", "Mauritius", "Mexico", "Micronesia (Federated States of)",
    "Moldova (Republic of)", "Monaco", "Mongolia", "Montenegro", "Morocco", "Mozambique",
    "Myanmar", "Namibia", "Nauru", "Nepal", "Netherlands", "New Zealand", "Nicaragua",
    "Niger", "Nigeria", "North Korea", "North Macedonia", "Norway", "Oman", "Pakistan",
    "Palau", "Palestine State", "Panama", "Papua New Guinea", "Paraguay", "Peru", "Philippines",
    "Poland", "Portugal", "Qatar", "Romania", "Russian Federation", "Rwanda", "Saint Kitts and Nevis",
    "Saint Lucia", "Saint Vincent and the Grenadines", "Samoa", "San Marino", "Sao Tome and Principe",
    "Saudi Arabia", "Senegal", "Serbia", "Seychelles", "Sierra Leone", "Singapore", "Slovakia",
    "Slovenia", "Solomon Islands", "Somalia", "South Africa", "South Korea", "South Sudan",
    "Spain", "Sri Lanka", "Sudan", "Suriname", "Sweden", "Switzerland", "Syria", "Tajikistan",
    "Tanzania", "Thailand", "Timor-Leste", "Togo", "Tonga", "Trinidad and Tobago", "Tunisia",
    "Turkey", "Turkmenistan", "Tuvalu", "Uganda", "Ukraine", "United Arab Emirates",
    "United Kingdom", "United States of America", "Uruguay", "Uzbekistan", "Vanuatu", "Venezuela",
    "Vietnam", "Yemen", "Zambia", "Zimbabwe",
]


def calculate_radius(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Großkreis-Distanz zweier Koordinaten in km (Haversine)."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def detect_country_fallback(text: str) -> str:
    """
    Erstes Land aus COUNTRIES, das (case-insensitiv) im Text vorkommt.
    Ohne Treffer -> DEFAULT_COUNTRY.
    """
    lower = (text or "").lower()
    for country in COUNTRIES:
        if country.lower() in lower:
            logger.debug("[GEO] Land per Fallback erkannt: %s", country)
            return country
    return DEFAULT_COUNTRY


@dataclass
class GeocodeResult:
    query: str
    latitude: float
    longitude: float


class GoogleGeocoder:
    """Koordinaten zu einem Ortsnamen über die Google Geocoding API."""

    endpoint = "https://maps.googleapis.com/maps/api/geocode/json"

    def __init__(self, api_key: str | None, timeout: int = 15, session: requests.Session | None = None) -> None:
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def lookup(self, location: str | None) -> Optional[GeocodeResult]:
        """
        Liefert None für leere/unbekannte Orte und wenn die API nichts findet.
        HTTP-Fehler werden als requests.RequestException weitergereicht.
        """
        if not location or location == "Unknown":
            return None
        if not self.api_key:
            logger.debug("[GEO] Kein GOOGLE_GEOCODING_API_KEY gesetzt – Geocoding übersprungen.")
            return None
        response = self.session.get(
            self.endpoint,
            params={"address": location, "key": self.api_key},
            timeout=self.timeout,
        )
        response.raise_for_status()
        payload = response.json()
        results = payload.get("results") or []
        if not results:
            logger.warning("[GEO] Keine Treffer für Ort: %s", location)
            return None
        loc = results[0]["geometry"]["location"]
        return GeocodeResult(query=location, latitude=float(loc["lat"]), longitude=float(loc["lng"]))
