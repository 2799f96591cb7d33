from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from supplywatch.api.date_range_spec import ensure_utc, parse_iso_to_utc

SEVERITY_LEVELS = ("Low", "Medium", "High")


class Article(BaseModel):
    """API-Darstellung eines Artikels (camelCase wie im Dashboard erwartet)."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int | None = None
    title: str
    url: str
    image_url: str | None = Field(None, alias="imageUrl")
    disruption_type: str | None = Field(None, alias="disruptionType")
    published_date: datetime = Field(alias="publishedDate")
    location: str | None = None
    lat: float | None = None
    lng: float | None = None
    radius: float | None = None
    severity: str | None = None
    raw_text: str | None = None
    text: str | None = None
    source_name: str | None = Field(None, alias="sourceName")
    isdeleted: bool = False

    @field_validator("published_date", mode="after")
    @classmethod
    def _utc_aware(cls, v: datetime) -> datetime:
        # SQLite liefert naive Werte zurück, gespeichert wird immer UTC
        return ensure_utc(v)


class ArticleIn(BaseModel):
    """Ein angereicherter Artikel, bereit zum Upsert (ohne id)."""

    title: str
    url: str
    image_url: str | None = None
    disruption_type: str
    published_date: datetime
    location: str | None = None
    lat: float | None = None
    lng: float | None = None
    radius: float | None = None
    severity: str = "Low"
    raw_text: str | None = None
    text: str | None = None
    source_name: str | None = None
    isdeleted: bool = False

    @model_validator(mode="after")
    def _coords_together(self):
        # lat/lng/radius nur gemeinsam gesetzt oder gemeinsam leer
        if self.lat is None or self.lng is None or self.radius is None:
            self.lat = self.lng = self.radius = None
        return self


class ScrapeResult(BaseModel):
    message: str
    total: int


def split_csv(value: str | list[str] | None) -> list[str]:
    """'a,b,,c' -> ['a', 'b', 'c']"""
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [v.strip() for v in value if v and v.strip()]


class FilterCriteria(BaseModel):
    """Explizite Filterkriterien für /preferences/filter-articles."""

    from_date: datetime | None = None
    to_date: datetime | None = None
    locations: list[str] = []
    disruption_types: list[str] = []
    severity_levels: list[str] = []
    suppliers: list[str] = []

    @field_validator("locations", "disruption_types", "severity_levels", "suppliers", mode="before")
    @classmethod
    def _split(cls, v):
        return split_csv(v)

    @field_validator("from_date", mode="before")
    @classmethod
    def _parse_from(cls, v):
        if isinstance(v, str):
            return parse_iso_to_utc(v) if v.strip() else None
        return v

    @field_validator("to_date", mode="before")
    @classmethod
    def _parse_to(cls, v):
        # reines Datum: ganzer Tag inklusive
        if isinstance(v, str):
            return parse_iso_to_utc(v, end_of_day=True) if v.strip() else None
        return v

    @field_validator("from_date", "to_date", mode="after")
    @classmethod
    def _to_utc(cls, v):
        return ensure_utc(v) if v else v

    @model_validator(mode="after")
    def _check_range(self):
        if self.from_date and self.to_date and self.from_date > self.to_date:
            raise ValueError("Invalid date range. 'fromDate' must be earlier than 'toDate'.")
        return self
