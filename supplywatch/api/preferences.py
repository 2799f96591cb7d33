# supplywatch/api/preferences.py
# (Filter, Dropdown-Werte und Freitextsuche)

from fastapi import APIRouter, Depends, Query
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from supplywatch.database import get_db
from supplywatch.errors import ValidationError
from supplywatch.repositories import articles as repo
from supplywatch.schemas import Article, FilterCriteria

router = APIRouter(prefix="/api/preferences", tags=["preferences"])


@router.get("/filter-articles", response_model=list[Article])
def filter_articles(
    from_date: str | None = Query(None, alias="fromDate"),
    to_date: str | None = Query(None, alias="toDate"),
    locations: str | None = Query(None),
    disruption_types: str | None = Query(None, alias="disruptionTypes"),
    severity_levels: str | None = Query(None, alias="severityLevels"),
    suppliers: str | None = Query(None),
    db: Session = Depends(get_db),
):
    try:
        criteria = FilterCriteria(
            from_date=from_date,
            to_date=to_date,
            locations=locations,
            disruption_types=disruption_types,
            severity_levels=severity_levels,
            suppliers=suppliers,
        )
    except PydanticValidationError as e:
        raise ValidationError(e.errors()[0]["msg"].removeprefix("Value error, "))
    return repo.filter_articles(db, criteria)


@router.get("/available-locations")
def available_locations(db: Session = Depends(get_db)):
    return repo.distinct_values(db, "location")


@router.get("/available-disruption-types")
def available_disruption_types(db: Session = Depends(get_db)):
    return repo.distinct_values(db, "disruptionType")


@router.get("/available-severity-levels")
def available_severity_levels(db: Session = Depends(get_db)):
    return repo.distinct_values(db, "severity")


@router.get("/search", response_model=list[Article])
def search_articles(query: str | None = Query(None), db: Session = Depends(get_db)):
    return repo.search_articles(db, query)
