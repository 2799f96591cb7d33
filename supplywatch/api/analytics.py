# supplywatch/api/analytics.py
# (Aggregationen für Donut-/Treemap-Charts)

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from supplywatch.api.date_range_spec import resolve_preset
from supplywatch.database import get_db
from supplywatch.errors import ValidationError
from supplywatch.repositories import analytics

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


def _preset_or_400(range_: str | None):
    try:
        return resolve_preset(range_)
    except ValueError as e:
        raise ValidationError(str(e))


@router.get("/disruption-type-totals")
def disruption_type_totals(db: Session = Depends(get_db)):
    return analytics.disruption_type_totals(db)


@router.get("/weekly-disruption-type-counts")
def weekly_disruption_type_counts(
    range_: str | None = Query(None, alias="range"),
    db: Session = Depends(get_db),
):
    start, end = _preset_or_400(range_)
    return analytics.weekly_disruption_type_counts(db, start, end)


@router.get("/severity-level-counts")
def severity_level_counts(
    range_: str | None = Query(None, alias="range"),
    period: str | None = Query("week"),
    db: Session = Depends(get_db),
):
    start, end = _preset_or_400(range_)
    bucket = "month" if period == "month" else "week"
    return analytics.severity_level_counts(db, start, end, bucket)


@router.get("/total-severity-counts")
def total_severity_counts(db: Session = Depends(get_db)):
    return analytics.total_severity_counts(db)
