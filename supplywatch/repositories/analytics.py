# supplywatch/repositories/analytics.py
"""
Aggregationen für die Dashboard-Charts.
Zählungen ohne Zeitbezug laufen als GROUP BY in der DB, Wochen-/Monats-
Buckets werden in Python gebildet (round_to_bucket), damit die Logik
unabhängig vom SQL-Dialekt bleibt.
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from supplywatch.api.date_range_spec import Bucket, round_to_bucket
from supplywatch.models_sql import ArticleORM

WEEKLY_LIMIT = 50


def _active():
    return ArticleORM.isdeleted.is_(False)


def disruption_type_totals(db: Session) -> list[dict]:
    dtype = func.coalesce(ArticleORM.disruption_type, "Unknown")
    stmt = select(dtype, func.count()).where(_active()).group_by(dtype)
    rows = db.execute(stmt).all()
    out = [{"disruptionType": t, "total": int(n)} for t, n in rows]
    return sorted(out, key=lambda r: (-r["total"], r["disruptionType"]))


def _rows_between(db: Session, column, start: datetime, end: datetime):
    stmt = (
        select(ArticleORM.published_date, column)
        .where(_active())
        .where(ArticleORM.published_date >= start, ArticleORM.published_date <= end)
    )
    return db.execute(stmt).all()


def weekly_disruption_type_counts(db: Session, start: datetime, end: datetime) -> list[dict]:
    counts: Counter = Counter()
    for published, dtype in _rows_between(db, ArticleORM.disruption_type, start, end):
        counts[(round_to_bucket(published, "week"), dtype)] += 1

    out = [
        {"week_start": week, "disruptionType": dtype, "total": n}
        for (week, dtype), n in counts.items()
    ]
    out.sort(key=lambda r: (r["week_start"], r["disruptionType"] or ""))
    return out[:WEEKLY_LIMIT]


def severity_level_counts(db: Session, start: datetime, end: datetime, period: Bucket = "week") -> list[dict]:
    counts: Counter = Counter()
    for published, severity in _rows_between(db, ArticleORM.severity, start, end):
        counts[(round_to_bucket(published, period), severity)] += 1

    out = [
        {"period_start": p, "severity": sev, "total": n}
        for (p, sev), n in counts.items()
    ]
    out.sort(key=lambda r: (r["period_start"], r["severity"] or ""))
    return out


def total_severity_counts(db: Session) -> list[dict]:
    stmt = select(ArticleORM.severity, func.count()).where(_active()).group_by(ArticleORM.severity)
    return [{"severity": sev, "total": int(n)} for sev, n in db.execute(stmt).all()]
