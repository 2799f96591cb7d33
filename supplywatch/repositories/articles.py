import logging

from sqlalchemy import delete, or_, select, update
from sqlalchemy.orm import Session

from supplywatch.models_sql import ArticleORM
from supplywatch.schemas import ArticleIn, FilterCriteria

logger = logging.getLogger(__name__)

# Spalten, die für Dropdowns (distinct) freigegeben sind
DISTINCT_COLUMNS = {
    "location": ArticleORM.location,
    "disruptionType": ArticleORM.disruption_type,
    "severity": ArticleORM.severity,
}


def _active():
    return ArticleORM.isdeleted.is_(False)


def article_exists(db: Session, url: str) -> bool:
    """Existiert bereits ein Artikel mit dieser URL? Soft-gelöschte zählen mit."""
    stmt = select(ArticleORM.id).where(ArticleORM.url == url).limit(1)
    return db.execute(stmt).first() is not None


def upsert_articles(db: Session, items: list[ArticleIn]) -> int:
    """
    Speichert Artikel einzeln per URL:
      - soft-gelöscht -> übersprungen (wird nicht wiederbelebt)
      - vorhanden     -> Felder aktualisiert
      - neu           -> eingefügt
    Jeder Artikel wird einzeln committed; kein Rollback über den Batch.
    Rückgabe: Anzahl eingefügter/aktualisierter Artikel.
    """
    saved = 0
    for item in items:
        existing = db.execute(select(ArticleORM).where(ArticleORM.url == item.url)).scalar_one_or_none()
        if existing is not None and existing.isdeleted:
            logger.info("[DB] Überspringe gelöschten Artikel: %s", item.url)
            continue

        data = item.model_dump()
        if existing is None:
            db.add(ArticleORM(**data))
        else:
            for key, value in data.items():
                setattr(existing, key, value)
        db.commit()
        saved += 1

    logger.info("[DB] %d von %d Artikeln gespeichert.", saved, len(items))
    return saved


def list_articles(db: Session, disruption_type: str | None = None) -> list[ArticleORM]:
    stmt = select(ArticleORM).where(_active())
    if disruption_type:
        stmt = stmt.where(ArticleORM.disruption_type == disruption_type)
    return list(db.execute(stmt.order_by(ArticleORM.id)).scalars())


def get_article(db: Session, article_id: int) -> ArticleORM | None:
    stmt = select(ArticleORM).where(ArticleORM.id == article_id, _active())
    return db.execute(stmt).scalar_one_or_none()


def soft_delete_article(db: Session, article_id: int) -> bool:
    """isdeleted=True setzen; False, wenn nichts geändert wurde."""
    stmt = update(ArticleORM).where(ArticleORM.id == article_id, _active()).values(isdeleted=True)
    res = db.execute(stmt)
    db.commit()
    return (res.rowcount or 0) > 0


def delete_all_articles(db: Session) -> int:
    """Harte Löschung aller Artikel (nur für Entwicklung)."""
    res = db.execute(delete(ArticleORM))
    db.commit()
    return res.rowcount or 0


def distinct_values(db: Session, field: str) -> list[str]:
    column = DISTINCT_COLUMNS[field]
    stmt = select(column).where(_active(), column.is_not(None)).distinct()
    return sorted(db.execute(stmt).scalars())


def filter_articles(db: Session, criteria: FilterCriteria) -> list[ArticleORM]:
    """UND-verknüpfte Filter; leere Kriterien werden ignoriert."""
    stmt = select(ArticleORM).where(_active())

    if criteria.from_date and criteria.to_date:
        stmt = stmt.where(
            ArticleORM.published_date >= criteria.from_date,
            ArticleORM.published_date <= criteria.to_date,
        )
    if criteria.locations:
        stmt = stmt.where(ArticleORM.location.in_(criteria.locations))
    if criteria.disruption_types:
        stmt = stmt.where(ArticleORM.disruption_type.in_(criteria.disruption_types))
    if criteria.severity_levels:
        stmt = stmt.where(ArticleORM.severity.in_(criteria.severity_levels))
    if criteria.suppliers:
        stmt = stmt.where(ArticleORM.source_name.in_(criteria.suppliers))

    stmt = stmt.order_by(ArticleORM.published_date.desc())
    return list(db.execute(stmt).scalars())


def _like_pattern(query: str) -> str:
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def search_articles(db: Session, query: str | None) -> list[ArticleORM]:
    """Case-insensitive Teilstring-Suche über Titel, Ort, Störungstyp, Schweregrad."""
    stmt = select(ArticleORM).where(_active())
    if query:
        pattern = _like_pattern(query)
        stmt = stmt.where(or_(
            ArticleORM.title.ilike(pattern, escape="\\"),
            ArticleORM.location.ilike(pattern, escape="\\"),
            ArticleORM.disruption_type.ilike(pattern, escape="\\"),
            ArticleORM.severity.ilike(pattern, escape="\\"),
        ))
    stmt = stmt.order_by(ArticleORM.published_date.desc())
    return list(db.execute(stmt).scalars())


def article_urls(db: Session) -> list[str]:
    stmt = select(ArticleORM.url).where(_active(), ArticleORM.url.is_not(None)).order_by(ArticleORM.id)
    return list(db.execute(stmt).scalars())
