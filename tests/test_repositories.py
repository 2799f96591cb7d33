from datetime import datetime, timedelta, timezone

import pytest

from conftest import make_article
from supplywatch.models_sql import ArticleORM
from supplywatch.repositories import analytics
from supplywatch.repositories import articles as repo
from supplywatch.schemas import FilterCriteria


def _utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


def test_upsert_inserts_updates_and_skips_deleted(session):
    assert repo.upsert_articles(session, [make_article("u1"), make_article("u2", isdeleted=True)]) == 2

    saved = repo.upsert_articles(session, [
        make_article("u1", title="updated"),
        make_article("u2", title="revived?"),
    ])
    assert saved == 1

    session.expire_all()
    rows = {a.url: a for a in session.query(ArticleORM).all()}
    assert len(rows) == 2
    assert rows["u1"].title == "updated"
    assert rows["u2"].title == "Factory fire halts output"
    assert rows["u2"].isdeleted is True


def test_coordinates_are_jointly_null():
    a = make_article("u", lat=10.0, lng=None, radius=5.0)
    assert (a.lat, a.lng, a.radius) == (None, None, None)


def test_article_exists_counts_deleted(session, save):
    save(make_article("u1", isdeleted=True))
    assert repo.article_exists(session, "u1")
    assert not repo.article_exists(session, "u2")


def test_list_and_get_exclude_deleted(session, save):
    save(
        make_article("u1", disruption_type="Flood"),
        make_article("u2", disruption_type="Factory Fire"),
        make_article("u3", disruption_type="Flood", isdeleted=True),
    )
    assert [a.url for a in repo.list_articles(session)] == ["u1", "u2"]
    assert [a.url for a in repo.list_articles(session, "Flood")] == ["u1"]
    deleted_id = session.query(ArticleORM.id).filter_by(url="u3").scalar()
    assert repo.get_article(session, deleted_id) is None


def test_soft_delete_only_once(session, save):
    save(make_article("u1"))
    article_id = session.query(ArticleORM.id).filter_by(url="u1").scalar()
    assert repo.soft_delete_article(session, article_id) is True
    assert repo.soft_delete_article(session, article_id) is False
    assert repo.soft_delete_article(session, 999) is False


def test_delete_all(session, save):
    save(make_article("u1"), make_article("u2", isdeleted=True))
    assert repo.delete_all_articles(session) == 2
    assert session.query(ArticleORM).count() == 0


def test_distinct_values_sorted_and_active_only(session, save):
    save(
        make_article("u1", location="Vietnam"),
        make_article("u2", location="China"),
        make_article("u3", location="China"),
        make_article("u4", location="Chile", isdeleted=True),
    )
    assert repo.distinct_values(session, "location") == ["China", "Vietnam"]


def test_filter_combines_criteria(session, save):
    save(
        make_article("u1", location="China", severity="High", published_date=_utc(2024, 3, 1)),
        make_article("u2", location="Vietnam", severity="High", published_date=_utc(2024, 3, 5)),
        make_article("u3", location="Vietnam", severity="Low", published_date=_utc(2024, 3, 7)),
        make_article("u4", location="Vietnam", severity="High", published_date=_utc(2024, 3, 6), isdeleted=True),
        make_article("u5", location="Vietnam", severity="High", published_date=_utc(2024, 3, 10, 18), source_name="AP"),
    )
    criteria = FilterCriteria(
        from_date="2024-03-02", to_date="2024-03-10",
        locations="Vietnam,China", severity_levels="High",
    )
    # to_date als reines Datum schließt den ganzen Tag ein; sortiert absteigend
    assert [a.url for a in repo.filter_articles(session, criteria)] == ["u5", "u2"]

    by_supplier = FilterCriteria(suppliers="AP")
    assert [a.url for a in repo.filter_articles(session, by_supplier)] == ["u5"]


def test_filter_requires_both_dates(session, save):
    save(make_article("u1", published_date=_utc(2020, 1, 1)))
    assert len(repo.filter_articles(session, FilterCriteria(from_date="2024-01-01"))) == 1


def test_filter_criteria_validation():
    with pytest.raises(ValueError):
        FilterCriteria(from_date="2024-03-10", to_date="2024-03-01")
    assert FilterCriteria(locations=" a, ,b ").locations == ["a", "b"]


def test_search_is_case_insensitive_and_literal(session, save):
    save(
        make_article("u1", title="Typhoon hits PORT of Haiphong", published_date=_utc(2024, 3, 1)),
        make_article("u2", title="Quiet week", location="Portugal", published_date=_utc(2024, 3, 2)),
        make_article("u3", title="50% tariff", published_date=_utc(2024, 3, 3)),
        make_article("u4", title="Port strike", isdeleted=True),
    )
    assert [a.url for a in repo.search_articles(session, "port")] == ["u2", "u1"]
    assert [a.url for a in repo.search_articles(session, "%")] == ["u3"]
    assert [a.url for a in repo.search_articles(session, "high")] == ["u3", "u2", "u1"]


def test_disruption_type_totals(session, save):
    save(
        make_article("u1", disruption_type="Flood"),
        make_article("u2", disruption_type="Flood"),
        make_article("u3", disruption_type="Factory Fire"),
        make_article("u4", disruption_type="Factory Fire", isdeleted=True),
    )
    assert analytics.disruption_type_totals(session) == [
        {"disruptionType": "Flood", "total": 2},
        {"disruptionType": "Factory Fire", "total": 1},
    ]


def test_weekly_counts_bucket_by_sunday(session, save):
    save(
        make_article("u1", disruption_type="Flood", published_date=_utc(2024, 3, 3, 8)),
        make_article("u2", disruption_type="Flood", published_date=_utc(2024, 3, 9, 22)),
        make_article("u3", disruption_type="Flood", published_date=_utc(2024, 3, 10, 1)),
        make_article("u4", disruption_type="Flood", published_date=_utc(2024, 3, 4), isdeleted=True),
        make_article("u5", disruption_type="Flood", published_date=_utc(2024, 2, 20)),
    )
    rows = analytics.weekly_disruption_type_counts(session, _utc(2024, 3, 1), _utc(2024, 3, 31))
    assert rows == [
        {"week_start": _utc(2024, 3, 3), "disruptionType": "Flood", "total": 2},
        {"week_start": _utc(2024, 3, 10), "disruptionType": "Flood", "total": 1},
    ]


def test_severity_counts_by_month(session, save):
    save(
        make_article("u1", severity="High", published_date=_utc(2024, 2, 3)),
        make_article("u2", severity="High", published_date=_utc(2024, 2, 28)),
        make_article("u3", severity="Low", published_date=_utc(2024, 2, 10)),
    )
    rows = analytics.severity_level_counts(session, _utc(2024, 2, 1), _utc(2024, 2, 29, 23, 59), "month")
    assert rows == [
        {"period_start": _utc(2024, 2, 1), "severity": "High", "total": 2},
        {"period_start": _utc(2024, 2, 1), "severity": "Low", "total": 1},
    ]


def test_total_severity_counts(session, save):
    save(
        make_article("u1", severity="High"),
        make_article("u2", severity="Low"),
        make_article("u3", severity="Low", isdeleted=True),
    )
    totals = {r["severity"]: r["total"] for r in analytics.total_severity_counts(session)}
    assert totals == {"High": 1, "Low": 1}
