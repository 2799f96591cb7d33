# ============================
# 📁 supplywatch/api/articles.py
# (Scrape, Artikel lesen/löschen, Keyword-Cloud)

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from supplywatch.api.deps import get_page_fetcher, get_pipeline
from supplywatch.core.keywords import PageFetcher, keyword_cloud
from supplywatch.database import get_db
from supplywatch.errors import NotFoundError
from supplywatch.repositories import articles as repo
from supplywatch.schemas import Article, ScrapeResult
from supplywatch.services.ingestion import IngestionPipeline

router = APIRouter(prefix="/api/articles", tags=["articles"])


@router.post("/scrape", response_model=ScrapeResult)
def scrape_articles(
    from_: str | None = Query(None, alias="from"),
    to: str | None = Query(None),
    pipeline: IngestionPipeline = Depends(get_pipeline),
):
    return pipeline.run(from_, to)


@router.get("", response_model=list[Article])
def get_articles(
    disruption_type: str | None = Query(None, alias="disruptionType"),
    db: Session = Depends(get_db),
):
    return repo.list_articles(db, disruption_type)


@router.get("/keywords")
def get_keyword_cloud(
    db: Session = Depends(get_db),
    fetch: PageFetcher = Depends(get_page_fetcher),
):
    urls = repo.article_urls(db)
    if not urls:
        raise NotFoundError("No articles found.")
    return keyword_cloud(urls, fetch)


@router.get("/{article_id}", response_model=Article)
def get_article(article_id: int, db: Session = Depends(get_db)):
    article = repo.get_article(db, article_id)
    if article is None:
        raise NotFoundError("Article not found.")
    return article


# /reset muss vor /{article_id} registriert sein
@router.delete("/reset")
def delete_all_articles(db: Session = Depends(get_db)):
    deleted = repo.delete_all_articles(db)
    return {"message": "All articles have been deleted successfully.", "deletedCount": deleted}


@router.delete("/{article_id}")
def delete_article(article_id: int, db: Session = Depends(get_db)):
    if not repo.soft_delete_article(db, article_id):
        raise NotFoundError("Article not found.")
    return {"message": f"Article {article_id} deleted successfully."}
