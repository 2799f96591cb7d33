# supplywatch/api/deps.py
# (FastAPI-Dependencies: alles kommt aus app.state, keine Modul-Singletons)

from fastapi import Request

from supplywatch.core.keywords import PageFetcher
from supplywatch.services.ingestion import IngestionPipeline


def get_pipeline(request: Request) -> IngestionPipeline:
    return request.app.state.pipeline


def get_page_fetcher(request: Request) -> PageFetcher:
    return request.app.state.page_fetcher
