# ============================
# 📁 supplywatch/main.py

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, ORJSONResponse
from starlette.exceptions import HTTPException
from starlette.middleware.gzip import GZipMiddleware

from supplywatch.api.analytics import router as analytics_router
from supplywatch.api.articles import router as articles_router
from supplywatch.api.preferences import router as preferences_router
from supplywatch.api.ratelimit import FixedWindowRateLimiter, rate_limit_middleware
from supplywatch.config import Settings, setup_logging
from supplywatch.core.geo import GoogleGeocoder
from supplywatch.core.keywords import PageFetcher, fetch_page
from supplywatch.core.newsapi import NewsApiClient
from supplywatch.database import Database
from supplywatch.errors import SupplyWatchError
from supplywatch.scheduler import install_daily_scrape
from supplywatch.services.ingestion import IngestionPipeline
from supplywatch.services.llm import OpenAIChatClient

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    database: Database | None = None,
    pipeline: IngestionPipeline | None = None,
    page_fetcher: PageFetcher | None = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    database = database or Database(settings.database_url)
    timeout = settings.http_timeout_seconds

    if pipeline is None:
        pipeline = IngestionPipeline(
            news=NewsApiClient(settings.news_api_key, timeout=timeout),
            llm=OpenAIChatClient(settings.openai_api_key, model=settings.openai_model, timeout=timeout),
            geocoder=GoogleGeocoder(settings.google_geocoding_api_key, timeout=timeout),
            session_factory=database.session,
        )

    app = FastAPI(title="SupplyWatch", default_response_class=ORJSONResponse)
    app.state.settings = settings
    app.state.database = database
    app.state.pipeline = pipeline
    app.state.page_fetcher = page_fetcher or (lambda url: fetch_page(url, timeout=timeout))
    app.state.rate_limiter = FixedWindowRateLimiter(settings.rate_limit_max, settings.rate_limit_window_seconds)

    # --- Rate-Limit (pro IP, alle Endpunkte) ---
    app.middleware("http")(rate_limit_middleware)

    # --- GZip (Antworten ab 1 KB komprimieren) ---
    app.add_middleware(GZipMiddleware, minimum_size=1024)

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- Router ---
    app.include_router(articles_router)
    app.include_router(preferences_router)
    app.include_router(analytics_router)

    # --- Fehler -> {"message": ...} ---
    @app.exception_handler(SupplyWatchError)
    async def domain_error(request: Request, exc: SupplyWatchError):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(HTTPException)
    async def http_error(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.detail}, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            field = ".".join(str(p) for p in first.get("loc", ())[1:]) or "request"
            message = f"Invalid value for '{field}': {first.get('msg', 'invalid')}"
        else:
            message = "Invalid request."
        return JSONResponse(status_code=400, content={"message": message})

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.exception("[API] Unerwarteter Fehler bei %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"message": "Internal server error."})

    # --- Store öffnen/schließen ---
    @app.on_event("startup")
    def open_database() -> None:
        try:
            database.open()
        except Exception:
            logger.exception("[DB] Verbindung zum Store fehlgeschlagen")
            raise SystemExit(1)
        logger.info("[DB] 📦 Store verbunden, Tabellen geprüft/erstellt.")

    @app.on_event("shutdown")
    def close_database() -> None:
        database.close()

    # --- Täglicher Scrape-Job ---
    if settings.scheduler_enabled:
        install_daily_scrape(app, settings.scrape_schedule_hour, settings.scrape_schedule_minute)

    return app


def run() -> None:
    import uvicorn

    settings = Settings.from_env()
    setup_logging(settings.log_level)
    try:
        uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)
    except Exception:
        logger.exception("Unhandled exception, shutting down")
        raise SystemExit(1)


if __name__ == "__main__":
    run()
