import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError as SettingsError

from georeport.config import Settings, get_settings
from georeport.db import MongoStore
from georeport.errors import GeoReportError, ValidationError
from georeport.log import configure_logging
from georeport.routers import health, locations, reports, source_reviews
from georeport.services.geocoding import NominatimGeocoder

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[MongoStore] = None,
    geocoder=None,
) -> FastAPI:
    """
    Build the API. A store or geocoder passed in is used as-is and left open
    on shutdown; anything the app builds itself it also closes.
    """
    settings = settings or get_settings()
    app = FastAPI(title="GeoReport API", version="0.1.0")
    app.state.settings = settings
    app.state.store = store
    app.state.geocoder = geocoder

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"error": exc.message})

    @app.exception_handler(GeoReportError)
    async def georeport_error_handler(request: Request, exc: GeoReportError):
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message} ({exc.cause})")
        return JSONResponse(status_code=exc.status_code, content={"error": "Internal server error"})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception on {request.url.path}", exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials="*" not in settings.cors_origins,
    )

    @app.on_event("startup")
    async def on_startup():
        if app.state.store is None:
            owned = MongoStore(settings.mongo_uri, settings.db_name, settings.mongo_timeout_ms)
            # no degraded mode: a StorageError here aborts startup
            await owned.connect()
            app.state.store = owned
            app.state.owned_store = owned
        if app.state.geocoder is None and settings.geocoding_enabled:
            owned_geocoder = NominatimGeocoder(
                settings.geocoding_url,
                settings.geocoding_user_agent,
                settings.geocoding_timeout,
            )
            app.state.geocoder = owned_geocoder
            app.state.owned_geocoder = owned_geocoder

    @app.on_event("shutdown")
    async def on_shutdown():
        owned_geocoder = getattr(app.state, "owned_geocoder", None)
        if owned_geocoder is not None:
            await owned_geocoder.aclose()
        owned = getattr(app.state, "owned_store", None)
        if owned is not None:
            await owned.close()

    app.include_router(health.router, prefix="/health", tags=["health"])
    app.include_router(reports.router, prefix="/api", tags=["reports"])
    app.include_router(source_reviews.router, prefix="/api", tags=["source-reviews"])
    app.include_router(locations.router, prefix="/api", tags=["locations"])
    return app


def main() -> int:
    try:
        settings = get_settings()
    except SettingsError as e:
        print(f"❌ Invalid configuration: {e}")
        return 1
    configure_logging(settings.log_level)
    if not settings.mongo_uri:
        logger.error("❌ MONGO_URI is not set")
        return 1
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
    return 0
