"""FastAPI application wiring for the Salesforce service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .api.auth import router as auth_router
from .api.dependencies import require_bearer_token
from .api.errors import register_exception_handlers
from .api.health import router as health_router
from .api.routes import router as salesforce_router
from .cache import CacheService, build_cache
from .config import Settings, get_settings
from .domain.auth import AuthService
from .domain.service import SalesforceService
from .middleware import RequestTimeoutMiddleware
from .repository import AccountRepository, CartRepository, ContactRepository, UserRepository
from .storage import DocumentStore, build_store

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(
    settings: Settings | None = None,
    *,
    store: DocumentStore | None = None,
    cache: CacheService | None = None,
) -> FastAPI:
    """Build the application; ``store`` and ``cache`` override the configured backends."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialise storage, cache and services for the app lifecycle."""
        app.state.store = store or build_store(settings)
        app.state.cache = cache or build_cache(settings)
        app.state.salesforce_service = SalesforceService(
            AccountRepository(app.state.store),
            ContactRepository(app.state.store),
            CartRepository(app.state.store),
        )
        app.state.auth_service = AuthService(UserRepository(app.state.store), settings)
        logger.info("%s started with %s storage", settings.app_name, settings.storage_backend)
        try:
            yield
        finally:
            if store is None:
                app.state.store.close()
            if cache is None:
                app.state.cache.close()

    app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(RequestTimeoutMiddleware, timeout_ms=settings.request_timeout_ms)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=600,
    )
    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(
        salesforce_router,
        dependencies=[Depends(require_bearer_token)] if settings.auth_required else None,
    )

    @app.get("/metrics", include_in_schema=False)
    def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


app = create_app()


def run() -> None:
    """Console entry point serving the app with uvicorn."""
    settings = get_settings()
    uvicorn.run(app, host=settings.http_host, port=settings.http_port, log_level=settings.log_level.lower())
