"""Maison storefront FastAPI application.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 3000
    python src/server.py
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import PlainTextResponse

from shared.config import Settings
from shared.db import Database, setup_db
from shared.errors import register_error_handlers
from shared.logging import configure_logging
from shared.middleware import ApiRequestLogMiddleware, BodySizeLimitMiddleware, OriginAllowlistMiddleware

logger = structlog.get_logger(__name__)

API_PREFIX = "/api"


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    """Build the application for ``settings``.

    ``database`` may be supplied to share one engine with the caller (tests,
    management commands); otherwise one is created from the settings.
    """
    settings = settings or Settings.from_env()
    database = database or Database(settings.database_url)
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.create_schema:
            setup_db(database)
        logger.info("serving", host=settings.host, port=settings.port, environment=settings.environment)
        yield
        database.dispose()

    app = FastAPI(
        title="Maison Storefront API",
        description="Luxury storefront: catalogue, cart, checkout and admin",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database

    # ---------------------------------------------------------------------------
    # Middleware (the last one added is the outermost)
    # ---------------------------------------------------------------------------
    app.add_middleware(ApiRequestLogMiddleware, prefix=API_PREFIX)
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_bytes)
    app.add_middleware(OriginAllowlistMiddleware, allowed_origins=settings.allowed_origins)

    register_error_handlers(app)

    # ---------------------------------------------------------------------------
    # Routers
    # ---------------------------------------------------------------------------
    from catalogue.api import admin_product_router, product_router
    from identity.api import router as identity_router
    from notifications.api import router as notification_router
    from ordering.api import admin_order_router, cart_router, checkout_router, order_router

    for router in (
        identity_router,
        product_router,
        cart_router,
        checkout_router,
        order_router,
        admin_product_router,
        admin_order_router,
        notification_router,
    ):
        app.include_router(router, prefix=API_PREFIX)

    # ---------------------------------------------------------------------------
    # Health
    # ---------------------------------------------------------------------------
    @app.get("/health", response_class=PlainTextResponse)
    def health() -> str:
        return "OK"

    return app


app = create_app()
