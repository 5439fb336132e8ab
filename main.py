from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from config.logging import configure_logging
from config.settings import Settings, get_settings
from database import Database

LOGGER = structlog.get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_json)

    # ============================================================
    # FASTAPI APP
    # ============================================================

    db = Database(
        settings.database_url,
        pool_size=settings.db_pool_size,
        pool_timeout=settings.db_pool_timeout,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.init_schema:
            db.init_schema()
        LOGGER.info("app_started", dialect=db.dialect)
        yield
        db.dispose()

    app = FastAPI(
        title='Invoices API',
        description='Clients and invoices with transactional line items',
        version='1.0.0',
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.db = db

    # ============================================================
    # CORS CONFIGURATION
    # ============================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ============================================================
    # ROUTERS
    # ============================================================

    from clients.router import router as clients_router
    from invoices.router import router as invoices_router

    app.include_router(clients_router)
    app.include_router(invoices_router)

    # ============================================================
    # ROOT & HEALTH ENDPOINTS
    # ============================================================

    @app.get("/")
    def read_root():
        return {
            "message": "Invoices API is running!",
            "version": "1.0.0",
            "database": app.state.db.dialect
        }

    @app.get("/health")
    def health_check(request: Request):
        database_ok = request.app.state.db.ping()
        return {
            "status": "healthy" if database_ok else "degraded",
            "database": "ok" if database_ok else "unavailable",
            "timestamp": datetime.now().isoformat(),
        }

    return app


app = create_app()
