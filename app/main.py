from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from app.accounts.router import router as accounts_router
from app.core.config import get_settings
from app.core.errors import register_exception_handlers
from app.core.logging import configure_logging, request_id_middleware
from app.db.init import create_tables
from app.fx.router import router as fx_router
from app.fx.service import shutdown_fx_service
from app.transactions.router import router as transactions_router

logger = structlog.get_logger(__name__)

settings = get_settings()
configure_logging(settings.ENV, settings.DEBUG)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events."""
    logger.info("app.starting", name=settings.APP_NAME, env=settings.ENV)

    await create_tables()

    if not settings.FX_ACCESS_KEY:
        logger.warning(
            "fx.access_key_not_configured",
            hint="GET /conversion-quote will fail until FX_ACCESS_KEY is set",
        )

    logger.info("app.started")

    yield

    logger.info("app.stopping")
    await shutdown_fx_service()
    logger.info("app.stopped")


app = FastAPI(title=settings.APP_NAME, version="0.1.0", lifespan=lifespan)
app.middleware("http")(request_id_middleware)
register_exception_handlers(app)
app.include_router(accounts_router)
app.include_router(transactions_router)
app.include_router(fx_router)


@app.get("/")
def health_check():
    logger.debug("health_check")
    return {"status": "ok"}


@app.get("/healthz")
def healthz():
    return {"status": "healthy", "env": settings.ENV}
