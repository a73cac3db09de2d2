"""FastAPI app entrypoint."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from visualsense.api.routes import router
from visualsense.audit.engine import AuditEngine
from visualsense.config import get_settings
from visualsense.logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()

    # Logging first so startup itself is logged as JSON
    setup_logging(settings.log_level)
    logger.info("starting visual audit service")

    app.state.settings = settings
    app.state.engine = AuditEngine(settings)

    logger.info(
        "visual audit service ready",
        extra={
            "gemini_model": settings.gemini_model,
            "proxy_enabled": bool(settings.proxy_url_template),
            "max_candidates": settings.max_candidates,
        },
    )

    yield

    logger.info("shutting down visual audit service")


app = FastAPI(title="VisualSense Audit Service", lifespan=lifespan)
app.include_router(router)


@app.get("/health")
async def health():
    return {"status": "ok"}
