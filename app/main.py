"""Entry point for the wordexpr FastAPI application."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict

from fastapi import FastAPI

from .api import queries as queries_router
from .config import settings
from .services.model_service import model_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    if settings.model_path and not model_service.ready:
        await model_service.load(settings.model_path, settings.model_format)
    elif not model_service.ready:
        logger.warning("WORDEXPR_MODEL_PATH is not set; queries will return 503")
    yield


app = FastAPI(
    title="wordexpr API",
    version="0.1.0",
    summary="Word vector similarity queries over linear expressions",
    lifespan=lifespan,
)


@app.get("/", tags=["meta"])
def index() -> Dict[str, Any]:
    """Basic service descriptor."""

    return {
        "service": "wordexpr-api",
        "environment": settings.app_env,
        "docs": "/docs",
        "health": "/healthz",
    }


@app.get("/healthz", tags=["meta"])
def healthz() -> Dict[str, Any]:
    """Model readiness and shape."""

    info = model_service.get_service_info()
    return {
        "status": "ok" if info["ready"] else "loading",
        "vocabulary": info["vocabulary"],
        "dimensions": info["dimensions"],
    }


app.include_router(queries_router.router)
