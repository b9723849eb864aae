"""FastAPI endpoints for similarity and nearest-neighbour queries."""
from __future__ import annotations

from functools import lru_cache

from fastapi import APIRouter, Depends, Request, Response

from ..services.model_service import model_service
from ..services.query_service import QueryService
from ..services.telemetry import build_event_sink
from wordexpr.wire import QueryKind

router = APIRouter(tags=["queries"])

# GET with a body is accepted for compatibility with existing word2vec clients.
_METHODS = ["GET", "POST"]


def get_query_service() -> QueryService:
    """Lazy singleton used as a FastAPI dependency."""
    return _get_query_service()


@lru_cache(maxsize=1)
def _get_query_service() -> QueryService:
    return QueryService(model_service, build_event_sink())


async def _answer(kind: QueryKind, request: Request, service: QueryService) -> Response:
    body = await request.body()
    payload = await service.handle(kind, body)
    return Response(content=payload, media_type="application/json")


@router.api_route(QueryKind.SIMILARITY.path, methods=_METHODS)
async def similarity(
    request: Request,
    service: QueryService = Depends(get_query_service),
) -> Response:
    """Similarity between expressions ``a`` and ``b``."""

    return await _answer(QueryKind.SIMILARITY, request, service)


@router.api_route(QueryKind.BATCH_SIMILARITY.path, methods=_METHODS)
async def batch_similarity(
    request: Request,
    service: QueryService = Depends(get_query_service),
) -> Response:
    """Similarities for a batch of expression pairs, in request order."""

    return await _answer(QueryKind.BATCH_SIMILARITY, request, service)


@router.api_route(QueryKind.TOP_N.path, methods=_METHODS)
async def most_similar(
    request: Request,
    service: QueryService = Depends(get_query_service),
) -> Response:
    """The ``n`` vocabulary words closest to ``expr``."""

    return await _answer(QueryKind.TOP_N, request, service)
