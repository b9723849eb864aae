"""Decode, evaluate and encode expression queries for the HTTP layer."""
from __future__ import annotations

import asyncio
import time
from typing import Optional, Tuple

from fastapi import HTTPException

from app.config import settings
from app.services.model_service import ModelService
from app.services.telemetry import QueryEvent, QueryEventSink
from wordexpr.errors import DecodeError, EmptyExpressionError, EncodeError, ModelEvaluationError
from wordexpr.queries import BatchSimilarityResponse, TopNResponse
from wordexpr.wire import QueryKind, Response, decode_query, encode_response


def _response_size(response: Response) -> int:
    if isinstance(response, BatchSimilarityResponse):
        return len(response.values)
    if isinstance(response, TopNResponse):
        return len(response.matches)
    return 1


class QueryService:
    """Maps request bodies to response bodies.

    Failures become ``HTTPException`` with distinct statuses: 400 for an
    undecodable body, 422 for an expression the model rejected, 500 for a
    result that could not be encoded.
    """

    def __init__(
        self,
        model_service: ModelService,
        event_sink: QueryEventSink,
        *,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        self.model_service = model_service
        self.event_sink = event_sink
        self.timeout_seconds = timeout_seconds or settings.query_timeout_seconds

    async def handle(self, kind: QueryKind, body: bytes) -> bytes:
        start_time = time.perf_counter()
        try:
            payload, size = await self._handle(kind, body)
        except HTTPException as exc:
            await self.event_sink.record(
                QueryEvent(
                    kind=kind.value,
                    status="error",
                    status_code=exc.status_code,
                    duration_seconds=time.perf_counter() - start_time,
                    error=str(exc.detail),
                )
            )
            raise

        await self.event_sink.record(
            QueryEvent(
                kind=kind.value,
                status="ok",
                status_code=200,
                duration_seconds=time.perf_counter() - start_time,
                size=size,
            )
        )
        return payload

    async def _handle(self, kind: QueryKind, body: bytes) -> Tuple[bytes, int]:
        try:
            query = decode_query(kind, body)
        except DecodeError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        if not self.model_service.ready:
            raise HTTPException(
                status_code=503,
                detail="Model not loaded. Please wait for the model to load.",
            )

        model = self.model_service.model
        loop = asyncio.get_running_loop()
        try:
            response = await asyncio.wait_for(
                loop.run_in_executor(self.model_service.executor, query.evaluate, model),
                timeout=self.timeout_seconds,
            )
        except (EmptyExpressionError, ModelEvaluationError) as exc:
            raise HTTPException(
                status_code=422,
                detail=f"error evaluating query: {exc}",
            ) from exc
        except asyncio.TimeoutError as exc:
            raise HTTPException(
                status_code=504,
                detail=f"error evaluating query: timed out after {self.timeout_seconds}s",
            ) from exc
        except Exception as exc:
            raise HTTPException(
                status_code=500,
                detail=f"error evaluating query: model failure: {exc}",
            ) from exc

        try:
            payload = encode_response(response)
        except EncodeError as exc:
            raise HTTPException(
                status_code=500, detail=str(exc)
            ) from exc
        return payload, _response_size(response)
