"""JSON wire format shared by the query service and its clients."""
from __future__ import annotations

import json
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from wordexpr.errors import DecodeError, EncodeError
from wordexpr.expressions import Expression
from wordexpr.model import Match
from wordexpr.queries import (
    BatchSimilarityQuery,
    BatchSimilarityResponse,
    SimilarityQuery,
    SimilarityResponse,
    TopNQuery,
    TopNResponse,
)

Query = Union[SimilarityQuery, BatchSimilarityQuery, TopNQuery]
Response = Union[SimilarityResponse, BatchSimilarityResponse, TopNResponse]


class QueryKind(str, Enum):
    """Query shapes; the value doubles as the HTTP route."""

    SIMILARITY = "sim"
    BATCH_SIMILARITY = "sim-multi"
    TOP_N = "most-sim"

    @property
    def path(self) -> str:
        return f"/{self.value}"


# Expressions may be omitted or null on the wire; both decode to an empty
# expression so the failure surfaces at evaluation time. Weights must be
# finite JSON numbers and `n` a JSON integer.
_STRICT = ConfigDict(strict=True, allow_inf_nan=False)


class SimilarityRequestBody(BaseModel):
    model_config = _STRICT

    a: Optional[Dict[str, float]] = None
    b: Optional[Dict[str, float]] = None


class BatchSimilarityRequestBody(BaseModel):
    model_config = _STRICT

    queries: Optional[List[SimilarityRequestBody]] = None


class TopNRequestBody(BaseModel):
    model_config = _STRICT

    expr: Optional[Dict[str, float]] = None
    n: int = 0


class SimilarityResponseBody(BaseModel):
    value: float


class BatchSimilarityResponseBody(BaseModel):
    values: Optional[List[SimilarityResponseBody]] = None


class MatchBody(BaseModel):
    term: str
    score: float


class TopNResponseBody(BaseModel):
    matches: Optional[List[MatchBody]] = None


def _expression(terms: Optional[Dict[str, float]]) -> Expression:
    return Expression.from_mapping(terms or {})


def _similarity_query(body: SimilarityRequestBody) -> SimilarityQuery:
    return SimilarityQuery(a=_expression(body.a), b=_expression(body.b))


def _similarity_payload(query: SimilarityQuery) -> Dict[str, Any]:
    return {"a": query.a.to_dict(), "b": query.b.to_dict()}


def query_kind(query: Query) -> QueryKind:
    if isinstance(query, SimilarityQuery):
        return QueryKind.SIMILARITY
    if isinstance(query, BatchSimilarityQuery):
        return QueryKind.BATCH_SIMILARITY
    if isinstance(query, TopNQuery):
        return QueryKind.TOP_N
    raise TypeError(f"unsupported query type: {type(query).__name__}")


def query_payload(query: Query) -> Dict[str, Any]:
    kind = query_kind(query)
    if kind is QueryKind.SIMILARITY:
        return _similarity_payload(query)  # type: ignore[arg-type]
    if kind is QueryKind.BATCH_SIMILARITY:
        return {"queries": [_similarity_payload(q) for q in query.queries]}  # type: ignore[union-attr]
    return {"expr": query.expr.to_dict(), "n": query.n}  # type: ignore[union-attr]


def response_payload(response: Response) -> Dict[str, Any]:
    if isinstance(response, SimilarityResponse):
        return {"value": response.value}
    if isinstance(response, BatchSimilarityResponse):
        return {"values": [{"value": item.value} for item in response.values]}
    if isinstance(response, TopNResponse):
        return {"matches": [{"term": m.term, "score": m.score} for m in response.matches]}
    raise TypeError(f"unsupported response type: {type(response).__name__}")


def _dumps(payload: Dict[str, Any]) -> bytes:
    # NaN and infinity have no JSON representation.
    return json.dumps(payload, allow_nan=False).encode("utf-8")


def encode_query(query: Query) -> bytes:
    """Serialize a query to its JSON request body."""

    try:
        return _dumps(query_payload(query))
    except (TypeError, ValueError) as exc:
        raise EncodeError(f"error encoding query: {exc}") from exc


def encode_response(response: Response) -> bytes:
    """Serialize a response to its JSON body."""

    try:
        return _dumps(response_payload(response))
    except (TypeError, ValueError) as exc:
        raise EncodeError(f"error encoding response {response!r} to JSON: {exc}") from exc


def decode_query(kind: QueryKind, body: Union[bytes, str]) -> Query:
    """Parse a request body into the query of the given kind."""

    try:
        if kind is QueryKind.SIMILARITY:
            return _similarity_query(SimilarityRequestBody.model_validate_json(body))
        if kind is QueryKind.BATCH_SIMILARITY:
            parsed = BatchSimilarityRequestBody.model_validate_json(body)
            return BatchSimilarityQuery(
                queries=tuple(_similarity_query(q) for q in parsed.queries or [])
            )
        parsed_top = TopNRequestBody.model_validate_json(body)
        return TopNQuery(expr=_expression(parsed_top.expr), n=parsed_top.n)
    except ValidationError as exc:
        raise DecodeError(f"error decoding query: {_summarize(exc)}") from exc


def decode_response(kind: QueryKind, body: Union[bytes, str]) -> Response:
    """Parse a response body for a query of the given kind."""

    try:
        if kind is QueryKind.SIMILARITY:
            return SimilarityResponse(value=SimilarityResponseBody.model_validate_json(body).value)
        if kind is QueryKind.BATCH_SIMILARITY:
            parsed = BatchSimilarityResponseBody.model_validate_json(body)
            return BatchSimilarityResponse(
                values=tuple(SimilarityResponse(value=v.value) for v in parsed.values or [])
            )
        parsed_top = TopNResponseBody.model_validate_json(body)
        return TopNResponse(
            matches=tuple(Match(term=m.term, score=m.score) for m in parsed_top.matches or [])
        )
    except ValidationError as exc:
        raise DecodeError(f"error unmarshalling result: {_summarize(exc)}") from exc


def _summarize(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())) or "body"
        parts.append(f"{location}: {error.get('msg')}")
    return "; ".join(parts)


__all__ = [
    "Query",
    "QueryKind",
    "Response",
    "decode_query",
    "decode_response",
    "encode_query",
    "encode_response",
    "query_kind",
    "query_payload",
    "response_payload",
]
