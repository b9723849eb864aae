"""HTTP clients for the expression query service."""
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple, Type, TypeVar

import httpx

from wordexpr.errors import DecodeError, RemoteQueryError
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
from wordexpr.wire import Query, QueryKind, Response, decode_response, encode_query, query_kind

ExpressionPair = Tuple[Expression, Expression]
R = TypeVar("R", SimilarityResponse, BatchSimilarityResponse, TopNResponse)

_HEADERS = {"Content-Type": "application/json"}


def _expect(response: Response, expected: Type[R]) -> R:
    if not isinstance(response, expected):
        raise DecodeError(
            f"expected {expected.__name__}, got {type(response).__name__}"
        )
    return response


def _detail(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text
    if isinstance(payload, dict) and "detail" in payload:
        return str(payload["detail"])
    return response.text


class _QueryClientBase:
    def __init__(self, base_url: str, timeout: float = 30.0) -> None:
        self.base_url = str(base_url).rstrip("/")
        self.timeout = timeout

    def _url(self, kind: QueryKind) -> str:
        return f"{self.base_url}{kind.path}"

    @staticmethod
    def _decode(kind: QueryKind, response: httpx.Response) -> Response:
        if response.status_code != 200:
            raise RemoteQueryError(response.status_code, _detail(response))
        return decode_response(kind, response.content)


class ModelClient(_QueryClientBase):
    """Blocking client; pass ``client`` to reuse a configured ``httpx.Client``."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        *,
        client: Optional[httpx.Client] = None,
    ) -> None:
        super().__init__(base_url, timeout)
        self._client = client

    def query(self, query: Query) -> Response:
        kind = query_kind(query)
        body = encode_query(query)
        if self._client is not None:
            response = self._client.post(self._url(kind), content=body, headers=_HEADERS)
        else:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(self._url(kind), content=body, headers=_HEADERS)
        return self._decode(kind, response)

    def similarity(self, a: Expression, b: Expression) -> float:
        response = self.query(SimilarityQuery(a=a, b=b))
        return _expect(response, SimilarityResponse).value

    def batch_similarity(self, pairs: Sequence[ExpressionPair]) -> List[float]:
        response = self.query(BatchSimilarityQuery.from_pairs(pairs))
        return [item.value for item in _expect(response, BatchSimilarityResponse).values]

    def most_similar(self, expr: Expression, n: int) -> List[Match]:
        response = self.query(TopNQuery(expr=expr, n=n))
        return list(_expect(response, TopNResponse).matches)


class AsyncModelClient(_QueryClientBase):
    """Async counterpart of ``ModelClient`` built on ``httpx.AsyncClient``."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        *,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(base_url, timeout)
        self._client = client

    async def query(self, query: Query) -> Response:
        kind = query_kind(query)
        body = encode_query(query)
        if self._client is not None:
            response = await self._client.post(self._url(kind), content=body, headers=_HEADERS)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self._url(kind), content=body, headers=_HEADERS)
        return self._decode(kind, response)

    async def similarity(self, a: Expression, b: Expression) -> float:
        response = await self.query(SimilarityQuery(a=a, b=b))
        return _expect(response, SimilarityResponse).value

    async def batch_similarity(self, pairs: Sequence[ExpressionPair]) -> List[float]:
        response = await self.query(BatchSimilarityQuery.from_pairs(pairs))
        return [item.value for item in _expect(response, BatchSimilarityResponse).values]

    async def most_similar(self, expr: Expression, n: int) -> List[Match]:
        response = await self.query(TopNQuery(expr=expr, n=n))
        return list(_expect(response, TopNResponse).matches)


__all__ = ["AsyncModelClient", "ModelClient"]
