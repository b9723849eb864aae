"""Query shapes, their responses, and how each query evaluates itself."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Protocol, Sequence, Tuple, TypeVar, runtime_checkable

from wordexpr.expressions import Expression
from wordexpr.model import Match, Model

R_co = TypeVar("R_co", covariant=True)


@runtime_checkable
class Evaluatable(Protocol[R_co]):
    """Anything that turns itself into a response given a model."""

    def evaluate(self, model: Model) -> R_co:
        ...


@dataclass(frozen=True, slots=True)
class SimilarityResponse:
    value: float


@dataclass(frozen=True, slots=True)
class BatchSimilarityResponse:
    values: Tuple[SimilarityResponse, ...] = ()


@dataclass(frozen=True, slots=True)
class TopNResponse:
    matches: Tuple[Match, ...] = ()


@dataclass(frozen=True, slots=True)
class SimilarityQuery:
    """Similarity between two expressions."""

    a: Expression = field(default_factory=Expression)
    b: Expression = field(default_factory=Expression)

    def evaluate(self, model: Model) -> SimilarityResponse:
        # ``b`` is never evaluated when ``a`` fails.
        u = self.a.evaluate(model)
        v = self.b.evaluate(model)
        return SimilarityResponse(value=float(model.similarity(u, v)))


@dataclass(frozen=True, slots=True)
class BatchSimilarityQuery:
    """Ordered batch of similarity queries, evaluated all-or-nothing.

    The first failing element aborts the whole batch; no partial values are
    returned alongside the error.
    """

    queries: Tuple[SimilarityQuery, ...] = ()

    @classmethod
    def from_pairs(cls, pairs: Sequence[Tuple[Expression, Expression]]) -> "BatchSimilarityQuery":
        return cls(queries=tuple(SimilarityQuery(a=a, b=b) for a, b in pairs))

    def evaluate(self, model: Model) -> BatchSimilarityResponse:
        values: List[SimilarityResponse] = []
        for query in self.queries:
            values.append(query.evaluate(model))
        return BatchSimilarityResponse(values=tuple(values))


@dataclass(frozen=True, slots=True)
class TopNQuery:
    """The ``n`` vocabulary terms most similar to an expression.

    ``n`` is passed to the model untouched; the model decides what
    non-positive or oversized values mean.
    """

    expr: Expression = field(default_factory=Expression)
    n: int = 0

    def evaluate(self, model: Model) -> TopNResponse:
        v = self.expr.evaluate(model)
        return TopNResponse(matches=tuple(model.nearest_neighbors(v, self.n)))


__all__ = [
    "Evaluatable",
    "SimilarityQuery",
    "SimilarityResponse",
    "BatchSimilarityQuery",
    "BatchSimilarityResponse",
    "TopNQuery",
    "TopNResponse",
]
