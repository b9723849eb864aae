"""Contract the query protocol requires from an embedding model."""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Protocol, runtime_checkable

import numpy as np

if TYPE_CHECKING:  # pragma: no cover
    from wordexpr.expressions import Expression

Vector = np.ndarray


@dataclass(frozen=True, slots=True)
class Match:
    """One nearest-neighbour hit: a vocabulary term and its similarity score."""

    term: str
    score: float


@runtime_checkable
class Model(Protocol):
    """Embedding space used to evaluate expressions.

    Implementations raise ``ModelEvaluationError`` from ``evaluate`` and
    ``nearest_neighbors`` when they cannot produce a result.
    """

    def evaluate(self, expression: "Expression") -> Vector:
        ...

    def similarity(self, u: Vector, v: Vector) -> float:
        ...

    def nearest_neighbors(self, vector: Vector, n: int) -> List[Match]:
        ...


__all__ = ["Match", "Model", "Vector"]
