"""Sparse weighted combinations of vocabulary terms."""
from __future__ import annotations

import re
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, Mapping

from wordexpr.errors import DecodeError, EmptyExpressionError

if TYPE_CHECKING:  # pragma: no cover
    from wordexpr.model import Model, Vector

_TOKEN_SPLIT = re.compile(r"[\s,]+")


class Expression:
    """A linear expression which a ``Model`` can evaluate to a vector.

    Terms map to signed weights. Adding a term that is already present sums
    the weights; nothing else mutates an expression.
    """

    __slots__ = ("_terms",)

    def __init__(self, terms: Mapping[str, float] | None = None) -> None:
        self._terms: Dict[str, float] = {}
        for term, weight in (terms or {}).items():
            self.accumulate(weight, term)

    @classmethod
    def from_mapping(cls, terms: Mapping[str, float]) -> "Expression":
        return cls(terms)

    @classmethod
    def parse(cls, text: str) -> "Expression":
        """Build an expression from tokens like ``king -man +woman 0.5*queen``."""

        expression = cls()
        for token in _TOKEN_SPLIT.split(text.strip()):
            if not token:
                continue
            sign = 1.0
            if token[0] in "+-":
                sign = -1.0 if token[0] == "-" else 1.0
                token = token[1:]
            weight = 1.0
            if "*" in token:
                raw_weight, token = token.split("*", 1)
                try:
                    weight = float(raw_weight)
                except ValueError as exc:
                    raise DecodeError(f"invalid weight {raw_weight!r} in expression") from exc
            if not token:
                raise DecodeError(f"missing term in expression {text!r}")
            expression.accumulate(sign * weight, token)
        return expression

    def accumulate(self, weight: float, term: str) -> None:
        """Add ``weight`` to the coefficient of ``term`` (0 if absent)."""

        self._terms[term] = self._terms.get(term, 0.0) + float(weight)

    def accumulate_all(self, weight: float, terms: Iterable[str]) -> None:
        """Accumulate the same weight for every term in ``terms``."""

        for term in terms:
            self.accumulate(weight, term)

    def coefficient(self, term: str) -> float:
        return self._terms.get(term, 0.0)

    def evaluate(self, model: "Model") -> "Vector":
        """Evaluate the expression to a vector using ``model``."""

        if not self._terms:
            raise EmptyExpressionError()
        return model.evaluate(self)

    def to_dict(self) -> Dict[str, float]:
        return dict(self._terms)

    def items(self):
        return self._terms.items()

    def __len__(self) -> int:
        return len(self._terms)

    def __iter__(self) -> Iterator[str]:
        return iter(self._terms)

    def __contains__(self, term: object) -> bool:
        return term in self._terms

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Expression):
            return NotImplemented
        return self._terms == other._terms

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Expression({self._terms!r})"


__all__ = ["Expression"]
