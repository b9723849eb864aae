"""Error taxonomy shared by the query protocol, the service and the client."""
from __future__ import annotations


class WordExprError(Exception):
    """Base class for every failure raised by wordexpr."""


class DecodeError(WordExprError):
    """A request or response body could not be turned into a query/response."""


class EmptyExpressionError(WordExprError):
    """An expression with zero terms was submitted for evaluation."""

    def __init__(self, message: str = "must specify at least one word to evaluate") -> None:
        super().__init__(message)


class ModelEvaluationError(WordExprError):
    """The embedding model could not produce a result (unknown term, etc.)."""


class EncodeError(WordExprError):
    """A successful result could not be serialized."""


class RemoteQueryError(WordExprError):
    """The query service answered with a non-200 status."""

    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(f"query service returned {status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


__all__ = [
    "WordExprError",
    "DecodeError",
    "EmptyExpressionError",
    "ModelEvaluationError",
    "EncodeError",
    "RemoteQueryError",
]
