"""Linear word vector expressions and the similarity query protocol."""
from wordexpr.client import AsyncModelClient, ModelClient  # noqa: F401
from wordexpr.errors import (  # noqa: F401
    DecodeError,
    EmptyExpressionError,
    EncodeError,
    ModelEvaluationError,
    RemoteQueryError,
    WordExprError,
)
from wordexpr.expressions import Expression  # noqa: F401
from wordexpr.model import Match, Model  # noqa: F401
from wordexpr.queries import (  # noqa: F401
    BatchSimilarityQuery,
    BatchSimilarityResponse,
    Evaluatable,
    SimilarityQuery,
    SimilarityResponse,
    TopNQuery,
    TopNResponse,
)
