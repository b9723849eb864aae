"""In-memory word vector model backed by numpy."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO, Dict, List, Sequence, TextIO

import numpy as np

from wordexpr.errors import ModelEvaluationError
from wordexpr.expressions import Expression
from wordexpr.model import Match, Vector

logger = logging.getLogger(__name__)


class VectorModel:
    """Vocabulary plus a matrix of L2-normalised word vectors."""

    def __init__(self, words: Sequence[str], vectors: np.ndarray) -> None:
        matrix = np.asarray(vectors, dtype=np.float32)
        if matrix.ndim != 2:
            raise ValueError("vectors must be a 2-D matrix")
        if matrix.shape[0] != len(words):
            raise ValueError(
                f"got {len(words)} words but {matrix.shape[0]} vectors"
            )

        norms = np.linalg.norm(matrix, axis=1, keepdims=True)
        norms[norms == 0] = 1.0
        self.vectors = matrix / norms
        self.words: List[str] = list(words)
        self._index: Dict[str, int] = {word: idx for idx, word in enumerate(self.words)}

    @property
    def size(self) -> int:
        return len(self.words)

    @property
    def dimensions(self) -> int:
        return int(self.vectors.shape[1])

    def __contains__(self, word: object) -> bool:
        return word in self._index

    def vector(self, word: str) -> Vector:
        try:
            return self.vectors[self._index[word]]
        except KeyError as exc:
            raise ModelEvaluationError(f"word not found: {word!r}") from exc

    def evaluate(self, expression: Expression) -> Vector:
        result = np.zeros(self.dimensions, dtype=np.float32)
        for word, weight in expression.items():
            result += np.float32(weight) * self.vector(word)
        return result

    def similarity(self, u: Vector, v: Vector) -> float:
        """Cosine similarity; 0.0 when either vector has zero length."""

        denominator = float(np.linalg.norm(u) * np.linalg.norm(v))
        if denominator == 0.0:
            return 0.0
        return float(np.dot(u, v) / denominator)

    def nearest_neighbors(self, vector: Vector, n: int) -> List[Match]:
        if n <= 0 or not self.words:
            return []
        query = np.asarray(vector, dtype=np.float32)
        if query.shape != (self.dimensions,):
            raise ModelEvaluationError(
                f"vector has shape {query.shape}, expected ({self.dimensions},)"
            )
        norm = float(np.linalg.norm(query))
        if norm == 0.0:
            scores = np.zeros(self.size, dtype=np.float32)
        else:
            scores = self.vectors @ (query / norm)

        # Stable sort keeps vocabulary order among equal scores.
        order = np.argsort(-scores, kind="stable")[:n]
        return [Match(term=self.words[idx], score=float(scores[idx])) for idx in order]

    @classmethod
    def from_mapping(cls, vectors: Dict[str, Sequence[float]]) -> "VectorModel":
        words = list(vectors)
        return cls(words, np.array([vectors[word] for word in words], dtype=np.float32))

    @classmethod
    def read_binary(cls, handle: BinaryIO) -> "VectorModel":
        """Read the word2vec binary format.

        A ``"<count> <dim>\\n"`` header, then per word the word, a space, and
        ``dim`` little-endian float32 values, optionally followed by a newline.
        """

        header = handle.readline().decode("utf-8").split()
        if len(header) != 2:
            raise ValueError("invalid word2vec header")
        count, dim = int(header[0]), int(header[1])

        words: List[str] = []
        vectors = np.empty((count, dim), dtype=np.float32)
        for row in range(count):
            word = _read_word(handle)
            raw = handle.read(4 * dim)
            if len(raw) != 4 * dim:
                raise ValueError(f"unexpected end of file reading vector for {word!r}")
            vectors[row] = np.frombuffer(raw, dtype="<f4")
            words.append(word)
        return cls(words, vectors)

    @classmethod
    def read_text(cls, handle: TextIO) -> "VectorModel":
        """Read the word2vec text format (header line, then ``word v1 v2 ...``)."""

        header = handle.readline().split()
        if len(header) != 2:
            raise ValueError("invalid word2vec header")
        count, dim = int(header[0]), int(header[1])

        words: List[str] = []
        vectors = np.empty((count, dim), dtype=np.float32)
        for row in range(count):
            parts = handle.readline().rstrip("\n").split(" ")
            if len(parts) < dim + 1:
                raise ValueError(f"line {row + 2}: expected {dim} values")
            words.append(parts[0])
            vectors[row] = np.array(parts[1 : dim + 1], dtype=np.float32)
        return cls(words, vectors)

    @classmethod
    def load(cls, path: str | Path, fmt: str = "binary") -> "VectorModel":
        path = Path(path)
        logger.info("Loading %s word2vec model from %s", fmt, path)
        if fmt == "binary":
            with path.open("rb") as handle:
                model = cls.read_binary(handle)
        elif fmt == "text":
            with path.open("r", encoding="utf-8") as handle:
                model = cls.read_text(handle)
        else:
            raise ValueError(f"unsupported model format: {fmt}")
        logger.info("Loaded %d words with %d dimensions", model.size, model.dimensions)
        return model


def _read_word(handle: BinaryIO) -> str:
    buffer = bytearray()
    while True:
        char = handle.read(1)
        if not char:
            raise ValueError("unexpected end of file reading word")
        if char == b" ":
            break
        # Vectors may be followed by a newline before the next word.
        if char == b"\n" and not buffer:
            continue
        buffer += char
    return buffer.decode("utf-8", errors="replace")


__all__ = ["VectorModel"]
