"""Tests for the numpy-backed word vector model."""
from __future__ import annotations

import io
import struct

import numpy as np
import pytest

from app.models.vector_model import VectorModel
from wordexpr.errors import ModelEvaluationError
from wordexpr.expressions import Expression
from wordexpr.queries import SimilarityQuery, TopNQuery


@pytest.fixture
def model() -> VectorModel:
    return VectorModel.from_mapping(
        {
            "king": [1.0, 1.0, 0.0],
            "man": [1.0, 0.0, 0.0],
            "woman": [0.0, 0.0, 1.0],
            "queen": [0.0, 1.0, 1.0],
            "apple": [0.0, -1.0, 0.0],
        }
    )


def test_rows_are_normalised(model):
    assert np.allclose(np.linalg.norm(model.vectors, axis=1), 1.0)
    assert model.size == 5
    assert model.dimensions == 3


def test_evaluate_unknown_word_raises(model):
    with pytest.raises(ModelEvaluationError) as excinfo:
        model.evaluate(Expression({"king": 1.0, "zebra": 1.0}))
    assert "zebra" in str(excinfo.value)


def test_king_minus_man_plus_woman_is_queen(model):
    expr = Expression({"king": 1.0, "man": -1.0, "woman": 1.0})
    response = SimilarityQuery(a=expr, b=Expression({"queen": 1.0})).evaluate(model)
    assert response.value > 0.9

    matches = TopNQuery(expr=expr, n=2).evaluate(model).matches
    assert matches[0].term == "queen"


def test_similarity_is_symmetric_and_zero_for_zero_vector(model):
    u = model.vector("king")
    v = model.vector("queen")
    assert model.similarity(u, v) == pytest.approx(model.similarity(v, u))
    assert model.similarity(u, np.zeros(3, dtype=np.float32)) == 0.0


def test_nearest_neighbors_sorted_descending(model):
    matches = model.nearest_neighbors(model.vector("king"), 5)
    scores = [m.score for m in matches]
    assert scores == sorted(scores, reverse=True)
    assert matches[0].term == "king"
    assert matches[-1].term == "apple"


@pytest.mark.parametrize("n,expected", [(0, 0), (-3, 0), (2, 2), (50, 5)])
def test_nearest_neighbors_count(model, n, expected):
    assert len(model.nearest_neighbors(model.vector("man"), n)) == expected


def test_nearest_neighbors_rejects_wrong_dimension(model):
    with pytest.raises(ModelEvaluationError):
        model.nearest_neighbors(np.ones(4, dtype=np.float32), 2)


def test_read_binary_format():
    buffer = io.BytesIO()
    buffer.write(b"2 3\n")
    buffer.write(b"alpha " + struct.pack("<3f", 1.0, 0.0, 0.0) + b"\n")
    buffer.write(b"beta " + struct.pack("<3f", 0.0, 2.0, 0.0) + b"\n")
    buffer.seek(0)

    loaded = VectorModel.read_binary(buffer)

    assert loaded.words == ["alpha", "beta"]
    assert np.allclose(loaded.vector("beta"), [0.0, 1.0, 0.0])


def test_read_binary_truncated_raises():
    buffer = io.BytesIO(b"1 3\nalpha " + struct.pack("<2f", 1.0, 0.0))
    with pytest.raises(ValueError):
        VectorModel.read_binary(buffer)


def test_load_text_format(tmp_path):
    path = tmp_path / "vectors.txt"
    path.write_text("2 2\nparis 1 0\nberlin 0 1\n", encoding="utf-8")

    loaded = VectorModel.load(path, fmt="text")

    assert "paris" in loaded
    assert loaded.nearest_neighbors(loaded.vector("berlin"), 1)[0].term == "berlin"


def test_load_rejects_unknown_format(tmp_path):
    path = tmp_path / "vectors.bin"
    path.write_bytes(b"")
    with pytest.raises(ValueError):
        VectorModel.load(path, fmt="glove")
