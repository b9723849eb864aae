"""Tests for the wordexpr CLI."""
from __future__ import annotations

import pytest

from wordexpr import cli as cli_module
from wordexpr.errors import RemoteQueryError
from wordexpr.model import Match


class DummyModelClient:
    instances: list["DummyModelClient"] = []

    def __init__(self, base_url, timeout=30.0, **kwargs):
        self.base_url = base_url
        self.timeout = timeout
        self.calls = []
        DummyModelClient.instances.append(self)

    def similarity(self, a, b):
        self.calls.append(("similarity", a.to_dict(), b.to_dict()))
        return 0.87

    def batch_similarity(self, pairs):
        self.calls.append(("batch_similarity", [(a.to_dict(), b.to_dict()) for a, b in pairs]))
        return [0.1 * (idx + 1) for idx in range(len(pairs))]

    def most_similar(self, expr, n):
        self.calls.append(("most_similar", expr.to_dict(), n))
        return [Match("queen", 0.9), Match("princess", 0.85)][:n]


@pytest.fixture(autouse=True)
def fake_client(monkeypatch):
    DummyModelClient.instances = []
    monkeypatch.setattr(cli_module, "ModelClient", DummyModelClient)


def test_cli_sim(capsys):
    exit_code = cli_module.main(
        ["sim", "king -man +woman", "queen", "--api", "http://localhost:9999", "--timeout", "5"]
    )

    assert exit_code == 0
    client = DummyModelClient.instances[0]
    assert client.base_url == "http://localhost:9999"
    assert client.timeout == 5.0
    assert client.calls == [
        ("similarity", {"king": 1.0, "man": -1.0, "woman": 1.0}, {"queen": 1.0})
    ]
    assert capsys.readouterr().out.strip() == "0.870000"


def test_cli_sim_multi(capsys):
    exit_code = cli_module.main(["sim-multi", "--pair", "king|queen", "-p", "man|0.5*woman"])

    assert exit_code == 0
    assert DummyModelClient.instances[0].calls == [
        ("batch_similarity", [({"king": 1.0}, {"queen": 1.0}), ({"man": 1.0}, {"woman": 0.5})])
    ]
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines == ["0.100000\tking|queen", "0.200000\tman|0.5*woman"]


def test_cli_most_sim(capsys):
    exit_code = cli_module.main(["most-sim", "king", "-n", "2"])

    assert exit_code == 0
    assert capsys.readouterr().out.splitlines() == ["0.900000\tqueen", "0.850000\tprincess"]


def test_cli_bad_pair_fails(capsys):
    exit_code = cli_module.main(["sim-multi", "--pair", "no-separator"])

    assert exit_code == 1
    assert "Query failed" in capsys.readouterr().out


def test_cli_reports_remote_errors(monkeypatch, capsys):
    def failing(self, a, b):
        raise RemoteQueryError(422, "error evaluating query: word not found: 'zzz'")

    monkeypatch.setattr(DummyModelClient, "similarity", failing)

    exit_code = cli_module.main(["sim", "zzz", "queen"])

    assert exit_code == 1
    assert "word not found" in capsys.readouterr().out


def test_cli_serve_applies_overrides_to_shared_settings(monkeypatch):
    import uvicorn

    from app.config import settings
    from app.main import app

    monkeypatch.setattr(settings, "model_path", None)
    monkeypatch.setattr(settings, "model_format", "binary")
    runs = []
    monkeypatch.setattr(uvicorn, "run", lambda target, **kwargs: runs.append((target, kwargs)))

    exit_code = cli_module.main(
        ["serve", "--model", "/data/vectors.txt", "--format", "text", "--port", "9000"]
    )

    assert exit_code == 0
    assert settings.model_path == "/data/vectors.txt"
    assert settings.model_format == "text"
    target, kwargs = runs[0]
    assert target is app
    assert kwargs["port"] == 9000
    assert kwargs["host"] == settings.host
