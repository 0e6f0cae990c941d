"""Tests for the noesis command line."""

import json

import pytest

import noesis.kernel.builder as builder_module
import noesis.main as main_module
from conftest import FakeCompletionBackend, FakeEmbeddingBackend
from noesis.main import EXIT_CONFIG, build_parser, main


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    """Keep the CLI from replacing pytest's log handlers."""
    monkeypatch.setattr(main_module, "setup_logging", lambda level=None: None)


@pytest.fixture
def fake_backends(monkeypatch):
    monkeypatch.setattr(
        builder_module, "build_completion_backend", lambda options: FakeCompletionBackend()
    )
    monkeypatch.setattr(
        builder_module, "build_embedding_backend", lambda options: FakeEmbeddingBackend()
    )


def _write_config(tmp_path, memory_store):
    path = tmp_path / "noesis.json"
    path.write_text(
        json.dumps(
            {
                "aiService": {"serviceType": "OpenAI", "apiKey": "sk-test"},
                "memoryStore": memory_store,
            }
        )
    )
    return str(path)


def test_parser_requires_a_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_check_prints_json(tmp_path, capsys, fake_backends):
    path = _write_config(tmp_path, {"storeType": "Volatile"})
    assert main(["--config", path, "check", "--json"]) == 0

    summary = json.loads(capsys.readouterr().out)
    assert "VolatileMemoryStore" in summary["store"]
    assert "today" in summary["skills"]["time"]
    assert summary["failed_skills"] == {}


def test_configuration_error_exits_with_status_2(tmp_path, capsys):
    path = _write_config(tmp_path, {"storeType": "Qdrant", "qdrant": None})
    assert main(["--config", path, "check"]) == EXIT_CONFIG
    assert "Qdrant" in capsys.readouterr().err


def test_ask_prints_completion(tmp_path, capsys, fake_backends):
    path = _write_config(tmp_path, {"storeType": "Volatile"})
    assert main(["--config", path, "ask", "hello"]) == 0
    assert capsys.readouterr().out.strip() == "echo: hello"


def test_run_unknown_skill_exits_1(tmp_path, capsys, fake_backends):
    path = _write_config(tmp_path, {"storeType": "Volatile"})
    assert main(["--config", path, "run", "nope", "fn"]) == 1
    assert "Skill not found: nope" in capsys.readouterr().err


def test_run_with_vars(tmp_path, capsys, fake_backends):
    path = _write_config(tmp_path, {"storeType": "Volatile"})
    assert main(["--config", path, "run", "time", "days_ago", "--var", "input=0"]) == 0
    assert capsys.readouterr().out.strip()


def test_bad_var_exits_1(tmp_path, capsys, fake_backends):
    path = _write_config(tmp_path, {"storeType": "Volatile"})
    assert main(["--config", path, "run", "time", "today", "--var", "novalue"]) == 1
    assert "NAME=VALUE" in capsys.readouterr().err
