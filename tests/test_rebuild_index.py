"""
Maintenance CLI: build, query, stats and clear against a temporary store.
"""

import json

import pytest

from scripts.rebuild_index import main
from src.core.errors import EmbeddingError
from src.vector import service


@pytest.fixture
def cli_env(monkeypatch, tmp_path):
    """Point the shared store at a temporary file with the hash provider."""
    profile = tmp_path / "owner_profile.json"
    profile.write_text(json.dumps({
        "name": "Sam Rivera",
        "hobbies": ["hiking", "chess"],
        "education": {"degree": "Computer Science"},
    }), encoding="utf-8")

    monkeypatch.setenv("EMBED_PROVIDER", "hash")
    monkeypatch.setenv("EMBED_DIM", "64")
    monkeypatch.setenv("VECTOR_DB_PATH", str(tmp_path / "vectorDB.json"))
    service.set_store(None)
    yield {"profile": str(profile), "db": tmp_path / "vectorDB.json"}
    service.set_store(None)


def test_build_command(capfd, cli_env):
    assert main(["build", "--profile", cli_env["profile"]]) == 0

    captured = capfd.readouterr()
    assert "Starting vector store rebuild..." in captured.out
    assert "Loaded 4 chunks" in captured.out
    assert "✓ Indexed 4 records (0 skipped)" in captured.out
    assert cli_env["db"].exists()


def test_query_command(capfd, cli_env):
    main(["build", "--profile", cli_env["profile"]])
    service.set_store(None)
    capfd.readouterr()

    assert main(["query", "hobbies hiking chess", "--top-k", "1"]) == 0

    captured = capfd.readouterr()
    assert "1. [" in captured.out
    assert "(hobbies)" in captured.out


def test_query_without_store(capfd, cli_env):
    assert main(["query", "anything"]) == 1
    assert "ERROR: No vector store on disk" in capfd.readouterr().out


def test_stats_and_clear_commands(capfd, cli_env):
    main(["build", "--profile", cli_env["profile"]])
    capfd.readouterr()

    assert main(["stats"]) == 0
    out = capfd.readouterr().out
    assert "Records: 4" in out
    assert "full_profile" in out

    assert main(["clear"]) == 0
    assert not cli_env["db"].exists()


def test_missing_profile_reports_error(capfd, cli_env, tmp_path):
    assert main(["build", "--profile", str(tmp_path / "nope.json")]) == 1
    assert "ERROR: Profile file not found" in capfd.readouterr().out


def test_invalid_config_reports_error(capfd, cli_env, monkeypatch):
    monkeypatch.setenv("EMBED_PROVIDER", "unknown")
    assert main(["stats"]) == 1
    assert "ERROR: Invalid EMBED_PROVIDER" in capfd.readouterr().out


def test_failed_rebuild_keeps_previous_store(capfd, cli_env, monkeypatch):
    main(["build", "--profile", cli_env["profile"]])
    before = cli_env["db"].read_text(encoding="utf-8")

    def failing_embed_many(texts):
        raise EmbeddingError("provider down")

    monkeypatch.setattr(service.get_store().gate, "embed_many", failing_embed_many)
    capfd.readouterr()

    assert main(["build", "--profile", cli_env["profile"]]) == 1
    assert "ERROR: provider down" in capfd.readouterr().out
    assert cli_env["db"].read_text(encoding="utf-8") == before
    assert service.stats()["record_count"] == 4
