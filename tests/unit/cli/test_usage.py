"""Tests for reposync usage."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from reposync.cli.main import app
from reposync.db.connection import Database
from reposync.db.index import SemanticIndex
from reposync.db.ledger import CommitLedger
from reposync.db.models import Commit, IndexedDocument
from reposync.db.repository import Repository
from reposync.db.schema import initialize

runner = CliRunner()


@pytest.fixture
def db(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "t.db"
    with Database(path) as conn:
        initialize(conn)
        repo = Repository(conn)
        repo.add_project("widgets", project_id="proj-1")
        for _ in range(3):
            repo.record_usage("proj-1")
    return path


def test_usage_shows_requests_and_remaining(db: Path) -> None:
    result = runner.invoke(app, ["usage", "proj-1", "--db", str(db)])
    assert result.exit_code == 0, result.output
    assert "3 / 1000" in result.output
    assert "997" in result.output


def test_usage_respects_configured_limit(db: Path, tmp_path: Path) -> None:
    (tmp_path / "reposync.yaml").write_text("usage:\n  request_limit: 2\n", encoding="utf-8")
    result = runner.invoke(app, ["usage", "proj-1", "--db", str(db)])
    assert result.exit_code == 0, result.output
    assert "3 / 2" in result.output
    assert "Remaining:  0" in result.output


def test_usage_invalid_config(db: Path, tmp_path: Path) -> None:
    (tmp_path / "reposync.yaml").write_text("ingest:\n  max_workers: 0\n", encoding="utf-8")
    result = runner.invoke(app, ["usage", "proj-1", "--db", str(db)])
    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_usage_shows_ledger_and_index_sizes(db: Path) -> None:
    with Database(db) as conn:
        CommitLedger(conn).append_batch([Commit("proj-1", "abc1234", committed_at="2024-01-01T00:00:00Z")])
        index = SemanticIndex(conn)
        index.upsert(IndexedDocument("proj-1", "a.py", "a = 1", "Sets a.", [1.0] + [0.0] * 767))
        index.upsert(IndexedDocument("proj-1", "b.py", "b = 2", "Pending."))
    result = runner.invoke(app, ["usage", "proj-1", "--db", str(db)])
    assert result.exit_code == 0, result.output
    assert "Requests (all time):  3" in result.output
    assert "Commits recorded:  1" in result.output
    assert "Indexed files:  2 (1 embedded)" in result.output
