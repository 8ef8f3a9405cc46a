"""Tests for reposync commits."""

from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from reposync.cli.main import app
from reposync.db.connection import Database
from reposync.db.ledger import CommitLedger
from reposync.db.models import Commit
from reposync.db.repository import Repository
from reposync.db.schema import initialize

runner = CliRunner()


def _seed(db: Path) -> None:
    with Database(db) as conn:
        initialize(conn)
        Repository(conn).add_project("widgets", "https://github.com/acme/widgets", project_id="proj-1")
        CommitLedger(conn).append_batch(
            [
                Commit("proj-1", "1111111aaaa", "Old change", "Ada", "", "2024-01-01T00:00:00Z", "old summary"),
                Commit("proj-1", "2222222bbbb", "New [change]", "Bob", "", "2024-02-01T00:00:00Z", ""),
            ]
        )


def test_commits_lists_newest_first(tmp_path: Path) -> None:
    db = tmp_path / "t.db"
    _seed(db)
    result = runner.invoke(app, ["commits", "proj-1", "--db", str(db)])
    assert result.exit_code == 0, result.output
    assert result.output.index("2222222") < result.output.index("1111111")
    assert "New [change]" in result.output
    assert "(no summary)" in result.output
    assert "old summary" in result.output


def test_commits_limit(tmp_path: Path) -> None:
    db = tmp_path / "t.db"
    _seed(db)
    result = runner.invoke(app, ["commits", "proj-1", "-n", "1", "--db", str(db)])
    assert result.exit_code == 0, result.output
    assert "2222222" in result.output
    assert "1111111" not in result.output


def test_commits_empty(tmp_path: Path) -> None:
    db = tmp_path / "t.db"
    _seed(db)
    result = runner.invoke(app, ["commits", "other", "--db", str(db)])
    assert result.exit_code == 0
    assert "No commits recorded" in result.output
