"""Commit ledger — append-only record of commits already processed per project.

Uniqueness of (project_id, commit_hash) is enforced by the table constraint;
batch appends skip rows that a concurrent poll already wrote, so the
constraint is the only guard needed against duplicate ingestion.
"""

from __future__ import annotations

import sqlite3

from reposync.db.models import Commit
from reposync.errors import StorageError

_INSERT_COMMIT = """
INSERT INTO commits (
    project_id, commit_hash, message, author_name,
    author_avatar_url, committed_at, summary
)
VALUES (?, ?, ?, ?, ?, ?, ?)
ON CONFLICT (project_id, commit_hash) DO NOTHING
"""


class CommitLedger:
    """Read and append Commit rows for any project."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def existing_hashes(self, project_id: str) -> set[str]:
        """Return every commit hash already recorded for *project_id*."""
        try:
            rows = self._conn.execute(
                "SELECT commit_hash FROM commits WHERE project_id = ?", (project_id,)
            ).fetchall()
        except sqlite3.Error as exc:
            raise StorageError(f"Could not read commit ledger: {exc}") from exc
        return {r["commit_hash"] for r in rows}

    def append_batch(self, commits: list[Commit]) -> int:
        """Insert *commits* in one transaction. Returns the number of new rows.

        All-or-nothing: any sqlite error rolls back the whole batch and is
        raised as StorageError. Hashes already present are skipped silently.
        """
        if not commits:
            return 0
        rows = [
            (
                c.project_id,
                c.commit_hash,
                c.message,
                c.author_name,
                c.author_avatar_url,
                c.committed_at,
                c.summary,
            )
            for c in commits
        ]
        before = self._conn.total_changes
        try:
            with self._conn:
                self._conn.executemany(_INSERT_COMMIT, rows)
        except sqlite3.Error as exc:
            raise StorageError(f"Could not persist {len(rows)} commits: {exc}") from exc
        return self._conn.total_changes - before

    def list_commits(self, project_id: str, limit: int | None = None) -> list[Commit]:
        """Return commits for *project_id*, newest commit date first."""
        sql = """
            SELECT project_id, commit_hash, message, author_name, author_avatar_url,
                   committed_at, summary, created_at
            FROM commits
            WHERE project_id = ?
            ORDER BY committed_at DESC, rowid DESC
        """
        params: tuple = (project_id,)
        if limit is not None:
            sql += " LIMIT ?"
            params = (project_id, int(limit))
        try:
            rows = self._conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise StorageError(f"Could not read commit ledger: {exc}") from exc
        return [_row_to_commit(r) for r in rows]

    def count(self, project_id: str) -> int:
        """Number of commits recorded for *project_id* (shown by `reposync usage`)."""
        return self._conn.execute(
            "SELECT COUNT(*) FROM commits WHERE project_id = ?", (project_id,)
        ).fetchone()[0]


def _row_to_commit(row: sqlite3.Row) -> Commit:
    return Commit(
        project_id=row["project_id"],
        commit_hash=row["commit_hash"],
        message=row["message"],
        author_name=row["author_name"],
        author_avatar_url=row["author_avatar_url"],
        committed_at=row["committed_at"],
        summary=row["summary"],
        created_at=row["created_at"],
    )
