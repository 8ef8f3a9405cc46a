"""Forward-only migration runner for the reposync schema."""

from __future__ import annotations

import sqlite3

# schema_version is the bootstrap table, created before migrations run.
_CREATE_SCHEMA_VERSION = """
CREATE TABLE IF NOT EXISTS schema_version (
    version     INTEGER NOT NULL,
    applied_at  DATETIME NOT NULL DEFAULT (datetime('now'))
)
"""

_V1_SQL = """
CREATE TABLE IF NOT EXISTS projects (
    id              TEXT PRIMARY KEY,
    name            TEXT NOT NULL,
    github_url      TEXT,
    created_at      DATETIME NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS commits (
    project_id          TEXT NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
    commit_hash         TEXT NOT NULL,
    message             TEXT NOT NULL DEFAULT '',
    author_name         TEXT NOT NULL DEFAULT '',
    author_avatar_url   TEXT NOT NULL DEFAULT '',
    committed_at        TEXT NOT NULL DEFAULT '',
    summary             TEXT NOT NULL DEFAULT '',
    created_at          DATETIME NOT NULL DEFAULT (datetime('now')),
    UNIQUE (project_id, commit_hash)
);

CREATE INDEX IF NOT EXISTS idx_commits_project_date
    ON commits (project_id, committed_at);

CREATE TABLE IF NOT EXISTS source_code_embeddings (
    project_id          TEXT NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
    file_name           TEXT NOT NULL,
    source_code         TEXT NOT NULL,
    summary             TEXT NOT NULL DEFAULT '',
    summary_embedding   BLOB,
    updated_at          DATETIME NOT NULL DEFAULT (datetime('now')),
    UNIQUE (project_id, file_name)
);

CREATE TABLE IF NOT EXISTS usage_events (
    project_id      TEXT NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
    request_count   INTEGER NOT NULL DEFAULT 1,
    created_at      DATETIME NOT NULL DEFAULT (datetime('now'))
);

CREATE INDEX IF NOT EXISTS idx_usage_project_time
    ON usage_events (project_id, created_at);
"""

# Append-only. Each entry: (version: int, sql: str).
# executescript() issues an implicit COMMIT before running.
MIGRATIONS: list[tuple[int, str]] = [
    (1, _V1_SQL),
]


def run_migrations(conn: sqlite3.Connection) -> None:
    """Apply all pending migrations in ascending version order.

    Idempotent: safe to call on a database at any version.
    """
    conn.execute(_CREATE_SCHEMA_VERSION)
    conn.commit()

    row = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
    current = row[0] if row[0] is not None else 0

    for version, sql in MIGRATIONS:
        if version > current:
            conn.executescript(sql)
            conn.execute(
                "INSERT INTO schema_version (version) VALUES (?)", (version,)
            )
            conn.commit()
