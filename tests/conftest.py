"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from reposync.db.connection import Database
from reposync.db.repository import Repository
from reposync.db.schema import initialize


@pytest.fixture
def tmp_db(tmp_path):
    """File-based DB in tmp_path with schema initialized, closed after test."""
    db = Database(tmp_path / ".reposync.db")
    conn = db.connect()
    initialize(conn)
    yield conn
    conn.close()


@pytest.fixture
def project(tmp_db):
    """A registered project pointing at a GitHub repository."""
    return Repository(tmp_db).add_project(
        "demo", github_url="https://github.com/acme/widgets", project_id="proj-1"
    )
