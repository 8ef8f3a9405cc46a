"""Project registry and usage meter.

The ingestion pipeline and the answerer only read projects; usage events are
appended once per question and summarised for the usage report.
"""

from __future__ import annotations

import sqlite3
import uuid

from reposync.db.models import Project, UsageSummary
from reposync.errors import StorageError


class Repository:
    """Data access for projects and usage events.

    Wraps an open sqlite3.Connection owned by the caller.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def add_project(
        self, name: str, github_url: str | None = None, project_id: str | None = None
    ) -> Project:
        """Register a project and return it.

        Args:
            name: Human-readable project name.
            github_url: Repository URL, e.g. ``https://github.com/owner/repo``.
            project_id: Explicit ID; a UUID4 is generated when omitted.
        """
        pid = project_id or str(uuid.uuid4())
        try:
            with self._conn:
                self._conn.execute(
                    "INSERT INTO projects (id, name, github_url) VALUES (?, ?, ?)",
                    (pid, name, github_url),
                )
        except sqlite3.Error as exc:
            raise StorageError(f"Could not create project '{name}': {exc}") from exc
        project = self.get_project(pid)
        if project is None:
            raise StorageError(f"Project '{name}' was not stored.")
        return project

    def get_project(self, project_id: str) -> Project | None:
        """Return a project by ID, or None if not found."""
        try:
            row = self._conn.execute(
                "SELECT id, name, github_url, created_at FROM projects WHERE id = ?",
                (project_id,),
            ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Could not read project '{project_id}': {exc}") from exc
        return _row_to_project(row) if row else None

    def list_projects(self) -> list[Project]:
        """Return all projects, oldest first."""
        try:
            rows = self._conn.execute(
                "SELECT id, name, github_url, created_at FROM projects ORDER BY created_at, rowid"
            ).fetchall()
        except sqlite3.Error as exc:
            raise StorageError(f"Could not list projects: {exc}") from exc
        return [_row_to_project(r) for r in rows]

    # ------------------------------------------------------------------
    # Usage
    # ------------------------------------------------------------------

    def record_usage(self, project_id: str, request_count: int = 1) -> None:
        """Append one usage event for *project_id*."""
        try:
            with self._conn:
                self._conn.execute(
                    "INSERT INTO usage_events (project_id, request_count) VALUES (?, ?)",
                    (project_id, request_count),
                )
        except sqlite3.IntegrityError as exc:
            raise StorageError(f"Unknown project '{project_id}'") from exc
        except sqlite3.Error as exc:
            raise StorageError(f"Could not record usage for '{project_id}': {exc}") from exc

    def count_usage_events(self, project_id: str) -> int:
        """Return the total number of usage rows ever recorded for *project_id*.

        Shown by `reposync usage` next to the windowed count.
        """
        return self._conn.execute(
            "SELECT COUNT(*) FROM usage_events WHERE project_id = ?", (project_id,)
        ).fetchone()[0]

    def usage_summary(
        self, project_id: str, window_days: int = 30, request_limit: int = 1000
    ) -> UsageSummary:
        """Sum request counts for *project_id* over the last *window_days* days."""
        try:
            row = self._conn.execute(
                """
                SELECT COALESCE(SUM(request_count), 0)
                FROM usage_events
                WHERE project_id = ? AND created_at >= datetime('now', ?)
                """,
                (project_id, f"-{int(window_days)} days"),
            ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Could not read usage for '{project_id}': {exc}") from exc
        return UsageSummary(
            project_id=project_id,
            api_requests=int(row[0]),
            request_limit=request_limit,
            window_days=window_days,
        )


def _row_to_project(row: sqlite3.Row) -> Project:
    return Project(
        id=row["id"],
        name=row["name"],
        github_url=row["github_url"],
        created_at=row["created_at"],
    )
