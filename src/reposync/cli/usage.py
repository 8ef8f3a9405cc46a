"""reposync usage — request usage of a project alongside its ledger and index sizes."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel

from reposync.cli.errors import describe
from reposync.cli.init import DEFAULT_DB, load_config_or_exit, open_existing_db
from reposync.db.index import SemanticIndex
from reposync.db.ledger import CommitLedger
from reposync.db.repository import Repository
from reposync.errors import ReposyncError

console = Console()


def usage_cmd(
    project_id: Annotated[str, typer.Argument(help="Project ID (see: reposync project list).")],
    db: Annotated[Path, typer.Option("--db", help="Path to the reposync database.")] = DEFAULT_DB,
) -> None:
    """Show API requests against the configured limit, plus ledger and index sizes."""
    cfg = load_config_or_exit()
    conn = open_existing_db(db)
    try:
        repo = Repository(conn)
        summary = repo.usage_summary(
            project_id,
            window_days=cfg.usage.window_days,
            request_limit=cfg.usage.request_limit,
        )
        total_requests = repo.count_usage_events(project_id)
        commit_count = CommitLedger(conn).count(project_id)
        index = SemanticIndex(conn, dimensions=cfg.embedding.dimensions)
        indexed = index.count(project_id)
        embedded = index.count(project_id, embedded_only=True)
    except ReposyncError as exc:
        console.print(describe(exc))
        raise typer.Exit(1) from None
    finally:
        conn.close()

    colour = "red" if summary.remaining == 0 else "green"
    lines = [
        f"Requests (last {summary.window_days} days):  [bold]{summary.api_requests}[/]"
        f" / {summary.request_limit}",
        f"Remaining:  [{colour}]{summary.remaining}[/]",
        f"Requests (all time):  {total_requests}",
        f"Commits recorded:  {commit_count}",
        f"Indexed files:  {indexed} ({embedded} embedded)",
    ]
    console.print(Panel("\n".join(lines), title="[bold]Usage[/]", expand=False))
