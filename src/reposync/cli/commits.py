"""reposync commits — show the recorded commit log of a project."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from reposync.cli.init import DEFAULT_DB, open_existing_db
from reposync.db.ledger import CommitLedger

console = Console()


def commits_cmd(
    project_id: Annotated[str, typer.Argument(help="Project ID (see: reposync project list).")],
    limit: Annotated[int, typer.Option("--limit", "-n", help="Newest N commits.")] = 10,
    db: Annotated[Path, typer.Option("--db", help="Path to the reposync database.")] = DEFAULT_DB,
) -> None:
    """List ingested commits, newest first, with their summaries."""
    conn = open_existing_db(db)
    try:
        commits = CommitLedger(conn).list_commits(project_id, limit=limit)
    finally:
        conn.close()

    if not commits:
        console.print(
            "[yellow]No commits recorded for this project.[/]\n"
            f"  Run:  reposync poll {project_id}"
        )
        raise typer.Exit(0)

    table = Table(title="Commit log", show_header=True, header_style="bold", show_lines=True)
    table.add_column("Commit", style="dim")
    table.add_column("Author")
    table.add_column("Date")
    table.add_column("Message / summary")
    for c in commits:
        first_line = c.message.splitlines()[0] if c.message else ""
        summary = escape(c.summary) if c.summary else "[dim](no summary)[/]"
        table.add_row(
            c.commit_hash[:7],
            escape(c.author_name),
            c.committed_at[:10],
            f"[bold]{escape(first_line)}[/]\n{summary}",
        )
    console.print(table)
