"""reposync project commands.

Commands:
  reposync project add <name> --github-url URL   — register a project
  reposync project list                          — show registered projects
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from reposync.cli.errors import describe, err_invalid_repo_url
from reposync.cli.init import DEFAULT_DB, open_db, open_existing_db
from reposync.db.repository import Repository
from reposync.errors import InputError, ReposyncError
from reposync.ingest.github import parse_repo_url

console = Console()

project_app = typer.Typer(
    name="project",
    help="Manage projects (add, list).",
    add_completion=False,
)


@project_app.command("add")
def project_add_cmd(
    name: Annotated[str, typer.Argument(help="Human-readable project name.")],
    github_url: Annotated[
        str | None,
        typer.Option("--github-url", "-u", help="https://github.com/<owner>/<repo>"),
    ] = None,
    db: Annotated[Path, typer.Option("--db", help="Path to the reposync database.")] = DEFAULT_DB,
) -> None:
    """Register a project and print its ID."""
    if github_url:
        try:
            parse_repo_url(github_url)
        except InputError as exc:
            console.print(err_invalid_repo_url(str(exc)))
            raise typer.Exit(1) from None

    conn = open_db(db)
    try:
        project = Repository(conn).add_project(name, github_url=github_url)
    except ReposyncError as exc:
        console.print(describe(exc))
        raise typer.Exit(1) from None
    finally:
        conn.close()

    console.print(f"[green]✓[/] Project [bold]{project.name}[/] registered")
    console.print(f"  ID: {project.id}")


@project_app.command("list")
def project_list_cmd(
    db: Annotated[Path, typer.Option("--db", help="Path to the reposync database.")] = DEFAULT_DB,
) -> None:
    """List registered projects."""
    conn = open_existing_db(db)
    try:
        projects = Repository(conn).list_projects()
    finally:
        conn.close()

    if not projects:
        console.print(
            "[yellow]No projects registered.[/]\n"
            "  Run:  reposync project add <name> --github-url https://github.com/<owner>/<repo>"
        )
        raise typer.Exit(0)

    table = Table(title="Projects", show_header=True, header_style="bold")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("GitHub URL")
    for p in projects:
        table.add_row(p.id, p.name, p.github_url or "[yellow](none)[/]")
    console.print(table)
