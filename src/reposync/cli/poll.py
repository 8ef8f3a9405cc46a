"""reposync poll — ingest new commits for a project."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from reposync.cli.errors import describe, err_no_api_key
from reposync.cli.init import DEFAULT_DB, load_config_or_exit, open_existing_db
from reposync.errors import ReposyncError
from reposync.rag.llm_client import validate_api_key
from reposync.service import build_pipeline

console = Console()


def poll_cmd(
    project_id: Annotated[str, typer.Argument(help="Project ID (see: reposync project list).")],
    db: Annotated[Path, typer.Option("--db", help="Path to the reposync database.")] = DEFAULT_DB,
) -> None:
    """Fetch the latest commits from GitHub and summarise the new ones."""
    cfg = load_config_or_exit()
    model = cfg.generation.summary_model
    try:
        validate_api_key(model)
    except EnvironmentError:
        console.print(err_no_api_key(model.split("/")[0] if "/" in model else "openai"))
        raise typer.Exit(1) from None

    conn = open_existing_db(db)
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
            console=console,
        ) as prog:
            prog.add_task("Polling commits…", total=None)
            report = build_pipeline(conn, cfg).run(project_id)
    except ReposyncError as exc:
        console.print(describe(exc))
        raise typer.Exit(1) from None
    finally:
        conn.close()

    if not report.processed:
        console.print("[dim]↷ No new commits[/]")
        return

    console.print(f"[green]✓[/] {report.persisted} new commits recorded")
    if report.failed:
        console.print(
            f"  [yellow]⚠ {len(report.failed)} commits stored with an empty summary:[/] "
            + ", ".join(h[:7] for h in report.failed)
        )
