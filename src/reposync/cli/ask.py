"""reposync ask — stream a grounded answer about a project's codebase."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from reposync.cli.errors import describe, err_generation, err_no_api_key
from reposync.cli.init import DEFAULT_DB, load_config_or_exit, open_existing_db
from reposync.errors import ReposyncError
from reposync.rag.llm_client import validate_api_key
from reposync.service import ask_question

console = Console()


def ask_cmd(
    project_id: Annotated[str, typer.Argument(help="Project ID (see: reposync project list).")],
    question: Annotated[str, typer.Argument(help="Free-text question about the codebase.")],
    db: Annotated[Path, typer.Option("--db", help="Path to the reposync database.")] = DEFAULT_DB,
    show_references: Annotated[
        bool,
        typer.Option("--references/--no-references", help="List the files the answer used."),
    ] = True,
) -> None:
    """Answer a question using the project's indexed source summaries."""
    cfg = load_config_or_exit()
    for model in (cfg.embedding.model, cfg.generation.model):
        try:
            validate_api_key(model)
        except EnvironmentError:
            console.print(err_no_api_key(model.split("/")[0] if "/" in model else "openai"))
            raise typer.Exit(1) from None

    conn = open_existing_db(db)
    try:
        try:
            answer = ask_question(conn, question, project_id, cfg)
        except ReposyncError as exc:
            console.print(describe(exc))
            raise typer.Exit(1) from None

        with answer.tokens as tokens:
            for fragment in tokens:
                console.print(fragment, end="", markup=False, highlight=False, soft_wrap=True)
        console.print()
    finally:
        conn.close()

    if show_references and answer.references:
        table = Table(title="References", show_header=True, header_style="bold")
        table.add_column("#", justify="right")
        table.add_column("File")
        table.add_column("Similarity", justify="right")
        for i, ref in enumerate(answer.references, start=1):
            table.add_row(str(i), ref.file_name, f"{ref.similarity:.3f}")
        console.print(table)

    if answer.tokens.error is not None:
        console.print(err_generation(str(answer.tokens.error)))
        raise typer.Exit(1)
