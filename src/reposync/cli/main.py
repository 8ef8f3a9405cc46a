"""reposync CLI entry point."""

from __future__ import annotations

import importlib.metadata
import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from reposync.cli.ask import ask_cmd
from reposync.cli.commits import commits_cmd
from reposync.cli.init import init_cmd
from reposync.cli.poll import poll_cmd
from reposync.cli.project import project_app
from reposync.cli.usage import usage_cmd


def _package_version() -> str:
    try:
        return importlib.metadata.version("reposync")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"reposync {_package_version()}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # LiteLLM and urllib3 are noisy at DEBUG.
    for name in ("LiteLLM", "httpx", "httpcore", "urllib3"):
        logging.getLogger(name).setLevel(logging.WARNING)


app = typer.Typer(
    name="reposync",
    help=(
        "reposync — ask questions about a GitHub repository.\n\n"
        "  reposync poll  Record and summarise the latest commits of a project.\n"
        "  reposync ask   Stream an answer grounded on the indexed source files."
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Debug logging to stderr."),
    ] = False,
) -> None:
    """reposync — ask questions about a GitHub repository."""
    _configure_logging(verbose)


app.command("init")(init_cmd)
app.command("poll")(poll_cmd)
app.command("ask")(ask_cmd)
app.command("commits")(commits_cmd)
app.command("usage")(usage_cmd)
app.add_typer(project_app, name="project")


@app.command("version")
def version_cmd() -> None:
    """Show the installed reposync version."""
    typer.echo(f"reposync {_package_version()}")


if __name__ == "__main__":
    app()
