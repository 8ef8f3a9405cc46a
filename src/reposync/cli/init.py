"""reposync init — create or migrate the database and the global config."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from reposync.cli.errors import err_config, err_no_db
from reposync.config import ConfigError, ReposyncConfig, ensure_global_config, load_config
from reposync.db.connection import Database
from reposync.db.schema import initialize

console = Console()

DEFAULT_DB = Path(".reposync.db")


def init_cmd(
    db: Annotated[
        Path,
        typer.Option("--db", help="Path to the reposync database (created if missing)."),
    ] = DEFAULT_DB,
    global_config: Annotated[
        bool,
        typer.Option(
            "--global-config/--no-global-config",
            help="Also create ~/.reposync/config.yaml with model defaults.",
        ),
    ] = False,
) -> None:
    """Create (or migrate) the reposync database."""
    existed = db.exists()
    conn = open_db(db)
    conn.close()
    verb = "Migrated" if existed else "Created"
    console.print(f"[green]✓[/] {verb} database: {db}")

    if global_config:
        path = ensure_global_config()
        console.print(f"[green]✓[/] Global config: {path}")


# ------------------------------------------------------------------
# Shared helpers for the other commands
# ------------------------------------------------------------------


def open_db(db_path: Path) -> sqlite3.Connection:
    """Open (or create) the database and run migrations."""
    conn = Database(db_path).connect()
    initialize(conn)
    return conn


def open_existing_db(db_path: Path) -> sqlite3.Connection:
    """Open an existing database; exit with an actionable message if missing."""
    if not db_path.exists():
        console.print(err_no_db(str(db_path)))
        raise typer.Exit(1)
    return open_db(db_path)


def load_config_or_exit() -> ReposyncConfig:
    try:
        return load_config()
    except ConfigError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1) from None
