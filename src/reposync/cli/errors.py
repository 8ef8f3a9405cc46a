"""reposync rich error messages — actionable feedback.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from reposync.cli.errors import err_no_db
    console.print(err_no_db(".reposync.db"))
    raise typer.Exit(1)
"""

from __future__ import annotations

from reposync.errors import (
    AuthExpiredError,
    EmbeddingError,
    GenerationError,
    InputError,
    PreconditionError,
    ReposyncError,
    StorageError,
    UpstreamFetchError,
)


def err_no_api_key(provider: str) -> str:
    """No API key for *provider*."""
    env_map = {
        "openai": "OPENAI_API_KEY",
        "anthropic": "ANTHROPIC_API_KEY",
        "cohere": "COHERE_API_KEY",
        "gemini": "GEMINI_API_KEY",
        "mistral": "MISTRAL_API_KEY",
        "azure": "AZURE_API_KEY",
    }
    env_var = env_map.get(provider.lower(), f"{provider.upper()}_API_KEY")
    return (
        f"[red]Error:[/] No API key for '{provider}'.\n"
        f"  Set:  export {env_var}=..."
    )


def err_no_db(db_path: str = ".reposync.db") -> str:
    """No database at *db_path*."""
    return (
        f"[red]Error:[/] No database found at '{db_path}'.\n"
        "  Run:  reposync init"
    )


def err_config(message: str) -> str:
    return f"[red]Error:[/] Invalid configuration.\n  {message}"


def err_project_precondition(message: str) -> str:
    return (
        f"[red]Error:[/] {message}\n"
        "  Run:  reposync project list  to see registered projects, or\n"
        "        reposync project add <name> --github-url https://github.com/<owner>/<repo>"
    )


def err_invalid_repo_url(message: str) -> str:
    return (
        f"[red]Error:[/] {message}\n"
        "  Use a URL of the form  https://github.com/<owner>/<repo>"
    )


def err_github_auth() -> str:
    return (
        "[red]Error:[/] GitHub rejected the token (HTTP 401).\n"
        "  Create a new token and set:  export GITHUB_TOKEN=ghp_..."
    )


def err_github_fetch(message: str) -> str:
    return (
        f"[red]Error:[/] Could not fetch commits from GitHub.\n"
        f"  {message}\n"
        "  Check the repository URL, your network, and GitHub rate limits."
    )


def err_storage(message: str) -> str:
    return (
        f"[red]Error:[/] Database operation failed.\n"
        f"  {message}\n"
        "  Run:  reposync init  to create or migrate the database."
    )


def err_embedding(message: str) -> str:
    return (
        f"[red]Error:[/] Could not embed the question.\n"
        f"  {message}\n"
        "  Check embedding.model / embedding.dimensions in reposync.yaml."
    )


def err_generation(message: str) -> str:
    return (
        f"\n[red]Error:[/] The answer was interrupted: {message}\n"
        "  The text above is incomplete. Ask again to retry."
    )


def describe(exc: ReposyncError) -> str:
    """Map a core failure to its user-facing message."""
    if isinstance(exc, AuthExpiredError):
        return err_github_auth()
    if isinstance(exc, UpstreamFetchError):
        return err_github_fetch(str(exc))
    if isinstance(exc, InputError):
        return err_invalid_repo_url(str(exc))
    if isinstance(exc, PreconditionError):
        return err_project_precondition(str(exc))
    if isinstance(exc, StorageError):
        return err_storage(str(exc))
    if isinstance(exc, EmbeddingError):
        return err_embedding(str(exc))
    if isinstance(exc, GenerationError):
        return err_generation(str(exc))
    return f"[red]Error:[/] {exc}"
