"""Tests for reposync rich error messages."""

from __future__ import annotations

import pytest

from reposync.cli.errors import (
    describe,
    err_config,
    err_embedding,
    err_generation,
    err_github_auth,
    err_github_fetch,
    err_invalid_repo_url,
    err_no_api_key,
    err_no_db,
    err_project_precondition,
    err_storage,
)
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


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _has_what_and_action(msg: str) -> bool:
    """Every error must contain a cause AND an actionable instruction."""
    lower = msg.lower()
    return any(kw in lower for kw in ["run:", "set:", "use ", "export ", "check ", "ask again"])


# ---------------------------------------------------------------------------
# Message content
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("msg", [
    err_no_api_key("gemini"),
    err_no_db(".reposync.db"),
    err_project_precondition("Project 'x' has no GitHub URL."),
    err_invalid_repo_url("bad url"),
    err_github_auth(),
    err_github_fetch("timeout"),
    err_storage("disk full"),
    err_embedding("quota"),
    err_generation("reset"),
])
def test_messages_are_actionable(msg):
    assert _has_what_and_action(msg)


def test_no_api_key_names_env_var():
    assert "GEMINI_API_KEY" in err_no_api_key("gemini")


def test_no_api_key_unknown_provider():
    assert "ACME_API_KEY" in err_no_api_key("acme")


def test_no_db_names_path():
    assert "custom.db" in err_no_db("custom.db")


def test_config_error_includes_message():
    assert "max_workers" in err_config("ingest.max_workers must be >= 1")


# ---------------------------------------------------------------------------
# describe()
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("exc,needle", [
    (AuthExpiredError("401"), "GITHUB_TOKEN"),
    (UpstreamFetchError("GitHub down"), "GitHub down"),
    (InputError("not a repo"), "https://github.com/<owner>/<repo>"),
    (PreconditionError("Project 'p' does not exist."), "reposync project list"),
    (StorageError("locked"), "locked"),
    (EmbeddingError("quota"), "embedding.model"),
    (GenerationError("reset"), "interrupted"),
    (ReposyncError("other"), "other"),
])
def test_describe_maps_error_types(exc, needle):
    assert needle in describe(exc)
