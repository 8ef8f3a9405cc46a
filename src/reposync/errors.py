"""Typed failure taxonomy for the reposync core.

Every failure that crosses the public surface (``poll_commits``,
``ask_question``) is one of these. Callers branch on the type, never on
status codes or message text.

  ReposyncError
  ├── PreconditionError      project missing, or project has no repository URL
  ├── InputError             repository URL cannot be split into owner/repo
  ├── StorageError           ledger / index / usage read or write failed
  └── UpstreamError
      ├── UpstreamFetchError commit listing or diff download failed
      │   └── AuthExpiredError  GitHub rejected the token (HTTP 401)
      ├── EmbeddingError     embedding provider failed
      └── GenerationError    language model failed (one-shot or mid-stream)
"""

from __future__ import annotations


class ReposyncError(Exception):
    """Base class for all reposync failures."""


class PreconditionError(ReposyncError):
    """Raised when a project is unknown or has no repository URL."""


class InputError(ReposyncError, ValueError):
    """Raised when a repository URL cannot be decomposed into owner/repo."""


class StorageError(ReposyncError):
    """Raised when the SQLite store rejects a read or write."""


class UpstreamError(ReposyncError):
    """Base class for failures of external collaborators."""


class UpstreamFetchError(UpstreamError):
    """Raised when GitHub commit listing or diff download fails."""


class AuthExpiredError(UpstreamFetchError):
    """Raised when GitHub answers 401: the token is missing, invalid or expired."""


class EmbeddingError(UpstreamError):
    """Raised when the embedding provider fails or returns a malformed vector."""


class GenerationError(UpstreamError):
    """Raised (or recorded on a TokenStream) when the language model fails."""
