"""Domain models for the reposync storage layer."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Project:
    id: str
    name: str
    github_url: str | None = None
    created_at: str | None = None


@dataclass
class Commit:
    """A ledger row. Created once by the ingestion pipeline, never mutated."""

    project_id: str
    commit_hash: str
    message: str = ""
    author_name: str = ""
    author_avatar_url: str = ""
    committed_at: str = ""
    summary: str = ""
    created_at: str | None = None


@dataclass
class IndexedDocument:
    """A semantic index row written by the source-file indexer."""

    project_id: str
    file_name: str
    source_code: str
    summary: str = ""
    embedding: list[float] | None = None  # None rows are never retrieved


@dataclass
class RetrievedDocument:
    """One ranked hit from SemanticIndex.query()."""

    file_name: str
    source_code: str
    summary: str
    similarity: float


@dataclass
class UsageSummary:
    project_id: str
    api_requests: int
    request_limit: int
    window_days: int

    @property
    def remaining(self) -> int:
        return max(0, self.request_limit - self.api_requests)
