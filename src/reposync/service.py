"""Public operations: poll_commits and ask_question.

These two functions are the whole surface that surrounding code (CLI, RPC,
UI) calls. Both take an open connection (see reposync.db.Database) and a
loaded ReposyncConfig, and wire the collaborators from it.
"""

from __future__ import annotations

import sqlite3

from reposync.config import ReposyncConfig
from reposync.db.index import SemanticIndex
from reposync.db.ledger import CommitLedger
from reposync.db.repository import Repository
from reposync.ingest.github import GitHubClient
from reposync.ingest.pipeline import CommitIngestionPipeline
from reposync.ingest.summarizer import CommitSummarizer
from reposync.rag.answerer import Answer, RetrievalAugmentedAnswerer
from reposync.rag.llm_client import EmbeddingProvider, LanguageModel


def build_pipeline(conn: sqlite3.Connection, config: ReposyncConfig) -> CommitIngestionPipeline:
    """Wire a CommitIngestionPipeline from *config*."""
    return CommitIngestionPipeline(
        repo=Repository(conn),
        ledger=CommitLedger(conn),
        source=GitHubClient(
            api_url=config.github.api_url,
            timeout=config.github.timeout,
            per_page=config.github.per_page,
        ),
        summarizer=CommitSummarizer(
            model=config.generation.summary_model,
            max_tokens=config.generation.summary_max_tokens,
        ),
        max_workers=config.ingest.max_workers,
    )


def build_answerer(
    conn: sqlite3.Connection, config: ReposyncConfig
) -> RetrievalAugmentedAnswerer:
    """Wire a RetrievalAugmentedAnswerer from *config*."""
    return RetrievalAugmentedAnswerer(
        repo=Repository(conn),
        index=SemanticIndex(conn, dimensions=config.embedding.dimensions),
        embedder=EmbeddingProvider(
            config.embedding.model, dimensions=config.embedding.dimensions
        ),
        model=LanguageModel(
            config.generation.model, max_tokens=config.generation.max_tokens
        ),
    )


def poll_commits(conn: sqlite3.Connection, project_id: str, config: ReposyncConfig) -> int:
    """Ingest new commits for *project_id*; returns the number of new ledger rows."""
    return build_pipeline(conn, config).ingest(project_id)


def ask_question(
    conn: sqlite3.Connection, question: str, project_id: str, config: ReposyncConfig
) -> Answer:
    """Answer *question* about *project_id*; tokens stream lazily from the result."""
    return build_answerer(conn, config).answer(question, project_id)
