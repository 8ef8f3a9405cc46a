"""reposync commit ingestion — GitHub source, diff summarizer, pipeline."""

from reposync.ingest.github import GitHubClient, UpstreamCommit, parse_repo_url
from reposync.ingest.pipeline import (
    COMMIT_WINDOW,
    CommitIngestionPipeline,
    IngestReport,
    Settled,
    latest_commits,
)
from reposync.ingest.summarizer import CommitSummarizer

__all__ = [
    "COMMIT_WINDOW",
    "CommitIngestionPipeline",
    "CommitSummarizer",
    "GitHubClient",
    "IngestReport",
    "Settled",
    "UpstreamCommit",
    "latest_commits",
    "parse_repo_url",
]
