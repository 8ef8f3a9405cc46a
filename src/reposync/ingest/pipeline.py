"""Commit ingestion pipeline.

Pipeline:
  1. Resolve the project's repository URL into owner/repo.
  2. List commits upstream, sort by commit date (newest first), keep 10.
  3. Drop commits whose hash is already in the ledger.
  4. Fetch + summarise every remaining commit concurrently. Each task
     settles to a value or an error; no task is abandoned and a failure
     never cancels its siblings. A failed task becomes an empty summary.
  5. Append all remaining commits to the ledger in one batch.

Failure semantics:
  - missing project / URL, bad URL, listing failure: fatal, nothing written
  - diff or summary failure: recovered per commit (blank summary, WARNING log)
  - ledger failure: fatal StorageError, batch rolled back
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import datetime, timezone

from reposync.db.ledger import CommitLedger
from reposync.db.models import Commit
from reposync.db.repository import Repository
from reposync.errors import PreconditionError
from reposync.ingest.github import GitHubClient, UpstreamCommit, parse_repo_url
from reposync.ingest.summarizer import CommitSummarizer

logger = logging.getLogger(__name__)

COMMIT_WINDOW = 10

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


@dataclass
class Settled:
    """Outcome of one concurrent task: exactly one of *value* / *error* is set."""

    value: str | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class IngestReport:
    """Result of one poll.

    Attributes:
        persisted: Rows actually inserted into the ledger.
        processed: Hashes of the unprocessed commits selected this poll.
        failed: Hashes whose diff/summary failed (stored with an empty summary).
    """

    persisted: int = 0
    processed: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class CommitIngestionPipeline:
    """Pull new commits for a project and record them with LLM summaries.

    Args:
        repo:        Project registry (reads github_url).
        ledger:      Commit ledger for dedup and batch append.
        source:      Commit source (``list_commits`` / ``get_diff``).
        summarizer:  Diff summarizer (``summarize(diff) -> str``).
        max_workers: Upper bound on concurrent summarisation tasks.
    """

    def __init__(
        self,
        repo: Repository,
        ledger: CommitLedger,
        source: GitHubClient,
        summarizer: CommitSummarizer,
        max_workers: int = COMMIT_WINDOW,
    ) -> None:
        self._repo = repo
        self._ledger = ledger
        self._source = source
        self._summarizer = summarizer
        self._max_workers = max(1, max_workers)

    def ingest(self, project_id: str) -> int:
        """Run one poll for *project_id* and return the number of new ledger rows."""
        return self.run(project_id).persisted

    def run(self, project_id: str) -> IngestReport:
        """Run one poll for *project_id* and return the full report."""
        github_url = self._resolve_url(project_id)
        owner, name = parse_repo_url(github_url)

        window = latest_commits(self._source.list_commits(owner, name))
        known = self._ledger.existing_hashes(project_id)
        pending = [c for c in window if c.hash not in known]

        report = IngestReport(processed=[c.hash for c in pending])
        if not pending:
            logger.info("Project %s: no new commits in the latest %d", project_id, len(window))
            return report

        outcomes = self._summarise_all(github_url, pending)

        rows: list[Commit] = []
        for upstream, outcome in zip(pending, outcomes):
            if not outcome.ok:
                report.failed.append(upstream.hash)
            rows.append(
                Commit(
                    project_id=project_id,
                    commit_hash=upstream.hash,
                    message=upstream.message,
                    author_name=upstream.author_name,
                    author_avatar_url=upstream.author_avatar_url,
                    committed_at=upstream.date,
                    summary=outcome.value if outcome.ok and outcome.value else "",
                )
            )

        report.persisted = self._ledger.append_batch(rows)
        logger.info(
            "Project %s: persisted %d of %d new commits (%d blank summaries)",
            project_id,
            report.persisted,
            len(pending),
            len(report.failed),
        )
        return report

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _resolve_url(self, project_id: str) -> str:
        project = self._repo.get_project(project_id)
        if project is None:
            raise PreconditionError(f"Project '{project_id}' does not exist.")
        if not project.github_url:
            raise PreconditionError(f"Project '{project_id}' has no GitHub URL.")
        return project.github_url

    def _summarise_all(self, repo_url: str, commits: list[UpstreamCommit]) -> list[Settled]:
        """Summarise *commits* concurrently; one Settled per commit, input order."""
        workers = min(len(commits), self._max_workers)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="summarise") as pool:
            futures = [pool.submit(self._summarise_one, repo_url, c.hash) for c in commits]
            wait(futures)

        outcomes: list[Settled] = []
        for commit, future in zip(commits, futures):
            exc = future.exception()
            if exc is None:
                outcomes.append(Settled(value=future.result()))
            else:
                logger.warning(
                    "Summary failed for commit %s; storing an empty summary: %s",
                    commit.hash[:12],
                    exc,
                )
                outcomes.append(Settled(error=exc))
        return outcomes

    def _summarise_one(self, repo_url: str, commit_hash: str) -> str:
        diff = self._source.get_diff(repo_url, commit_hash)
        return self._summarizer.summarize(diff)


# ------------------------------------------------------------------
# Ordering
# ------------------------------------------------------------------


def latest_commits(
    commits: list[UpstreamCommit], window: int = COMMIT_WINDOW
) -> list[UpstreamCommit]:
    """Return the *window* newest commits, newest first.

    The sort is stable: commits with equal dates keep their upstream order.
    Missing or unparsable dates sort last.
    """
    return sorted(commits, key=_commit_time, reverse=True)[:window]


def _commit_time(commit: UpstreamCommit) -> datetime:
    if not commit.date:
        return _OLDEST
    try:
        parsed = datetime.fromisoformat(commit.date.replace("Z", "+00:00"))
    except ValueError:
        return _OLDEST
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
