"""GitHub commit source — list commits and download unified diffs.

Security requirements:
- Allowed repository URL schemes: https:// and http:// only.
- GITHUB_TOKEN is sent as a Bearer header; never logged, never in error output.
- Timeout on every request (github.timeout, default 30 s).
- Max diff body: 5 MB.
"""

from __future__ import annotations

import json
import logging
import os
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass

from reposync.errors import AuthExpiredError, InputError, UpstreamFetchError

logger = logging.getLogger(__name__)

_USER_AGENT = "reposync/0.1"
_ALLOWED_SCHEMES = {"https", "http"}
_MAX_DIFF_BYTES = 5 * 1024 * 1024  # 5 MB
_JSON_ACCEPT = "application/vnd.github+json"
_DIFF_ACCEPT = "application/vnd.github.v3.diff"


@dataclass
class UpstreamCommit:
    """A commit as reported by the source-control host."""

    hash: str
    message: str = ""
    author_name: str = ""
    author_avatar_url: str = ""
    date: str = ""


def parse_repo_url(url: str) -> tuple[str, str]:
    """Split a repository URL into ``(owner, repo)``.

    Accepts ``https://github.com/owner/repo`` with an optional trailing slash
    or ``.git`` suffix. The last two path segments are taken as owner/repo.

    Raises:
        InputError: If the scheme is not http(s) or the path has fewer than
            two segments.
    """
    parsed = urllib.parse.urlparse(url.strip())
    if parsed.scheme not in _ALLOWED_SCHEMES:
        raise InputError(
            f"Unsupported repository URL '{url}'. Expected https://github.com/<owner>/<repo>"
        )
    segments = [s for s in parsed.path.split("/") if s]
    if len(segments) < 2:
        raise InputError(
            f"Invalid GitHub URL '{url}': cannot determine owner and repository."
        )
    owner, repo = segments[-2], segments[-1]
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    if not owner or not repo:
        raise InputError(
            f"Invalid GitHub URL '{url}': cannot determine owner and repository."
        )
    return owner, repo


class GitHubClient:
    """Commit source backed by the GitHub REST API.

    Args:
        api_url: API root (``https://api.github.com`` or a GHES endpoint).
        token: Personal access token; defaults to the ``GITHUB_TOKEN`` env var.
            Anonymous access works for public repositories (low rate limit).
        timeout: Per-request timeout in seconds.
        per_page: Commits requested per listing call.
    """

    def __init__(
        self,
        api_url: str = "https://api.github.com",
        token: str | None = None,
        timeout: float = 30.0,
        per_page: int = 30,
    ) -> None:
        self._api_url = api_url.rstrip("/")
        self._token = token if token is not None else os.environ.get("GITHUB_TOKEN", "")
        self._timeout = timeout
        self._per_page = per_page

    def list_commits(self, owner: str, repo: str) -> list[UpstreamCommit]:
        """Return the most recent commits of *owner*/*repo* (no ordering guarantee)."""
        query = urllib.parse.urlencode({"per_page": self._per_page})
        url = f"{self._api_url}/repos/{_quote(owner)}/{_quote(repo)}/commits?{query}"
        body = self._get(url, accept=_JSON_ACCEPT)
        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise UpstreamFetchError(
                f"Malformed commit listing for {owner}/{repo}: {exc}"
            ) from exc
        if not isinstance(payload, list):
            raise UpstreamFetchError(
                f"Unexpected commit listing for {owner}/{repo}: expected a JSON array."
            )
        return [_to_upstream_commit(item) for item in payload if isinstance(item, dict)]

    def get_diff(self, repo_url: str, commit_hash: str) -> str:
        """Return the unified diff of *commit_hash* in the repository at *repo_url*."""
        owner, repo = parse_repo_url(repo_url)
        url = f"{self._api_url}/repos/{_quote(owner)}/{_quote(repo)}/commits/{_quote(commit_hash)}"
        body = self._get(url, accept=_DIFF_ACCEPT, max_bytes=_MAX_DIFF_BYTES)
        return body.decode("utf-8", errors="replace")

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    def _get(self, url: str, accept: str, max_bytes: int | None = None) -> bytes:
        headers = {
            "Accept": accept,
            "User-Agent": _USER_AGENT,
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        request = urllib.request.Request(url, headers=headers)

        try:
            with urllib.request.urlopen(request, timeout=self._timeout) as response:
                body = response.read() if max_bytes is None else response.read(max_bytes + 1)
        except urllib.error.HTTPError as exc:
            if exc.code == 401:
                raise AuthExpiredError(
                    "GitHub rejected the credentials (HTTP 401). Refresh GITHUB_TOKEN."
                ) from None
            raise UpstreamFetchError(f"GitHub request failed ({exc.code}): {url}") from None
        except (urllib.error.URLError, OSError) as exc:
            raise UpstreamFetchError(f"GitHub request failed: {url}: {exc}") from exc

        if max_bytes is not None and len(body) > max_bytes:
            raise UpstreamFetchError(
                f"Response body exceeds {max_bytes // (1024 * 1024)} MB limit: {url}"
            )
        logger.debug("GET %s -> %d bytes", url, len(body))
        return body


def _quote(segment: str) -> str:
    return urllib.parse.quote(segment, safe="")


def _to_upstream_commit(item: dict) -> UpstreamCommit:
    commit = item.get("commit") or {}
    git_author = commit.get("author") or {}
    account = item.get("author") or {}
    return UpstreamCommit(
        hash=str(item.get("sha", "")),
        message=commit.get("message") or "",
        author_name=git_author.get("name") or "",
        author_avatar_url=account.get("avatar_url") or "",
        date=git_author.get("date") or "",
    )
