"""Commit summarizer — one-shot LiteLLM summary of a unified diff.

Called once per unprocessed commit by the ingestion pipeline, from worker
threads. Failures are raised as GenerationError; the pipeline decides what
a failed summary becomes.
"""

from __future__ import annotations

from reposync.errors import GenerationError
from reposync.rag.llm_client import complete

_SUMMARY_PROMPT = """\
You are an expert programmer summarising a git diff for a commit log. \
Write a concise summary (max {max_tokens} tokens) as a short bullet list of \
the meaningful changes. Mention the affected files when it helps. Do not \
describe formatting-only changes.

Reminders about the diff format:
- Lines starting with "+" were added, lines starting with "-" were removed.
- "diff --git a/<path> b/<path>" starts the changes of one file.

Diff (first {max_chars} characters):
{diff}

Summary:"""

_DEFAULT_MODEL = "gemini/gemini-1.5-flash"
_DEFAULT_MAX_TOKENS = 500
_MAX_DIFF_CHARS = 12_000


class CommitSummarizer:
    """Generate a summary for a single commit diff.

    Args:
        model:      LiteLLM model string for summary generation.
        max_tokens: Maximum tokens in the generated summary.
    """

    def __init__(
        self,
        model: str = _DEFAULT_MODEL,
        max_tokens: int = _DEFAULT_MAX_TOKENS,
    ) -> None:
        self._model = model
        self._max_tokens = max_tokens

    def summarize(self, diff: str) -> str:
        """Return the summary for *diff*.

        Raises:
            GenerationError: If the LLM call fails.
        """
        prompt = _SUMMARY_PROMPT.format(
            max_tokens=self._max_tokens,
            max_chars=_MAX_DIFF_CHARS,
            diff=diff[:_MAX_DIFF_CHARS],
        )
        try:
            text = complete(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=self._max_tokens,
                temperature=0.0,
            )
        except Exception as exc:
            raise GenerationError(f"Commit summary failed: {exc}") from exc
        return text.strip()
