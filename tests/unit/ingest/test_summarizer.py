"""Tests for CommitSummarizer."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from reposync.errors import GenerationError
from reposync.ingest.summarizer import CommitSummarizer

_COMPLETE = "reposync.ingest.summarizer.complete"


def test_summarize_returns_stripped_text():
    with patch(_COMPLETE, return_value="  * Fixed the parser\n"):
        result = CommitSummarizer().summarize("diff --git a/p.py b/p.py")
    assert result == "* Fixed the parser"


def test_summarize_includes_diff_in_prompt():
    with patch(_COMPLETE, return_value="ok") as mock_complete:
        CommitSummarizer().summarize("+added_line")
    prompt = mock_complete.call_args.kwargs["messages"][0]["content"]
    assert "+added_line" in prompt


def test_summarize_truncates_long_diff():
    diff = "a" * 20_000 + "TAIL"
    with patch(_COMPLETE, return_value="ok") as mock_complete:
        CommitSummarizer().summarize(diff)
    prompt = mock_complete.call_args.kwargs["messages"][0]["content"]
    assert "TAIL" not in prompt


def test_summarize_custom_model():
    with patch(_COMPLETE, return_value="ok") as mock_complete:
        CommitSummarizer(model="openai/gpt-4o-mini", max_tokens=200).summarize("diff")
    kwargs = mock_complete.call_args.kwargs
    assert kwargs["model"] == "openai/gpt-4o-mini"
    assert kwargs["max_tokens"] == 200
    assert kwargs["temperature"] == 0.0


def test_summarize_failure_raises_generation_error():
    with patch(_COMPLETE, side_effect=RuntimeError("rate limited")):
        with pytest.raises(GenerationError, match="rate limited"):
            CommitSummarizer().summarize("diff")
