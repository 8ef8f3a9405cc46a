"""Tests for TokenStream."""

from __future__ import annotations

from reposync.errors import GenerationError
from reposync.rag.stream import TokenStream


def _failing(after: list[str], exc: Exception):
    yield from after
    raise exc


def test_completed_stream_yields_text_once():
    tokens = TokenStream.completed("hello")
    assert list(tokens) == ["hello"]
    assert tokens.done
    assert tokens.error is None


def test_fragments_delivered_in_order():
    tokens = TokenStream(iter(["a", "b", "c"]))
    assert tokens.read() == "abc"
    assert tokens.done


def test_not_done_before_exhaustion():
    tokens = TokenStream(iter(["a", "b"]))
    assert next(tokens) == "a"
    assert not tokens.done
    assert tokens.text == "a"


def test_error_mid_stream_keeps_delivered_fragments():
    tokens = TokenStream(_failing(["The ", "answer"], RuntimeError("connection reset")))
    assert list(tokens) == ["The ", "answer"]
    assert tokens.done
    assert isinstance(tokens.error, GenerationError)
    assert isinstance(tokens.error.__cause__, RuntimeError)
    assert tokens.text == "The answer"


def test_generation_error_is_kept_as_is():
    raised = GenerationError("model refused")
    tokens = TokenStream(_failing([], raised))
    assert tokens.read() == ""
    assert tokens.error is raised


def test_iteration_after_done_stays_exhausted():
    tokens = TokenStream(iter(["a"]))
    tokens.read()
    assert list(tokens) == []


def test_close_cancels_generator():
    closed = []

    def producer():
        try:
            yield "a"
            yield "b"
        finally:
            closed.append(True)

    tokens = TokenStream(producer())
    assert next(tokens) == "a"
    tokens.close()
    assert closed == [True]
    assert tokens.done
    assert list(tokens) == []
    assert tokens.error is None


def test_context_manager_closes():
    closed = []

    def producer():
        try:
            yield "a"
            yield "b"
        finally:
            closed.append(True)

    with TokenStream(producer()) as tokens:
        next(tokens)
    assert closed == [True]
