"""Tests for answer prompt construction."""

from __future__ import annotations

from reposync.db.models import RetrievedDocument
from reposync.rag.prompt import NO_CONTEXT_ANSWER, build_prompt, format_context


def _doc(name, similarity):
    return RetrievedDocument(
        file_name=name,
        source_code=f"def {name.split('.')[0]}(): ...",
        summary=f"{name} does things",
        similarity=similarity,
    )


def test_format_context_entry_layout():
    text = format_context([_doc("b.py", 0.91)])
    assert text == (
        "source: b.py\n"
        "code content:\ndef b(): ...\n"
        "summary of file: b.py does things\n\n"
    )


def test_build_prompt_keeps_rank_order():
    prompt = build_prompt("How?", [_doc("b.py", 0.91), _doc("c.py", 0.77), _doc("a.py", 0.40)])
    assert prompt.index("source: b.py") < prompt.index("source: c.py") < prompt.index("source: a.py")


def test_build_prompt_delimits_context_and_question():
    prompt = build_prompt("Where is the parser?", [_doc("b.py", 0.9)])
    start = prompt.index("START CONTEXT BLOCK")
    end = prompt.index("END OF CONTEXT BLOCK")
    assert start < prompt.index("source: b.py") < end
    assert prompt.index("START QUESTION") < prompt.index("Where is the parser?") < prompt.index(
        "END OF QUESTION"
    )


def test_build_prompt_instructs_fallback_sentence():
    prompt = build_prompt("q", [_doc("b.py", 0.9)])
    assert NO_CONTEXT_ANSWER in prompt
