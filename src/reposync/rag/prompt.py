"""Prompt construction for grounded codebase answers."""

from __future__ import annotations

from reposync.db.models import RetrievedDocument

NO_CONTEXT_ANSWER = "I don't have enough context to answer your question."

_PREAMBLE = """\
You are an AI code assistant who answers questions about a codebase. Your \
audience is a technical intern who is trying to understand the codebase.
You are knowledgeable, helpful, precise and friendly.
If the question is about code or a specific file, give a detailed, step by \
step answer and include code snippets where they help."""

_RULES = f"""\
Take into account every entry of the CONTEXT BLOCK above.
Answer ONLY from the CONTEXT BLOCK. Never invent files, functions or \
behaviour that the context does not show.
If the context does not contain the answer, reply exactly: "{NO_CONTEXT_ANSWER}"
Do not apologise for previous responses; say when new information was gained.
Answer in markdown, with code snippets if needed. Be as detailed as possible \
and leave no ambiguity."""


def format_context(documents: list[RetrievedDocument]) -> str:
    """Render *documents* in rank order, one delimited entry each."""
    return "".join(
        f"source: {doc.file_name}\n"
        f"code content:\n{doc.source_code}\n"
        f"summary of file: {doc.summary}\n\n"
        for doc in documents
    )


def build_prompt(question: str, documents: list[RetrievedDocument]) -> str:
    """Return the full answer prompt for *question* grounded on *documents*."""
    return (
        f"{_PREAMBLE}\n\n"
        "START CONTEXT BLOCK\n"
        f"{format_context(documents)}"
        "END OF CONTEXT BLOCK\n\n"
        "START QUESTION\n"
        f"{question}\n"
        "END OF QUESTION\n\n"
        f"{_RULES}\n"
    )
