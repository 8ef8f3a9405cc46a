"""Retrieval-augmented answerer.

Pipeline:
  1. Record one usage event (before anything can fail).
  2. Embed the question.
  3. Fetch the 10 nearest indexed source summaries for the project.
  4. No hits → canned answer, no LLM call.
  5. Otherwise build a grounded prompt and stream the model's answer.

Embedding and index failures raise before any token is produced; model
failures surface on the returned TokenStream.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

from reposync.db.index import TOP_K, SemanticIndex
from reposync.db.models import RetrievedDocument
from reposync.db.repository import Repository
from reposync.rag.llm_client import EmbeddingProvider, LanguageModel
from reposync.rag.prompt import NO_CONTEXT_ANSWER, build_prompt
from reposync.rag.stream import TokenStream

logger = logging.getLogger(__name__)


@dataclass
class Answer:
    """Streamed answer plus the ranked documents it was grounded on."""

    tokens: TokenStream
    references: list[RetrievedDocument] = field(default_factory=list)


class RetrievalAugmentedAnswerer:
    """Answer free-text questions about a project's indexed source files.

    Args:
        repo:     Usage meter (one event per question).
        index:    Semantic index to retrieve from.
        embedder: ``embed(text) -> list[float]``.
        model:    ``complete(prompt) -> Iterator[str]``.
        top_k:    Number of documents retrieved per question.
    """

    def __init__(
        self,
        repo: Repository,
        index: SemanticIndex,
        embedder: EmbeddingProvider,
        model: LanguageModel,
        top_k: int = TOP_K,
    ) -> None:
        self._repo = repo
        self._index = index
        self._embedder = embedder
        self._model = model
        self._top_k = top_k

    def answer(self, question: str, project_id: str) -> Answer:
        """Return a lazily streamed answer to *question* for *project_id*.

        Raises:
            StorageError: Usage could not be recorded or the index query failed.
            EmbeddingError: The question could not be embedded.
        """
        self._repo.record_usage(project_id)

        vector = self._embedder.embed(question)
        documents = self._index.query(project_id, vector, self._top_k)

        if not documents:
            logger.debug("Project %s: no indexed context for question", project_id)
            return Answer(tokens=TokenStream.completed(NO_CONTEXT_ANSWER), references=[])

        logger.debug(
            "Project %s: grounding answer on %d documents (best %.3f)",
            project_id,
            len(documents),
            documents[0].similarity,
        )
        prompt = build_prompt(question, documents)
        return Answer(tokens=TokenStream(self._relay(prompt)), references=documents)

    def _relay(self, prompt: str) -> Iterator[str]:
        # Defers the model call to the first pull so start-up failures land
        # on the stream too; closing this generator closes the model's.
        yield from self._model.complete(prompt)
