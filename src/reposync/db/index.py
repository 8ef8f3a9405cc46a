"""Semantic index — per-project (file, source, summary, embedding) rows.

Rows are written by the source-file indexer and read by the answerer.
Ranking is exact cosine distance via sqlite-vec's vec_distance_cosine();
rows without an embedding never match.
"""

from __future__ import annotations

import sqlite3

from reposync.db.models import IndexedDocument, RetrievedDocument
from reposync.db.vectors import deserialize_embedding, is_zero_vector, serialize_embedding
from reposync.errors import StorageError

TOP_K = 10
DEFAULT_DIMENSIONS = 768

# Zero-magnitude vectors have no cosine distance (NULL); they never match.
_QUERY = """
SELECT file_name, source_code, summary, 1 - distance AS similarity
FROM (
    SELECT rowid AS row_order, file_name, source_code, summary,
           vec_distance_cosine(summary_embedding, :query) AS distance
    FROM source_code_embeddings
    WHERE project_id = :project_id
      AND summary_embedding IS NOT NULL
)
WHERE distance IS NOT NULL
ORDER BY distance ASC, row_order ASC
LIMIT :k
"""

_UPSERT = """
INSERT INTO source_code_embeddings (
    project_id, file_name, source_code, summary, summary_embedding
)
VALUES (?, ?, ?, ?, ?)
ON CONFLICT (project_id, file_name) DO UPDATE SET
    source_code = excluded.source_code,
    summary = excluded.summary,
    summary_embedding = excluded.summary_embedding,
    updated_at = datetime('now')
"""


class SemanticIndex:
    """Nearest-neighbour retrieval over indexed source summaries.

    Args:
        conn: Open connection with sqlite-vec loaded.
        dimensions: Embedding width shared by every row (768 by default).
    """

    def __init__(self, conn: sqlite3.Connection, dimensions: int = DEFAULT_DIMENSIONS) -> None:
        self._conn = conn
        self.dimensions = dimensions

    def query(
        self, project_id: str, embedding: list[float], k: int = TOP_K
    ) -> list[RetrievedDocument]:
        """Return up to *k* rows of *project_id*, most similar first.

        similarity = 1 - cosine_distance, so the list is non-increasing in
        similarity. Ties keep insertion order. Rows (or a query) with zero
        magnitude have no cosine distance and are never returned.
        """
        try:
            blob = serialize_embedding(embedding, self.dimensions)
        except ValueError as exc:
            raise StorageError(f"Query vector rejected: {exc}") from exc
        try:
            rows = self._conn.execute(
                _QUERY, {"query": blob, "project_id": project_id, "k": int(k)}
            ).fetchall()
        except sqlite3.Error as exc:
            raise StorageError(f"Semantic index query failed: {exc}") from exc
        return [
            RetrievedDocument(
                file_name=r["file_name"],
                source_code=r["source_code"],
                summary=r["summary"],
                similarity=float(r["similarity"]),
            )
            for r in rows
        ]

    def upsert(self, document: IndexedDocument) -> None:
        """Insert or replace the row for (project_id, file_name)."""
        blob = None
        if document.embedding is not None:
            if is_zero_vector(document.embedding):
                raise StorageError(
                    f"Embedding for '{document.file_name}' rejected: zero vector."
                )
            try:
                blob = serialize_embedding(document.embedding, self.dimensions)
            except ValueError as exc:
                raise StorageError(
                    f"Embedding for '{document.file_name}' rejected: {exc}"
                ) from exc
        try:
            with self._conn:
                self._conn.execute(
                    _UPSERT,
                    (
                        document.project_id,
                        document.file_name,
                        document.source_code,
                        document.summary,
                        blob,
                    ),
                )
        except sqlite3.Error as exc:
            raise StorageError(
                f"Could not index '{document.file_name}': {exc}"
            ) from exc

    def get(self, project_id: str, file_name: str) -> IndexedDocument | None:
        """Return the stored row for (project_id, file_name), or None.

        Read-back for the source-file indexer that writes through upsert().
        """
        row = self._conn.execute(
            """
            SELECT project_id, file_name, source_code, summary, summary_embedding
            FROM source_code_embeddings WHERE project_id = ? AND file_name = ?
            """,
            (project_id, file_name),
        ).fetchone()
        if row is None:
            return None
        return IndexedDocument(
            project_id=row["project_id"],
            file_name=row["file_name"],
            source_code=row["source_code"],
            summary=row["summary"],
            embedding=deserialize_embedding(row["summary_embedding"]),
        )

    def count(self, project_id: str, embedded_only: bool = False) -> int:
        """Number of indexed rows for *project_id* (optionally only embedded ones).

        Shown by `reposync usage`.
        """
        sql = "SELECT COUNT(*) FROM source_code_embeddings WHERE project_id = ?"
        if embedded_only:
            sql += " AND summary_embedding IS NOT NULL"
        return self._conn.execute(sql, (project_id,)).fetchone()[0]
