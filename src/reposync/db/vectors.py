"""Embedding (de)serialisation for sqlite-vec distance functions."""

from __future__ import annotations

import struct

import sqlite_vec


def serialize_embedding(embedding: list[float], dimensions: int) -> bytes:
    """Pack *embedding* as a float32 blob after checking its length.

    Raises:
        ValueError: If the vector does not have exactly *dimensions* entries.
    """
    if len(embedding) != dimensions:
        raise ValueError(
            f"Embedding has {len(embedding)} dimensions, index expects {dimensions}."
        )
    return sqlite_vec.serialize_float32([float(v) for v in embedding])


def deserialize_embedding(blob: bytes | None) -> list[float] | None:
    """Unpack a float32 blob written by serialize_embedding()."""
    if blob is None:
        return None
    count = len(blob) // 4
    return list(struct.unpack(f"{count}f", blob))


def is_zero_vector(embedding: list[float]) -> bool:
    """True when every component is 0 (cosine distance is undefined)."""
    return not any(float(v) for v in embedding)
