"""Tests for embedding blob (de)serialisation."""

from __future__ import annotations

import pytest

from reposync.db.vectors import deserialize_embedding, is_zero_vector, serialize_embedding


def test_serialize_packs_float32():
    blob = serialize_embedding([0.5, -1.0, 2.0], dimensions=3)
    assert len(blob) == 12


def test_serialize_rejects_wrong_width():
    with pytest.raises(ValueError, match="3 dimensions"):
        serialize_embedding([0.1, 0.2, 0.3], dimensions=768)


def test_deserialize_none():
    assert deserialize_embedding(None) is None


def test_deserialize_restores_values():
    blob = serialize_embedding([0.5, -1.0, 2.0], dimensions=3)
    assert deserialize_embedding(blob) == [0.5, -1.0, 2.0]


def test_is_zero_vector():
    assert is_zero_vector([0.0, 0.0])
    assert not is_zero_vector([0.0, 1e-6])
