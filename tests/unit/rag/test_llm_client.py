"""Tests for the LiteLLM client wrapper."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from reposync.errors import EmbeddingError
from reposync.rag.llm_client import (
    EmbeddingProvider,
    LanguageModel,
    complete,
    embed,
    stream,
    validate_api_key,
)

_COMPLETION = "reposync.rag.llm_client.litellm.completion"
_EMBEDDING = "reposync.rag.llm_client.litellm.embedding"


def _chunk(content):
    chunk = MagicMock()
    chunk.choices[0].delta.content = content
    return chunk


def _embedding_response(vector):
    response = MagicMock()
    response.data = [{"embedding": vector}]
    return response


# ------------------------------------------------------------------
# validate_api_key
# ------------------------------------------------------------------


def test_validate_api_key_gemini_missing(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    with pytest.raises(EnvironmentError, match="GEMINI_API_KEY"):
        validate_api_key("gemini/gemini-1.5-flash")


def test_validate_api_key_gemini_set(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    validate_api_key("gemini/text-embedding-004")  # should not raise


def test_validate_api_key_ollama_no_key_required():
    validate_api_key("ollama/llama3")


def test_validate_api_key_bare_model_treated_as_openai(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(EnvironmentError, match="OPENAI_API_KEY"):
        validate_api_key("gpt-4o")


# ------------------------------------------------------------------
# complete() / embed()
# ------------------------------------------------------------------


def test_complete_returns_content():
    response = MagicMock()
    response.choices[0].message.content = "* Added a parser"
    with patch(_COMPLETION, return_value=response) as mock_c:
        result = complete("gemini/gemini-1.5-flash", [{"role": "user", "content": "Hi"}], num_retries=2)
    assert result == "* Added a parser"
    assert mock_c.call_args.kwargs["num_retries"] == 2


def test_complete_none_content_is_empty():
    response = MagicMock()
    response.choices[0].message.content = None
    with patch(_COMPLETION, return_value=response):
        assert complete("gemini/gemini-1.5-flash", []) == ""


def test_embed_passes_text_as_list():
    with patch(_EMBEDDING, return_value=_embedding_response([0.1, 0.2])) as mock_e:
        assert embed("gemini/text-embedding-004", "hello") == [0.1, 0.2]
    assert mock_e.call_args.kwargs["input"] == ["hello"]


# ------------------------------------------------------------------
# stream()
# ------------------------------------------------------------------


def test_stream_yields_fragments_in_order():
    chunks = [_chunk("Hel"), _chunk(None), _chunk("lo"), _chunk("")]
    with patch(_COMPLETION, return_value=iter(chunks)) as mock_c:
        assert list(stream("gemini/gemini-1.5-flash", [])) == ["Hel", "lo"]
    assert mock_c.call_args.kwargs["stream"] is True


def test_stream_is_lazy():
    with patch(_COMPLETION) as mock_c:
        fragments = stream("gemini/gemini-1.5-flash", [])
        mock_c.assert_not_called()
        fragments.close()


def test_stream_close_closes_response():
    response = MagicMock()
    response.__iter__.return_value = iter([_chunk("a"), _chunk("b")])
    with patch(_COMPLETION, return_value=response):
        fragments = stream("gemini/gemini-1.5-flash", [])
        assert next(fragments) == "a"
        fragments.close()
    response.close.assert_called_once()


# ------------------------------------------------------------------
# LanguageModel / EmbeddingProvider
# ------------------------------------------------------------------


def test_language_model_sends_prompt_as_user_message():
    with patch(_COMPLETION, return_value=iter([_chunk("ok")])) as mock_c:
        out = list(LanguageModel("gemini/gemini-1.5-flash", max_tokens=64).complete("Question?"))
    assert out == ["ok"]
    kwargs = mock_c.call_args.kwargs
    assert kwargs["messages"] == [{"role": "user", "content": "Question?"}]
    assert kwargs["max_tokens"] == 64


def test_embedding_provider_returns_floats():
    with patch(_EMBEDDING, return_value=_embedding_response([1, 0])):
        assert EmbeddingProvider("gemini/text-embedding-004", dimensions=2).embed("q") == [1.0, 0.0]


def test_embedding_provider_wrong_width():
    with patch(_EMBEDDING, return_value=_embedding_response([0.1, 0.2, 0.3])):
        with pytest.raises(EmbeddingError, match="3 dimensions"):
            EmbeddingProvider("gemini/text-embedding-004", dimensions=768).embed("q")


def test_embedding_provider_wraps_provider_failure():
    with patch(_EMBEDDING, side_effect=RuntimeError("quota exceeded")):
        with pytest.raises(EmbeddingError, match="quota exceeded"):
            EmbeddingProvider("gemini/text-embedding-004").embed("q")
