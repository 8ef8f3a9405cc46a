"""LiteLLM client wrapper with retry, streaming, and API key validation.

All LLM + embedding calls route through this module. LiteLLM's built-in
retry is used (num_retries=3, exponential backoff). API key presence is
validated at startup before any generation begins.
"""

from __future__ import annotations

import os
from collections.abc import Iterator

import litellm

from reposync.errors import EmbeddingError

# Disable LiteLLM verbose logging unless explicitly enabled
litellm.suppress_debug_info = True
litellm.set_verbose = False  # type: ignore[assignment]


# ------------------------------------------------------------------
# Provider → env var mapping for API key validation
# ------------------------------------------------------------------

_PROVIDER_ENV: dict[str, str | None] = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "azure": "AZURE_API_KEY",
    "cohere": "COHERE_API_KEY",
    "gemini": "GEMINI_API_KEY",
    "mistral": "MISTRAL_API_KEY",
    "groq": "GROQ_API_KEY",
    "ollama": None,  # Local, no key required
    "ollama_chat": None,
}


def validate_api_key(model: str) -> None:
    """Check that the required API key env var is set for *model*.

    Args:
        model: LiteLLM model string in 'provider/model' format.

    Raises:
        EnvironmentError: If the required key is missing from environment.
    """
    provider = model.split("/")[0].lower() if "/" in model else "openai"
    env_var = _PROVIDER_ENV.get(provider)

    if env_var is None:
        return

    if not os.getenv(env_var):
        raise EnvironmentError(
            f"API key not found for provider '{provider}'. "
            f"Set the {env_var} environment variable."
        )


def complete(
    model: str,
    messages: list[dict],
    max_tokens: int = 2048,
    temperature: float = 0.0,
    num_retries: int = 3,
) -> str:
    """Call litellm.completion() with retry/backoff. Returns content string.

    Raises:
        litellm.exceptions.APIError: On persistent API failure after retries.
    """
    response = litellm.completion(
        model=model,
        messages=messages,
        max_tokens=max_tokens,
        temperature=temperature,
        num_retries=num_retries,
    )
    return response.choices[0].message.content or ""


def stream(
    model: str,
    messages: list[dict],
    max_tokens: int = 2048,
    temperature: float = 0.0,
    num_retries: int = 3,
) -> Iterator[str]:
    """Stream a completion as text fragments, in the order the model emits them.

    Lazy: the request is only sent when the first fragment is pulled.
    Closing the generator stops reading from the provider.
    """
    response = litellm.completion(
        model=model,
        messages=messages,
        max_tokens=max_tokens,
        temperature=temperature,
        num_retries=num_retries,
        stream=True,
    )
    try:
        for chunk in response:
            delta = chunk.choices[0].delta.content
            if delta:
                yield delta
    finally:
        close = getattr(response, "close", None)
        if callable(close):
            close()


def embed(model: str, text: str, num_retries: int = 3) -> list[float]:
    """Call litellm.embedding() with retry/backoff. Returns embedding vector."""
    response = litellm.embedding(
        model=model,
        input=[text],
        num_retries=num_retries,
    )
    return response.data[0]["embedding"]


# ------------------------------------------------------------------
# Collaborators used by the answerer
# ------------------------------------------------------------------


class LanguageModel:
    """Streaming chat model: ``complete(prompt)`` yields text fragments lazily."""

    def __init__(
        self, model: str, max_tokens: int = 2048, temperature: float = 0.2
    ) -> None:
        self.model = model
        self._max_tokens = max_tokens
        self._temperature = temperature

    def complete(self, prompt: str) -> Iterator[str]:
        return stream(
            self.model,
            [{"role": "user", "content": prompt}],
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )


class EmbeddingProvider:
    """Maps text to a fixed-width vector; rejects vectors of any other width."""

    def __init__(self, model: str, dimensions: int = 768) -> None:
        self.model = model
        self.dimensions = dimensions

    def embed(self, text: str) -> list[float]:
        """Return the embedding of *text*.

        Raises:
            EmbeddingError: On provider failure or a vector of the wrong width.
        """
        try:
            vector = embed(self.model, text)
        except Exception as exc:
            raise EmbeddingError(f"Embedding failed ({self.model}): {exc}") from exc
        if len(vector) != self.dimensions:
            raise EmbeddingError(
                f"Embedding model '{self.model}' returned {len(vector)} dimensions, "
                f"expected {self.dimensions}."
            )
        return [float(v) for v in vector]
