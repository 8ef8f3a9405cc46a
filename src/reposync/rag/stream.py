"""Pull-based token stream handed to answer consumers.

The consumer iterates at its own pace. Iteration never raises: a failure
from the producer ends the stream and is recorded on ``error``. Fragments
that were already delivered stay delivered.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from reposync.errors import GenerationError


class TokenStream:
    """Iterator over text fragments with an explicit done / error state.

    Args:
        fragments: Upstream fragment iterable (usually a lazy generator).
    """

    def __init__(self, fragments: Iterable[str]) -> None:
        self._source: Iterator[str] = iter(fragments)
        self._delivered: list[str] = []
        self._done = False
        self.error: GenerationError | None = None

    @classmethod
    def completed(cls, text: str) -> TokenStream:
        """A stream whose whole content is known up front."""
        return cls([text])

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        if self._done:
            raise StopIteration
        try:
            fragment = next(self._source)
        except StopIteration:
            self._done = True
            raise
        except Exception as exc:
            self.error = exc if isinstance(exc, GenerationError) else GenerationError(str(exc))
            if self.error is not exc:
                self.error.__cause__ = exc
            self._done = True
            raise StopIteration from None
        self._delivered.append(fragment)
        return fragment

    def __enter__(self) -> TokenStream:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    @property
    def done(self) -> bool:
        """True once the producer finished, failed, or the stream was closed."""
        return self._done

    @property
    def text(self) -> str:
        """Concatenation of every fragment delivered so far."""
        return "".join(self._delivered)

    def read(self) -> str:
        """Drain the stream and return the full text (partial text on error)."""
        for _ in self:
            pass
        return self.text

    def close(self) -> None:
        """Stop consuming and cancel the upstream generator if it supports it."""
        if self._done:
            return
        self._done = True
        close = getattr(self._source, "close", None)
        if callable(close):
            close()
