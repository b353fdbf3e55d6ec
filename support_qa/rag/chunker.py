"""Chunkers - split extracted document text into bounded-size segments."""

import re
from abc import ABC, abstractmethod
from typing import Callable, Iterator, Optional

DEFAULT_CHUNK_SIZE = 2000

_BLANK_LINE = re.compile(r"\n\s*\n")


class ChunkSequence:
    """Lazy, finite sequence of chunks that can be iterated more than once."""

    def __init__(self, factory: Callable[[], Iterator[str]]):
        self._factory = factory

    def __iter__(self) -> Iterator[str]:
        return self._factory()


class Chunker(ABC):
    """Splits text into trimmed, non-empty chunks."""

    name: str = ""

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.chunk_size = chunk_size

    def split(self, text: str, chunk_size: Optional[int] = None) -> ChunkSequence:
        """Split text into chunks.

        Args:
            text: Text to split
            chunk_size: Window size in characters (uses the chunker default if None)

        Returns:
            Lazy sequence of trimmed, non-empty chunks
        """
        size = chunk_size if chunk_size is not None else self.chunk_size
        if size <= 0:
            raise ValueError("chunk_size must be positive")
        return ChunkSequence(lambda: self._iter_chunks(text or "", size))

    @abstractmethod
    def _iter_chunks(self, text: str, chunk_size: int) -> Iterator[str]:
        ...


def _windows(text: str, chunk_size: int) -> Iterator[str]:
    for start in range(0, len(text), chunk_size):
        chunk = text[start:start + chunk_size].strip()
        if chunk:
            yield chunk


class FixedSizeChunker(Chunker):
    """Non-overlapping windows of chunk_size characters.

    No sentence or paragraph awareness: a window may cut a word in half.
    At most ceil(len(text) / chunk_size) chunks are produced.
    """

    name = "fixed"

    def _iter_chunks(self, text: str, chunk_size: int) -> Iterator[str]:
        return _windows(text, chunk_size)


class ParagraphChunker(Chunker):
    """One chunk per blank-line separated paragraph.

    Paragraphs longer than chunk_size are further cut into fixed windows so
    that every chunk stays bounded.
    """

    name = "paragraph"

    def _iter_chunks(self, text: str, chunk_size: int) -> Iterator[str]:
        for paragraph in _BLANK_LINE.split(text):
            yield from _windows(paragraph.strip(), chunk_size)


CHUNKERS = {
    FixedSizeChunker.name: FixedSizeChunker,
    ParagraphChunker.name: ParagraphChunker,
}


def get_chunker(strategy: str = "fixed", chunk_size: int = DEFAULT_CHUNK_SIZE) -> Chunker:
    """Create a chunker by strategy name ("fixed" or "paragraph")."""
    try:
        chunker_cls = CHUNKERS[strategy]
    except KeyError:
        raise ValueError(
            f"Unknown chunk strategy '{strategy}', expected one of {sorted(CHUNKERS)}"
        ) from None
    return chunker_cls(chunk_size)
