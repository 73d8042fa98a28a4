"""Sentence-respecting text chunking for the RAG pipeline.

Splits extracted document text into chunks of at most ``chunk_size``
characters without cutting a sentence in half.
"""
import re
from typing import List, Optional

import structlog

from travel_rag import config

logger = structlog.get_logger()

# Half-width and full-width sentence terminators, plus newline
TERMINATORS = ".!?\n。！？．｡"

_SENTENCE_PATTERN = re.compile(
    rf"[^{re.escape(TERMINATORS)}]*[{re.escape(TERMINATORS)}]+|[^{re.escape(TERMINATORS)}]+"
)

SENTENCE_JOINER = " "


def split_sentences(text: str) -> List[str]:
    """Split text into sentence units.

    Each unit keeps its own terminator run (e.g. ``"Wait..."``), is stripped
    of surrounding whitespace, and empty units are dropped.

    Args:
        text: Text to split

    Returns:
        List of sentence strings in original order
    """
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    sentences = []
    for match in _SENTENCE_PATTERN.finditer(normalized):
        sentence = match.group(0).strip()
        if sentence:
            sentences.append(sentence)
    return sentences


class TextChunker:
    """Greedy sentence packer with a character budget."""

    def __init__(self, chunk_size: Optional[int] = None):
        """Initialize the text chunker.

        Args:
            chunk_size: Target chunk size in characters (default from config)
        """
        self.chunk_size = chunk_size if chunk_size is not None else config.CHUNK_SIZE

        if self.chunk_size <= 0:
            raise ValueError(f"Chunk size must be positive, got {self.chunk_size}")

    def chunk_text(self, text: str) -> List[str]:
        """Split text into chunks.

        A sentence longer than ``chunk_size`` is kept whole as its own chunk.
        Empty or whitespace-only input yields ``[text]`` so that retrieval
        always has at least one candidate.

        Args:
            text: Text to chunk

        Returns:
            Non-empty list of chunk strings
        """
        sentences = split_sentences(text)

        chunks: List[str] = []
        current = ""

        for sentence in sentences:
            if not current:
                current = sentence
            elif len(current) + len(SENTENCE_JOINER) + len(sentence) > self.chunk_size:
                chunks.append(current)
                current = sentence
            else:
                current = f"{current}{SENTENCE_JOINER}{sentence}"

        if current:
            chunks.append(current)

        if not chunks:
            logger.debug("text_has_no_sentences", text_length=len(text))
            return [text]

        logger.info(
            "text_chunked",
            text_length=len(text),
            sentence_count=len(sentences),
            chunk_count=len(chunks),
            chunk_size=self.chunk_size,
        )

        return chunks

    def get_chunk_stats(self, chunks: List[str]) -> dict:
        """Get statistics about a set of chunks.

        Args:
            chunks: List of chunk strings

        Returns:
            Dictionary with chunk statistics
        """
        if not chunks:
            return {
                "chunk_count": 0,
                "total_chars": 0,
                "avg_chunk_size": 0,
                "min_chunk_size": 0,
                "max_chunk_size": 0,
            }

        chunk_sizes = [len(c) for c in chunks]

        return {
            "chunk_count": len(chunks),
            "total_chars": sum(chunk_sizes),
            "avg_chunk_size": sum(chunk_sizes) // len(chunks),
            "min_chunk_size": min(chunk_sizes),
            "max_chunk_size": max(chunk_sizes),
            "target_size": self.chunk_size,
        }


_chunker_instance: Optional[TextChunker] = None


def get_chunker() -> TextChunker:
    """Get a text chunker with the default config."""
    global _chunker_instance
    if _chunker_instance is None:
        _chunker_instance = TextChunker()
    return _chunker_instance


def chunk_text(text: str, chunk_size: Optional[int] = None) -> List[str]:
    """Chunk text (convenience function).

    Args:
        text: Text to chunk
        chunk_size: Optional size override; uses the default chunker if omitted

    Returns:
        List of chunk strings
    """
    chunker = get_chunker() if chunk_size is None else TextChunker(chunk_size=chunk_size)
    return chunker.chunk_text(text)
