"""Pytest configuration and shared fakes."""
import asyncio

import pytest

from travel_rag.embedding_client import EmbeddingError


# Chunks used across retrieval tests
TOKYO_CHUNKS = [
    "東京晴空塔是著名景點",
    "築地市場有新鮮海鮮",
    "台北101是台灣地標",
]


class FakeEmbedder:
    """Embedding client stand-in returning fixed vectors per text.

    Texts mapped to an exception instance raise it; unknown texts raise
    EmbeddingError.
    """

    def __init__(self, vectors, delay: float = 0.0):
        self.vectors = vectors
        self.delay = delay
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def embed(self, text, credential):
        self.calls.append(text)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            value = self.vectors.get(text)
            if value is None:
                raise EmbeddingError(f"no vector for {text!r}")
            if isinstance(value, BaseException):
                raise value
            return value
        finally:
            self.in_flight -= 1


class FailingEmbedder:
    """Every call fails like an unreachable provider."""

    def __init__(self):
        self.calls = 0

    async def embed(self, text, credential):
        self.calls += 1
        raise EmbeddingError("network unreachable")


@pytest.fixture
def tokyo_chunks():
    """Three short CJK travel chunks."""
    return list(TOKYO_CHUNKS)


@pytest.fixture
def failing_embedder():
    return FailingEmbedder()
