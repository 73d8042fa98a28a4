"""Retriever selecting document chunks for itinerary generation.

Handles:
- Query and chunk embedding with bounded concurrency
- Cosine ranking of embedded chunks
- Keyword-overlap fallback when embeddings are unavailable or uninformative
- Context formatting for the generation prompt
"""
import asyncio
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

import structlog

from travel_rag import config
from travel_rag.embedding_client import EmbeddingClient, EmbeddingError, cosine_similarity
from travel_rag.rag.errors import InvalidArgumentError
from travel_rag.rag.keywords import ScoredChunk, rank_by_keyword, score_chunks

logger = structlog.get_logger()

STRATEGY_VECTOR = "vector"
STRATEGY_KEYWORD = "keyword"

CONTEXT_SEPARATOR = "\n\n"


class Embedder(Protocol):
    async def embed(self, text: str, credential: Optional[str]) -> List[float]:
        ...


@dataclass(frozen=True)
class RetrievalResult:
    """Chunks selected by one retrieval call, best first."""

    chunks: List[str]
    strategy: str

    @property
    def context(self) -> str:
        """Selected chunks joined for the generation prompt."""
        return CONTEXT_SEPARATOR.join(self.chunks)


def build_itinerary_query(destination: str, days: int, preferences: Optional[str] = None) -> str:
    """Build the retrieval query for an itinerary request."""
    return f"{destination} {days}天 {preferences or ''} 旅遊行程"


class Retriever:
    """Embedding-first retriever with keyword fallback."""

    def __init__(
        self,
        embedding_client: Optional[Embedder] = None,
        top_k: Optional[int] = None,
        max_concurrency: Optional[int] = None,
        embed_timeout: Optional[float] = None,
    ):
        """Initialize the retriever.

        Args:
            embedding_client: Client used for embeddings (default EmbeddingClient)
            top_k: Default number of chunks to return (default from config)
            max_concurrency: Maximum in-flight embedding calls per retrieval
            embed_timeout: Per-call time limit in seconds for one embedding
        """
        self.embedding_client = embedding_client or EmbeddingClient()
        self.top_k = top_k if top_k is not None else config.RETRIEVAL_TOP_K
        self.max_concurrency = (
            max_concurrency if max_concurrency is not None else config.EMBEDDING_MAX_CONCURRENCY
        )
        self.embed_timeout = embed_timeout if embed_timeout is not None else config.EMBEDDING_TIMEOUT

        if self.top_k <= 0:
            raise InvalidArgumentError(f"top_k must be positive, got {self.top_k}")
        if self.max_concurrency <= 0:
            raise InvalidArgumentError(f"max_concurrency must be positive, got {self.max_concurrency}")
        if self.embed_timeout <= 0:
            raise InvalidArgumentError(f"embed_timeout must be positive, got {self.embed_timeout}")

    async def retrieve(
        self,
        query: str,
        chunks: Sequence[str],
        embedding_credential: Optional[str] = None,
        top_k: Optional[int] = None,
    ) -> List[str]:
        """Select the chunks most relevant to a query.

        Args:
            query: Query text
            chunks: Candidate chunks in document order
            embedding_credential: Optional embedding provider key
            top_k: Number of chunks to return (overrides default)

        Returns:
            ``min(top_k, len(chunks))`` chunk texts, best first

        Raises:
            InvalidArgumentError: If chunks is empty or top_k is not positive
        """
        result = await self.retrieve_result(query, chunks, embedding_credential, top_k)
        return result.chunks

    async def retrieve_result(
        self,
        query: str,
        chunks: Sequence[str],
        embedding_credential: Optional[str] = None,
        top_k: Optional[int] = None,
    ) -> RetrievalResult:
        """Like retrieve, but also reports which strategy produced the ranking."""
        top_k = self.top_k if top_k is None else top_k

        if not chunks:
            raise InvalidArgumentError("chunks must not be empty")
        if top_k <= 0:
            raise InvalidArgumentError(f"top_k must be positive, got {top_k}")

        chunks = list(chunks)

        logger.info(
            "retrieval_started",
            query_length=len(query),
            chunk_count=len(chunks),
            top_k=top_k,
            has_credential=bool(embedding_credential and embedding_credential.strip()),
        )

        if embedding_credential and embedding_credential.strip():
            try:
                selected = await self._rank_by_embedding(query, chunks, embedding_credential, top_k)
            except Exception as e:
                logger.warning(
                    "vector_retrieval_failed",
                    error=str(e),
                    error_type=type(e).__name__,
                )
                selected = None

            if selected is not None:
                logger.info("retrieval_completed", strategy=STRATEGY_VECTOR, results_returned=len(selected))
                return RetrievalResult(chunks=selected, strategy=STRATEGY_VECTOR)

        selected = rank_by_keyword(query, chunks, top_k)
        logger.info("retrieval_completed", strategy=STRATEGY_KEYWORD, results_returned=len(selected))
        return RetrievalResult(chunks=selected, strategy=STRATEGY_KEYWORD)

    async def retrieve_context(
        self,
        query: str,
        chunks: Sequence[str],
        embedding_credential: Optional[str] = None,
        top_k: Optional[int] = None,
    ) -> str:
        """Retrieve chunks and join them into prompt context."""
        result = await self.retrieve_result(query, chunks, embedding_credential, top_k)
        return result.context

    async def _embed_bounded(
        self, text: str, credential: str, semaphore: asyncio.Semaphore
    ) -> List[float]:
        async with semaphore:
            async with asyncio.timeout(self.embed_timeout):
                return await self.embedding_client.embed(text, credential)

    async def _embed_chunk(
        self, index: int, text: str, credential: str, semaphore: asyncio.Semaphore
    ) -> Optional[List[float]]:
        """Embed one chunk; a failure only drops this chunk."""
        try:
            return await self._embed_bounded(text, credential, semaphore)
        except Exception as e:
            logger.warning(
                "chunk_embedding_failed",
                chunk_index=index,
                error=str(e) or type(e).__name__,
                error_type=type(e).__name__,
            )
            return None

    async def _rank_by_embedding(
        self,
        query: str,
        chunks: List[str],
        credential: str,
        top_k: int,
    ) -> Optional[List[str]]:
        """Rank chunks by cosine similarity to the query.

        Returns:
            Selected chunks, or None when the vector path produced nothing usable
        """
        semaphore = asyncio.Semaphore(self.max_concurrency)

        try:
            query_vector = await self._embed_bounded(query, credential, semaphore)
        except (EmbeddingError, TimeoutError) as e:
            logger.warning("query_embedding_failed", error=str(e) or type(e).__name__)
            return None

        async with asyncio.TaskGroup() as group:
            tasks = [
                group.create_task(self._embed_chunk(i, chunk, credential, semaphore))
                for i, chunk in enumerate(chunks)
            ]
        vectors = [task.result() for task in tasks]

        scored = [
            ScoredChunk(index=i, text=chunk, score=cosine_similarity(query_vector, vector))
            for i, (chunk, vector) in enumerate(zip(chunks, vectors))
            if vector is not None
        ]

        if not scored:
            logger.info("vector_ranking_empty", chunk_count=len(chunks))
            return None

        scored.sort(key=lambda s: s.score, reverse=True)

        if scored[0].score <= 0:
            logger.info("vector_ranking_degenerate", top_score=scored[0].score)
            return None

        logger.debug(
            "vector_ranking_completed",
            scored_count=len(scored),
            failed_count=len(chunks) - len(scored),
            top_score=round(scored[0].score, 4),
        )

        selected = scored[:top_k]
        wanted = min(top_k, len(chunks))

        if len(selected) < wanted:
            # Fill the remaining slots from chunks that could not be embedded
            embedded = {s.index for s in scored}
            unscored = [i for i in range(len(chunks)) if i not in embedded]
            backfill = score_chunks(query, [chunks[i] for i in unscored])
            for candidate in backfill[: wanted - len(selected)]:
                selected.append(candidate)
            logger.debug("vector_ranking_backfilled", backfilled=wanted - len(scored))

        return [s.text for s in selected]


_retriever_instance: Optional[Retriever] = None


def get_retriever() -> Retriever:
    """Get or create the default retriever instance."""
    global _retriever_instance
    if _retriever_instance is None:
        _retriever_instance = Retriever()
    return _retriever_instance


async def retrieve(
    query: str,
    chunks: Sequence[str],
    embedding_credential: Optional[str] = None,
    top_k: int = 5,
) -> List[str]:
    """Retrieve relevant chunks for a query (convenience function)."""
    return await get_retriever().retrieve(query, chunks, embedding_credential, top_k)
