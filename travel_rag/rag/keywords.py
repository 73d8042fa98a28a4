"""Keyword-overlap scoring used when no embedding provider is available.

Keywords are runs of CJK ideographs and runs of 3+ Latin letters. Common
English words are not filtered, so short function words ("the", "and")
count as keywords like any other.
"""
import re
from dataclasses import dataclass
from typing import List, Sequence, Set

import structlog

from travel_rag.rag.errors import InvalidArgumentError

logger = structlog.get_logger()

_CJK_RUN = re.compile(r"[\u3400-\u4dbf\u4e00-\u9fff\uf900-\ufaff]+")
_LATIN_RUN = re.compile(r"(?<![a-z])[a-z]{3,}(?![a-z])")


@dataclass(frozen=True)
class ScoredChunk:
    """A chunk with its score for one retrieval call."""

    index: int
    text: str
    score: float


def extract_keywords(text: str) -> Set[str]:
    """Extract the keyword set of a text.

    Args:
        text: Any text

    Returns:
        Set of CJK runs and lower-cased Latin words of length >= 3
    """
    keywords = set(_CJK_RUN.findall(text))
    keywords.update(_LATIN_RUN.findall(text.lower()))
    return keywords


def keyword_similarity(text_a: str, text_b: str) -> float:
    """Jaccard similarity of the keyword sets of two texts.

    Returns 0.0 when either text has no keywords.
    """
    keywords_a = extract_keywords(text_a)
    keywords_b = extract_keywords(text_b)

    if not keywords_a or not keywords_b:
        return 0.0

    intersection = len(keywords_a & keywords_b)
    union = len(keywords_a | keywords_b)
    return intersection / union


def score_chunks(query: str, chunks: Sequence[str]) -> List[ScoredChunk]:
    """Score chunks against a query, best first.

    The sort is stable, so equal scores keep their original order.
    """
    scored = [
        ScoredChunk(index=i, text=chunk, score=keyword_similarity(query, chunk))
        for i, chunk in enumerate(chunks)
    ]
    return sorted(scored, key=lambda s: s.score, reverse=True)


def rank_by_keyword(query: str, chunks: Sequence[str], top_k: int) -> List[str]:
    """Select the ``top_k`` chunks with the most keyword overlap.

    If no chunk shares a keyword with the query, the first ``top_k`` chunks
    are returned in document order so the caller still gets context.

    Args:
        query: Query text
        chunks: Candidate chunks
        top_k: Maximum number of chunks to return

    Returns:
        Selected chunk texts

    Raises:
        InvalidArgumentError: If top_k is not positive
    """
    if top_k <= 0:
        raise InvalidArgumentError(f"top_k must be positive, got {top_k}")

    scored = score_chunks(query, chunks)

    if not scored or scored[0].score == 0:
        logger.debug("keyword_ranking_degenerate", chunk_count=len(chunks), top_k=top_k)
        return list(chunks[:top_k])

    logger.debug(
        "keyword_ranking_completed",
        chunk_count=len(chunks),
        top_k=top_k,
        top_score=round(scored[0].score, 4),
    )

    return [s.text for s in scored[:top_k]]
