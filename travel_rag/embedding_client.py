"""Embedding provider client with response-shape decoding."""
from dataclasses import dataclass
from typing import Any, List, Optional, Union

import httpx
import numpy as np
import structlog

from travel_rag import config

logger = structlog.get_logger()


class EmbeddingError(Exception):
    """Embedding could not be obtained (credential, HTTP, or payload problem)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class BareVector:
    """Response body was the vector itself (or a one-row batch of it)."""

    values: List[float]


@dataclass(frozen=True)
class WrappedVector:
    """Response body was ``{"embeddings": [vector, ...]}``."""

    values: List[float]


@dataclass(frozen=True)
class Malformed:
    """Response body matched no known shape."""

    reason: str


EmbeddingPayload = Union[BareVector, WrappedVector, Malformed]


def _as_vector(value: Any) -> Optional[List[float]]:
    """Return value as a list of floats if it is a non-empty numeric list."""
    if not isinstance(value, list) or not value:
        return None
    for item in value:
        # bool is an int subclass but never a valid component
        if isinstance(item, bool) or not isinstance(item, (int, float)):
            return None
    return [float(item) for item in value]


def decode_embedding_payload(data: Any) -> EmbeddingPayload:
    """Classify a decoded JSON response body.

    Known shapes:
        - ``[0.1, 0.2, ...]`` -> BareVector
        - ``[[0.1, 0.2, ...], ...]`` -> BareVector of the first row
        - ``{"embeddings": [[0.1, 0.2, ...], ...]}`` -> WrappedVector

    Anything else is Malformed.
    """
    if isinstance(data, list):
        if not data:
            return Malformed("empty array")
        if isinstance(data[0], list):
            vector = _as_vector(data[0])
            if vector is None:
                return Malformed("first row is not a numeric vector")
            return BareVector(vector)
        vector = _as_vector(data)
        if vector is None:
            return Malformed("array is not numeric")
        return BareVector(vector)

    if isinstance(data, dict):
        embeddings = data.get("embeddings")
        if not isinstance(embeddings, list) or not embeddings:
            return Malformed("object has no 'embeddings' array")
        vector = _as_vector(embeddings[0])
        if vector is None:
            return Malformed("'embeddings[0]' is not a numeric vector")
        return WrappedVector(vector)

    return Malformed(f"unexpected payload type {type(data).__name__}")


def cosine_similarity(vec_a: List[float], vec_b: List[float]) -> float:
    """Cosine similarity in [-1, 1].

    Returns 0.0 for vectors of different length or with zero magnitude.
    """
    if len(vec_a) != len(vec_b):
        return 0.0

    a = np.asarray(vec_a, dtype=np.float64)
    b = np.asarray(vec_b, dtype=np.float64)

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    return float(np.dot(a, b) / (norm_a * norm_b))


class EmbeddingClient:
    """Async client for a bearer-authenticated embedding endpoint."""

    def __init__(
        self,
        endpoint: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the embedding client.

        Args:
            endpoint: Embedding URL (defaults to config.EMBEDDING_ENDPOINT)
            timeout: Request timeout in seconds (defaults to config.EMBEDDING_TIMEOUT)
            transport: Optional httpx transport, e.g. httpx.MockTransport in tests
        """
        self.endpoint = endpoint or config.EMBEDDING_ENDPOINT
        self.timeout = timeout if timeout is not None else config.EMBEDDING_TIMEOUT
        self.transport = transport

    async def embed(self, text: str, credential: Optional[str]) -> List[float]:
        """Generate an embedding for a text.

        Args:
            text: Text to embed
            credential: Bearer token for the provider

        Returns:
            Embedding vector

        Raises:
            EmbeddingError: On blank credential, non-2xx status, network
                failure or an unrecognised response body
        """
        token = (credential or "").strip()
        if not token:
            raise EmbeddingError("Embedding credential is empty")

        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                logger.debug("embedding_request", endpoint=self.endpoint, text_length=len(text))

                response = await client.post(
                    self.endpoint,
                    json={"inputs": text},
                    headers=headers,
                )
        except httpx.HTTPError as e:
            logger.warning("embedding_transport_error", error=str(e), error_type=type(e).__name__)
            raise EmbeddingError(f"Embedding request failed: {e}") from e

        if not response.is_success:
            logger.warning(
                "embedding_http_error",
                status_code=response.status_code,
                body_preview=response.text[:200],
            )
            raise EmbeddingError(
                f"Embedding API error ({response.status_code})",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise EmbeddingError("Embedding response is not valid JSON") from e

        payload = decode_embedding_payload(data)
        if isinstance(payload, Malformed):
            logger.warning("embedding_malformed_response", reason=payload.reason)
            raise EmbeddingError(f"Malformed embedding response: {payload.reason}")

        logger.debug(
            "embedding_response",
            shape=type(payload).__name__,
            dimension=len(payload.values),
        )

        return payload.values
