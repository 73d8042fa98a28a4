"""Application configuration with sensible defaults."""
import os

# Embedding provider (Hugging Face inference API by default)
EMBEDDING_ENDPOINT = os.getenv(
    "EMBEDDING_ENDPOINT",
    "https://api-inference.huggingface.co/models/sentence-transformers/all-MiniLM-L6-v2",
)
EMBEDDING_TIMEOUT = float(os.getenv("EMBEDDING_TIMEOUT", "10.0"))
EMBEDDING_MAX_CONCURRENCY = int(os.getenv("EMBEDDING_MAX_CONCURRENCY", "4"))

# RAG parameters (character-based, matches what the upload step produces)
CHUNK_SIZE = int(os.getenv("CHUNK_SIZE", "500"))
RETRIEVAL_TOP_K = int(os.getenv("RETRIEVAL_TOP_K", "5"))

# Request limits
MAX_DOCUMENT_BYTES = int(os.getenv("MAX_DOCUMENT_BYTES", str(5 * 1024 * 1024)))
MAX_QUERY_LENGTH = int(os.getenv("MAX_QUERY_LENGTH", "2000"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
