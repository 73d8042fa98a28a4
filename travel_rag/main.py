"""Main Quart application for the travel document RAG service."""
import logging
from typing import List, Optional

import structlog
from pydantic import BaseModel, Field, ValidationError
from quart import Quart, jsonify, request

from travel_rag import config
from travel_rag.rag.chunker import TextChunker
from travel_rag.rag.errors import InvalidArgumentError, UnsupportedDocumentError
from travel_rag.rag.extract import document_kind, extract_text
from travel_rag.rag.retriever import build_itinerary_query, get_retriever

# Configure structured logging
logging.basicConfig(level=config.LOG_LEVEL, format="%(message)s")

structlog.configure(
    processors=[
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = structlog.get_logger()

app = Quart(__name__)


class RetrieveRequest(BaseModel):
    """Body of POST /api/rag/retrieve."""

    query: str = Field(max_length=config.MAX_QUERY_LENGTH)
    chunks: List[str]
    embedding_api_key: Optional[str] = None
    top_k: int = config.RETRIEVAL_TOP_K


class ContextRequest(BaseModel):
    """Body of POST /api/rag/context."""

    destination: str = Field(min_length=1, max_length=200)
    days: int = Field(gt=0)
    preferences: Optional[str] = Field(default=None, max_length=config.MAX_QUERY_LENGTH)
    chunks: List[str] = Field(default_factory=list)
    embedding_api_key: Optional[str] = None
    top_k: int = config.RETRIEVAL_TOP_K


def _validation_error(e: ValidationError):
    return jsonify({
        "error": "Invalid request",
        "details": e.errors(include_url=False, include_context=False),
    }), 400


@app.route("/api/documents", methods=["POST"])
async def upload_document():
    """Extract and chunk an uploaded travel document.

    Accepts either multipart form data with a ``file`` field, or JSON:
    {
        "text": "already extracted text",
        "file_name": "optional name",
        "chunk_size": 500  // optional
    }

    Returns JSON:
    {
        "success": true,
        "file_name": "...",
        "file_type": "text",
        "extracted_text": "...",
        "chunks": [...],
        "chunk_count": 3,
        "stats": {...}
    }
    """
    try:
        if request.is_json:
            data = await request.get_json() or {}
            text = data.get("text")
            if not isinstance(text, str):
                return jsonify({"error": "Missing 'text' in request body"}), 400
            if len(text.encode("utf-8")) > config.MAX_DOCUMENT_BYTES:
                return jsonify({"error": "Document too large"}), 413
            file_name = data.get("file_name") or "document.txt"
            file_type = "text"
            chunk_size = data.get("chunk_size")
        else:
            files = await request.files
            form = await request.form
            upload = files.get("file")
            if upload is None:
                return jsonify({"error": "No file provided"}), 400

            content = upload.read()
            if len(content) > config.MAX_DOCUMENT_BYTES:
                return jsonify({"error": "Document too large"}), 413

            file_name = upload.filename or "upload"
            mime_type = upload.mimetype or "application/octet-stream"
            file_type = document_kind(mime_type)
            text = await extract_text(content, mime_type)
            chunk_size = form.get("chunk_size")

        chunker = TextChunker(chunk_size=int(chunk_size) if chunk_size is not None else None)
        chunks = chunker.chunk_text(text)

        logger.info(
            "document_processed",
            file_name=file_name,
            text_length=len(text),
            chunk_count=len(chunks),
        )

        return jsonify({
            "success": True,
            "file_name": file_name,
            "file_type": file_type,
            "extracted_text": text,
            "chunks": chunks,
            "chunk_count": len(chunks),
            "stats": chunker.get_chunk_stats(chunks),
        })

    except UnsupportedDocumentError as e:
        logger.warning("unsupported_document", mime_type=e.mime_type, error=str(e))
        return jsonify({"error": "Unsupported file type", "details": str(e)}), 415

    except (TypeError, ValueError) as e:
        return jsonify({"error": "Invalid chunk size", "details": str(e)}), 400

    except Exception as e:
        logger.error("document_upload_error", error=str(e), error_type=type(e).__name__)
        return jsonify({"error": "Failed to process document"}), 500


@app.route("/api/rag/retrieve", methods=["POST"])
async def retrieve_chunks():
    """Select the chunks most relevant to a query.

    Expects JSON body:
    {
        "query": "Tokyo 3天 food",
        "chunks": ["...", "..."],
        "embedding_api_key": "optional provider key",
        "top_k": 5
    }

    Returns JSON:
    {
        "chunks": [...],
        "strategy": "vector" | "keyword",
        "context": "chunks joined with blank lines"
    }
    """
    try:
        body = RetrieveRequest.model_validate(await request.get_json(silent=True) or {})
    except ValidationError as e:
        return _validation_error(e)

    try:
        result = await get_retriever().retrieve_result(
            body.query,
            body.chunks,
            embedding_credential=body.embedding_api_key,
            top_k=body.top_k,
        )
    except InvalidArgumentError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        logger.error("retrieve_endpoint_error", error=str(e), error_type=type(e).__name__)
        return jsonify({"error": "Retrieval failed"}), 500

    return jsonify({
        "chunks": result.chunks,
        "strategy": result.strategy,
        "context": result.context,
    })


@app.route("/api/rag/context", methods=["POST"])
async def itinerary_context():
    """Build the document context for an itinerary generation request.

    Expects JSON body:
    {
        "destination": "東京",
        "days": 3,
        "preferences": "optional",
        "chunks": ["...", "..."],
        "embedding_api_key": "optional provider key",
        "top_k": 5
    }

    Returns JSON:
    {
        "query": "東京 3天 ... 旅遊行程",
        "context": "...",
        "chunks": [...],
        "strategy": "vector" | "keyword"
    }
    """
    try:
        body = ContextRequest.model_validate(await request.get_json(silent=True) or {})
    except ValidationError as e:
        return _validation_error(e)

    if not body.chunks:
        return jsonify({"error": "No document content provided; upload a travel document first"}), 400

    query = build_itinerary_query(body.destination, body.days, body.preferences)

    try:
        result = await get_retriever().retrieve_result(
            query,
            body.chunks,
            embedding_credential=body.embedding_api_key,
            top_k=body.top_k,
        )
    except InvalidArgumentError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        logger.error("context_endpoint_error", error=str(e), error_type=type(e).__name__)
        return jsonify({"error": "Retrieval failed"}), 500

    logger.info(
        "itinerary_context_built",
        destination=body.destination,
        days=body.days,
        strategy=result.strategy,
        context_length=len(result.context),
    )

    return jsonify({
        "query": query,
        "context": result.context,
        "chunks": result.chunks,
        "strategy": result.strategy,
    })


@app.route("/health/live")
async def health_live():
    """Liveness check - report that the app is running."""
    return jsonify({"status": "alive"}), 200


@app.errorhandler(404)
async def not_found(error):
    """Handle 404 errors."""
    return jsonify({"error": "Not found"}), 404


@app.errorhandler(500)
async def internal_error(error):
    """Handle 500 errors."""
    logger.error("internal_server_error", error=str(error))
    return jsonify({"error": "Internal server error"}), 500


if __name__ == "__main__":
    # For development - use hypercorn in production
    app.run(host="0.0.0.0", port=5000, debug=True)
