"""Turn uploaded travel documents into plain text.

Text-like uploads are decoded directly. PDFs and images need an external
extractor (OCR or a multimodal model) supplied by the caller.
"""
from typing import Awaitable, Callable, Optional

import structlog

from travel_rag.rag.errors import UnsupportedDocumentError

logger = structlog.get_logger()

SUPPORTED_TYPES = {
    "application/pdf": "pdf",
    "image/jpeg": "image",
    "image/jpg": "image",
    "image/png": "image",
    "image/webp": "image",
    "text/plain": "text",
    "text/markdown": "text",
    "application/json": "text",
}

Extractor = Callable[[bytes, str], Awaitable[str]]


def document_kind(mime_type: str) -> str:
    """Map a MIME type to ``pdf``, ``image`` or ``text``.

    Raises:
        UnsupportedDocumentError: If the type is not supported
    """
    base_type = (mime_type or "").split(";", 1)[0].strip().lower()
    kind = SUPPORTED_TYPES.get(base_type)
    if kind is None:
        raise UnsupportedDocumentError(
            "Unsupported file type; supported: PDF, images (JPEG/PNG/WEBP), text (TXT/MD/JSON)",
            mime_type=mime_type,
        )
    return kind


async def extract_text(
    content: bytes,
    mime_type: str,
    extractor: Optional[Extractor] = None,
) -> str:
    """Extract plain text from an uploaded document.

    Args:
        content: Raw file bytes
        mime_type: Declared content type of the upload
        extractor: Async callable used for PDF and image documents

    Returns:
        Extracted text (possibly empty)

    Raises:
        UnsupportedDocumentError: If the type is unknown, or is a PDF/image
            and no extractor was given
    """
    kind = document_kind(mime_type)

    if kind == "text":
        text = content.decode("utf-8-sig", errors="replace")
    elif extractor is None:
        raise UnsupportedDocumentError(
            f"No text extractor configured for {kind} documents",
            mime_type=mime_type,
        )
    else:
        text = await extractor(content, mime_type)

    logger.info(
        "document_text_extracted",
        kind=kind,
        mime_type=mime_type,
        byte_length=len(content),
        text_length=len(text),
    )

    return text
