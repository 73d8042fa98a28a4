"""Caller-facing errors raised by the RAG pipeline."""


class InvalidArgumentError(ValueError):
    """Raised when a caller passes arguments that can never produce a result.

    Examples are an empty chunk list or a non-positive ``top_k``. These point
    at a bug upstream and are surfaced rather than absorbed.
    """


class UnsupportedDocumentError(ValueError):
    """Raised when an uploaded document type cannot be turned into text."""

    def __init__(self, message: str, mime_type: str = ""):
        super().__init__(message)
        self.mime_type = mime_type
