"""RAG (Retrieval-Augmented Generation) pipeline components.

This package contains modules for:
- Document text extraction
- Sentence-respecting chunking
- Keyword-overlap scoring
- Embedding-first retrieval with keyword fallback
"""
