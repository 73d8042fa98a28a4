"""Travel document RAG service: chunking and context retrieval for itinerary generation."""
