#!/usr/bin/env python
"""Chunk a local travel document and show the chunks retrieved for a query.

Usage:
    python scripts/retrieve_doc.py guide.txt --query "Tokyo sushi"
    python scripts/retrieve_doc.py guide.txt --destination 東京 --days 3 --preferences 美食
    HF_API_KEY=hf_xxx python scripts/retrieve_doc.py guide.txt --query "Tokyo sushi"
"""
import argparse
import asyncio
import os
import sys
from datetime import datetime
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from travel_rag import config
from travel_rag.rag.chunker import TextChunker
from travel_rag.rag.retriever import Retriever, build_itinerary_query
import structlog

logger = structlog.get_logger()


def print_chunks(title: str, chunks: list[str], verbose: bool) -> None:
    """Print a numbered list of chunks."""
    print(f"\n{'=' * 60}")
    print(f"  {title}")
    print(f"{'=' * 60}\n")
    for i, chunk in enumerate(chunks, 1):
        preview = chunk if verbose or len(chunk) <= 120 else chunk[:120] + "..."
        print(f"  [{i}] ({len(chunk)} chars) {preview}\n")


async def main():
    """Main entry point for the retrieval script."""
    parser = argparse.ArgumentParser(
        description="Chunk a travel document and retrieve context for a query",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/retrieve_doc.py guide.txt --query "Tokyo sushi"
  python scripts/retrieve_doc.py guide.txt --destination Tokyo --days 3
  python scripts/retrieve_doc.py guide.txt --query "Tokyo" --top-k 3 --verbose
        """,
    )

    parser.add_argument("document", type=Path, help="UTF-8 text or markdown file")

    parser.add_argument("--query", "-q", default=None, help="Free-text retrieval query")
    parser.add_argument("--destination", default=None, help="Trip destination (builds the query)")
    parser.add_argument("--days", type=int, default=None, help="Trip length in days")
    parser.add_argument("--preferences", default=None, help="Travel preferences")

    parser.add_argument(
        "--top-k",
        type=int,
        default=config.RETRIEVAL_TOP_K,
        help=f"Number of chunks to retrieve (default: {config.RETRIEVAL_TOP_K})",
    )

    parser.add_argument(
        "--chunk-size",
        type=int,
        default=config.CHUNK_SIZE,
        help=f"Chunk size in characters (default: {config.CHUNK_SIZE})",
    )

    parser.add_argument(
        "--hf-key",
        default=os.getenv("HF_API_KEY"),
        help="Embedding provider key (default: $HF_API_KEY); keyword ranking when absent",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Print full chunk text",
    )

    args = parser.parse_args()

    if args.query is None and (args.destination is None or args.days is None):
        parser.error("either --query or both --destination and --days are required")

    try:
        text = args.document.read_text(encoding="utf-8")

        query = args.query or build_itinerary_query(args.destination, args.days, args.preferences)

        print("\n📋 Configuration:")
        print(f"   Document:         {args.document}")
        print(f"   Query:            {query}")
        print(f"   Chunk size:       {args.chunk_size} chars")
        print(f"   Top-K retrieval:  {args.top_k}")
        print(f"   Embeddings:       {'enabled' if args.hf_key else 'disabled (keyword ranking)'}")

        chunker = TextChunker(chunk_size=args.chunk_size)
        chunks = chunker.chunk_text(text)
        stats = chunker.get_chunk_stats(chunks)

        print(f"\n  📝 Chunks created:  {stats['chunk_count']}")
        print(f"  📏 Average size:    {stats['avg_chunk_size']} chars")

        start_time = datetime.now()
        result = await Retriever().retrieve_result(
            query,
            chunks,
            embedding_credential=args.hf_key,
            top_k=args.top_k,
        )
        elapsed_seconds = (datetime.now() - start_time).total_seconds()

        print_chunks(f"Retrieved {len(result.chunks)} chunk(s) via {result.strategy} ranking", result.chunks, args.verbose)
        print(f"  ⏱️  Time elapsed: {elapsed_seconds:.1f}s\n")

    except KeyboardInterrupt:
        print("\n\n⚠️  Retrieval cancelled by user.\n")
        sys.exit(1)

    except (FileNotFoundError, ValueError) as e:
        print(f"\n❌ Error: {e}\n")
        sys.exit(1)

    except Exception as e:
        print(f"\n❌ Error: {e}\n")
        logger.error("retrieve_script_failed", error=str(e), error_type=type(e).__name__)
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
