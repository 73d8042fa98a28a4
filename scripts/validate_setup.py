#!/usr/bin/env python
"""Validate setup - check dependencies, configuration and the embedding provider."""
import sys
import os
import asyncio
from pathlib import Path

# Color codes for terminal output
GREEN = "\033[92m"
RED = "\033[91m"
YELLOW = "\033[93m"
BLUE = "\033[94m"
RESET = "\033[0m"

def print_success(msg):
    print(f"{GREEN}✓{RESET} {msg}")

def print_error(msg):
    print(f"{RED}✗{RESET} {msg}")

def print_info(msg):
    print(f"{BLUE}ℹ{RESET} {msg}")

def print_warning(msg):
    print(f"{YELLOW}⚠{RESET} {msg}")

def print_section(title):
    print(f"\n{BLUE}{'='*60}{RESET}")
    print(f"{BLUE}{title:^60}{RESET}")
    print(f"{BLUE}{'='*60}{RESET}\n")

async def main():
    print_section("Travel RAG - Setup Validation")

    errors = []
    warnings = []

    # 1. Python version check
    print_section("1. Python Environment")
    python_version = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
    print_info(f"Python version: {python_version}")
    if sys.version_info >= (3, 11):
        print_success("Python version >= 3.11")
    else:
        print_error("Python version < 3.11 (required for asyncio.TaskGroup)")
        errors.append("Python version too old")

    in_venv = hasattr(sys, 'real_prefix') or (hasattr(sys, 'base_prefix') and sys.base_prefix != sys.prefix)
    if in_venv:
        print_success("Running in virtual environment")
    else:
        print_warning("Not running in virtual environment (recommended)")
        warnings.append("Not in venv")

    # 2. Import core dependencies
    print_section("2. Core Dependencies")

    dependencies = [
        ("quart", "Quart web framework"),
        ("hypercorn", "Hypercorn ASGI server"),
        ("httpx", "HTTP client"),
        ("numpy", "Vector math"),
        ("pydantic", "Data validation"),
        ("structlog", "Structured logging"),
        ("pytest", "Testing framework"),
    ]

    for module_name, description in dependencies:
        try:
            __import__(module_name)
            print_success(f"{description:30} ({module_name})")
        except ImportError as e:
            print_error(f"{description:30} ({module_name}) - {e}")
            errors.append(f"Missing: {module_name}")

    # 3. Test configuration
    print_section("3. Configuration")

    try:
        sys.path.insert(0, str(Path(__file__).parent.parent))
        from travel_rag import config

        print_success("Config loaded successfully")
        print_info(f"  Embedding endpoint: {config.EMBEDDING_ENDPOINT}")
        print_info(f"  Embedding timeout: {config.EMBEDDING_TIMEOUT}s")
        print_info(f"  Embedding concurrency: {config.EMBEDDING_MAX_CONCURRENCY}")
        print_info(f"  Chunk size: {config.CHUNK_SIZE} chars")
        print_info(f"  Top-K retrieval: {config.RETRIEVAL_TOP_K}")

        if config.CHUNK_SIZE <= 0:
            print_error("CHUNK_SIZE must be positive")
            errors.append("Invalid CHUNK_SIZE")
        if config.RETRIEVAL_TOP_K <= 0:
            print_error("RETRIEVAL_TOP_K must be positive")
            errors.append("Invalid RETRIEVAL_TOP_K")
        if config.EMBEDDING_MAX_CONCURRENCY <= 0:
            print_error("EMBEDDING_MAX_CONCURRENCY must be positive")
            errors.append("Invalid EMBEDDING_MAX_CONCURRENCY")

    except Exception as e:
        print_error(f"Failed to load config: {e}")
        errors.append("Config loading failed")
        return errors, warnings

    # 4. Test the embedding provider with a simple request
    print_section("4. Embedding Provider")

    api_key = os.getenv("HF_API_KEY")
    if not api_key:
        print_warning("HF_API_KEY not set; retrieval will use keyword ranking only")
        warnings.append("No embedding key")
    else:
        try:
            from travel_rag.embedding_client import EmbeddingClient, EmbeddingError

            vector = await EmbeddingClient().embed("test", api_key)
            print_success(f"Embedding API working (dimension: {len(vector)})")

        except EmbeddingError as e:
            print_error(f"Embedding API test failed: {e}")
            if e.status_code in (401, 403):
                print_info("  Check that HF_API_KEY is valid")
            elif e.status_code == 429:
                print_info("  Provider quota exhausted; try again later")
            errors.append(f"Embedding API error: {e}")

    # 5. Summary
    print_section("Summary")

    if not errors:
        print_success("All checks passed! ✨")
        print_info("  Start the service with: hypercorn travel_rag.main:app")
    else:
        print_error(f"Found {len(errors)} error(s):")
        for i, error in enumerate(errors, 1):
            print(f"  {i}. {error}")

    if warnings:
        print_warning(f"\nFound {len(warnings)} warning(s):")
        for i, warning in enumerate(warnings, 1):
            print(f"  {i}. {warning}")

    print()
    return errors, warnings

if __name__ == "__main__":
    errors, warnings = asyncio.run(main())
    sys.exit(1 if errors else 0)
