#!/usr/bin/env python
"""Embed the hotel data file and load it into DocumentDB.

Usage:
    python -m scripts.upload_documents --data-file data/HotelsData_toCosmosDB.JSON

Creates the vector index configured by the VECTOR_INDEX_* settings once the
documents are in.
"""

import argparse
import asyncio
import sys
import time
from pathlib import Path

from documentdb_agent.config import get_settings
from documentdb_agent.documents.loader import HotelDataLoader
from documentdb_agent.embeddings.service import AzureOpenAIEmbeddingService
from documentdb_agent.exceptions import AgentPlatformError
from documentdb_agent.ingestion import DocumentIngestor
from documentdb_agent.logging_config import get_logger, setup_logging
from documentdb_agent.vectorstore.models import VectorIndexConfig
from documentdb_agent.vectorstore.service import DocumentDBVectorStore

logger = get_logger(__name__)


async def upload_documents(data_file: Path, create_index: bool = True) -> bool:
    """Load, embed and insert the hotels, then build the index.

    Returns:
        True if at least one hotel was stored, False otherwise.
    """
    settings = get_settings()
    setup_logging()

    try:
        settings.openai.require_credentials()
    except AgentPlatformError as e:
        print(f"\nUpload failed [{e.code.value}]: {e.message}", file=sys.stderr)
        return False

    print(f"Loading hotels from: {data_file}")

    embedding_service = AzureOpenAIEmbeddingService(settings=settings.openai)
    vector_store = DocumentDBVectorStore(
        settings=settings.documentdb,
        similarity=settings.vector_index.similarity,
    )
    ingestor = DocumentIngestor(
        loader=HotelDataLoader(),
        embedding_service=embedding_service,
        vector_store=vector_store,
        batch_size=settings.openai.embedding_batch_size,
    )
    index_config = (
        VectorIndexConfig.from_settings(settings.vector_index) if create_index else None
    )

    start = time.perf_counter()
    try:
        result = await ingestor.ingest(data_file, index_config)
    except AgentPlatformError as e:
        logger.error(f"Upload failed: {e.message}", extra={"error_code": e.code.value})
        print(f"\nUpload failed [{e.code.value}]: {e.message}", file=sys.stderr)
        return False
    finally:
        await embedding_service.close()
        await vector_store.close()

    print(f"Loaded {result.hotels_loaded} hotels")
    print(f"Generated embeddings for {result.embedded} hotels")
    if result.skipped:
        print(f"Skipped {result.skipped} hotels (embedding failed)")
    print(f"Inserted {result.insert.inserted} documents, {result.insert.failed} failed")
    if result.index_created:
        print(
            f"Vector index created ({settings.vector_index.algorithm.value}, "
            f"{settings.vector_index.similarity.value})"
        )
    print(f"\nUpload completed in {time.perf_counter() - start:.2f} seconds")
    return True


def main() -> None:
    """Main entry point."""
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="Upload hotel documents with embeddings to DocumentDB",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--data-file",
        type=Path,
        default=settings.data_file,
        help="Path to the hotel JSON data file",
    )
    parser.add_argument(
        "--skip-index",
        action="store_true",
        help="Insert documents without creating the vector index",
    )

    args = parser.parse_args()

    succeeded = asyncio.run(
        upload_documents(
            data_file=args.data_file,
            create_index=not args.skip_index,
        )
    )

    sys.exit(0 if succeeded else 1)


if __name__ == "__main__":
    main()
