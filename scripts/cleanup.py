#!/usr/bin/env python
"""Drop the hotel database.

Usage:
    python -m scripts.cleanup --yes

This cannot be undone; without --yes the script only reports what it would do.
"""

import argparse
import asyncio
import sys

from documentdb_agent.config import get_settings
from documentdb_agent.exceptions import AgentPlatformError
from documentdb_agent.logging_config import get_logger, setup_logging
from documentdb_agent.vectorstore.service import DocumentDBVectorStore

logger = get_logger(__name__)


async def cleanup() -> bool:
    """Drop the configured database.

    Returns:
        True if the database was dropped, False otherwise.
    """
    settings = get_settings()
    setup_logging()

    vector_store = DocumentDBVectorStore(settings=settings.documentdb)

    print(f"Deleting database: {settings.documentdb.database_name}")
    try:
        await vector_store.drop_database()
    except AgentPlatformError as e:
        logger.error(f"Cleanup failed: {e.message}", extra={"error_code": e.code.value})
        print(f"\nCleanup failed [{e.code.value}]: {e.message}", file=sys.stderr)
        return False
    finally:
        await vector_store.close()

    print("Database deleted successfully!")
    return True


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Drop the DocumentDB hotel database",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Confirm the irreversible drop",
    )

    args = parser.parse_args()

    if not args.yes:
        database = get_settings().documentdb.database_name
        print(f"Would drop database '{database}'. Re-run with --yes to confirm.")
        sys.exit(1)

    sys.exit(0 if asyncio.run(cleanup()) else 1)


if __name__ == "__main__":
    main()
