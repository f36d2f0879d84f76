#!/usr/bin/env python
"""Ask the hotel agent for a recommendation.

Usage:
    python -m scripts.run_agent --query "cheap hotel near downtown" --nearest-neighbors 5

Query and neighbor count default to AGENT_QUERY and AGENT_NEAREST_NEIGHBORS.
"""

import argparse
import asyncio
import sys

from documentdb_agent.agents.pipeline import open_pipeline
from documentdb_agent.config import get_settings
from documentdb_agent.exceptions import AgentPlatformError
from documentdb_agent.logging_config import get_logger, setup_logging

logger = get_logger(__name__)


async def run_agent(query: str, nearest_neighbors: int, debug: bool = False) -> bool:
    """Run the planner and synthesizer once and print the answer.

    Returns:
        True if an answer was produced, False otherwise.
    """
    settings = get_settings()
    setup_logging(debug=debug or None)

    print(f"\nQuery: {query}")
    print(f"Nearest Neighbors: {nearest_neighbors}")

    try:
        async with open_pipeline(settings) as pipeline:
            result = await pipeline.run(query, nearest_neighbors)
    except AgentPlatformError as e:
        logger.error(f"Agent failed: {e.message}", extra={"error_code": e.code.value})
        print(f"\nAgent failed [{e.code.value}]: {e.message}", file=sys.stderr)
        return False

    if debug or settings.debug:
        print("\n--- HOTEL CONTEXT ---")
        print(result.tool_output)

    print("\n--- FINAL ANSWER ---")
    print(result.answer)
    return True


def main() -> None:
    """Main entry point."""
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="Get a hotel recommendation from the agent",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--query",
        default=settings.agent.query,
        help="What you are looking for",
    )
    parser.add_argument(
        "--nearest-neighbors",
        type=int,
        default=settings.agent.nearest_neighbors,
        help="Number of hotels to retrieve (1-20)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print the search results handed to the synthesizer",
    )

    args = parser.parse_args()

    succeeded = asyncio.run(
        run_agent(
            query=args.query,
            nearest_neighbors=args.nearest_neighbors,
            debug=args.debug,
        )
    )

    sys.exit(0 if succeeded else 1)


if __name__ == "__main__":
    main()
