"""Vector search tool exposed to the planner agent."""

from documentdb_agent.documents.formatting import format_hotel_block, join_blocks
from documentdb_agent.embeddings.service import EmbeddingService
from documentdb_agent.exceptions import AgentPlatformError
from documentdb_agent.llm.models import ToolDefinition
from documentdb_agent.llm.prompts import SEARCH_TOOL_DESCRIPTION, SEARCH_TOOL_NAME
from documentdb_agent.logging_config import get_logger
from documentdb_agent.vectorstore.models import (
    MAX_NEAREST_NEIGHBORS,
    MIN_NEAREST_NEIGHBORS,
    SearchResult,
)
from documentdb_agent.vectorstore.service import VectorStore

logger = get_logger(__name__)

SEARCH_ERROR_MESSAGE = "Error occurred while searching for hotels"


class VectorSearchTool:
    """Embeds a query and returns the nearest hotels as formatted text.

    ``execute`` is the tool-call boundary: it always returns a string, turning
    failures into a readable error message.
    """

    name = SEARCH_TOOL_NAME
    description = SEARCH_TOOL_DESCRIPTION

    def __init__(
        self,
        embedding_service: EmbeddingService,
        vector_store: VectorStore,
    ) -> None:
        self._embedding_service = embedding_service
        self._vector_store = vector_store

    @property
    def vector_store(self) -> VectorStore:
        return self._vector_store

    @property
    def definition(self) -> ToolDefinition:
        """Function definition sent with the planner request."""
        return ToolDefinition(
            name=self.name,
            description=self.description,
            parameters={
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": (
                            "Natural language search query describing desired "
                            "hotel characteristics"
                        ),
                    },
                    "nearestNeighbors": {
                        "type": "integer",
                        "description": "Number of results to return (1-20)",
                        "minimum": MIN_NEAREST_NEIGHBORS,
                        "maximum": MAX_NEAREST_NEIGHBORS,
                        "default": 5,
                    },
                },
                "required": ["query", "nearestNeighbors"],
            },
        )

    async def search(self, query: str, k: int) -> list[SearchResult]:
        """Embed ``query`` and fetch its ``k`` nearest hotels.

        Raises:
            EmbeddingError: If the embedding provider fails.
            VectorStoreError: If the search fails.
        """
        embedding = await self._embedding_service.embed(query)
        return await self._vector_store.vector_search(embedding.embedding, k)

    @staticmethod
    def format_result(result: SearchResult) -> str:
        return format_hotel_block(result.hotel, result.score)

    def format_results(self, results: list[SearchResult]) -> str:
        return join_blocks([self.format_result(r) for r in results])

    async def execute(self, query: str, k: int) -> str:
        """Run the search and format the hits; never raises."""
        try:
            results = await self.search(query, k)
        except AgentPlatformError as e:
            logger.error(
                f"Search tool failed: {e.message}",
                extra={"error_code": e.code.value, "k": k},
            )
            return f"{SEARCH_ERROR_MESSAGE}: {e.message}"
        except Exception as e:
            logger.exception("Search tool failed unexpectedly")
            return f"{SEARCH_ERROR_MESSAGE}: {e}"

        for rank, result in enumerate(results, start=1):
            logger.info(
                f"Hotel #{rank}: {result.hotel.hotel_name}, Score: {result.score:.6f}"
            )

        return self.format_results(results)
