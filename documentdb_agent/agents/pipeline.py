"""Two-agent pipeline: planner search followed by synthesized recommendation."""

import time
from collections.abc import AsyncIterator
from contextlib import AsyncExitStack, asynccontextmanager

from documentdb_agent.agents.models import PipelineResult
from documentdb_agent.agents.planner import PlannerAgent
from documentdb_agent.agents.synthesizer import SynthesizerAgent
from documentdb_agent.agents.tools import VectorSearchTool
from documentdb_agent.config import Settings, get_settings
from documentdb_agent.embeddings.service import AzureOpenAIEmbeddingService
from documentdb_agent.llm.client import AzureOpenAIChatClient
from documentdb_agent.logging_config import get_logger
from documentdb_agent.observability.metrics import track_pipeline_run
from documentdb_agent.vectorstore.service import DocumentDBVectorStore, VectorStore

logger = get_logger(__name__)


class AgentPipeline:
    """Runs the planner to completion, then the synthesizer on its output."""

    def __init__(
        self,
        planner: PlannerAgent,
        synthesizer: SynthesizerAgent,
    ) -> None:
        self._planner = planner
        self._synthesizer = synthesizer

    @property
    def planner(self) -> PlannerAgent:
        return self._planner

    @property
    def vector_store(self) -> VectorStore:
        return self._planner.search_tool.vector_store

    async def run(self, query: str, nearest_neighbors: int) -> PipelineResult:
        """Answer one hotel request.

        Args:
            query: The user's request.
            nearest_neighbors: Neighbor count suggested to the planner.

        Returns:
            PipelineResult with the refined search and the final answer.

        Raises:
            AgentPlatformError: Any planner or synthesizer failure. Search
                failures do not raise; they reach the synthesizer as text.
        """
        logger.info(
            "Running agent pipeline",
            extra={"query_length": len(query), "nearest_neighbors": nearest_neighbors},
        )
        start = time.perf_counter()

        try:
            invocation = await self._planner.plan(query, nearest_neighbors)
            tool_output = await self._planner.execute(invocation)
            answer = await self._synthesizer.run(query, tool_output)
        except Exception:
            track_pipeline_run(time.perf_counter() - start, success=False)
            raise

        duration = time.perf_counter() - start
        track_pipeline_run(duration)
        logger.info(
            "Agent pipeline completed",
            extra={
                "refined_query": invocation.query,
                "nearest_neighbors": invocation.nearest_neighbors,
                "duration_seconds": round(duration, 3),
            },
        )

        return PipelineResult(
            query=query,
            requested_k=nearest_neighbors,
            refined_query=invocation.query,
            nearest_neighbors=invocation.nearest_neighbors,
            tool_output=tool_output,
            answer=answer,
        )


@asynccontextmanager
async def open_pipeline(settings: Settings | None = None) -> AsyncIterator[AgentPipeline]:
    """Build the pipeline and its clients, closing every client on exit.

    Raises:
        ConfigurationError: If the Azure OpenAI endpoint or API key is unset.

    Example:
        >>> async with open_pipeline() as pipeline:
        ...     result = await pipeline.run("cheap hotel near downtown", 5)
    """
    settings = settings or get_settings()
    settings.openai.require_credentials()

    async with AsyncExitStack() as stack:
        embedding_service = AzureOpenAIEmbeddingService(settings=settings.openai)
        stack.push_async_callback(embedding_service.close)
        planner_client = AzureOpenAIChatClient.for_planner(settings=settings.openai)
        stack.push_async_callback(planner_client.close)
        synth_client = AzureOpenAIChatClient.for_synthesizer(settings=settings.openai)
        stack.push_async_callback(synth_client.close)
        vector_store = DocumentDBVectorStore(
            settings=settings.documentdb,
            similarity=settings.vector_index.similarity,
        )
        stack.push_async_callback(vector_store.close)

        search_tool = VectorSearchTool(embedding_service, vector_store)
        yield AgentPipeline(
            planner=PlannerAgent(planner_client, search_tool),
            synthesizer=SynthesizerAgent(synth_client),
        )

    logger.debug("Agent pipeline clients closed")
