"""API routes for hotel recommendations."""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, Field

from documentdb_agent.agents.models import PipelineResult
from documentdb_agent.agents.pipeline import AgentPipeline
from documentdb_agent.logging_config import get_logger
from documentdb_agent.vectorstore.models import (
    MAX_NEAREST_NEIGHBORS,
    MIN_NEAREST_NEIGHBORS,
)

logger = get_logger(__name__)


# Create router
router = APIRouter(prefix="/api/v1", tags=["Agent"])


class RecommendRequest(BaseModel):
    """Request body for a hotel recommendation."""

    query: str = Field(min_length=1, description="What the user is looking for")
    nearest_neighbors: int = Field(
        default=5,
        ge=MIN_NEAREST_NEIGHBORS,
        le=MAX_NEAREST_NEIGHBORS,
        description="Number of hotels to retrieve",
    )


class RecommendResponse(BaseModel):
    """Recommendation and the search behind it."""

    answer: str = Field(description="Final recommendation")
    refined_query: str = Field(description="Query the planner searched with")
    nearest_neighbors: int = Field(description="Number of hotels retrieved")
    tool_output: str = Field(description="Formatted search results")


def get_pipeline(request: Request) -> AgentPipeline:
    """Dependency returning the pipeline opened by the app lifespan."""
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        logger.warning("Agent pipeline not configured")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "error": "Agent pipeline not configured",
                "message": "The agent requires Azure OpenAI and DocumentDB to be configured",
            },
        )
    return pipeline


@router.post("/recommend", response_model=RecommendResponse)
async def recommend_endpoint(
    request: RecommendRequest,
    pipeline: AgentPipeline = Depends(get_pipeline),
) -> RecommendResponse:
    """Plan a search, run it and synthesize a recommendation."""
    result = await pipeline.run(request.query, request.nearest_neighbors)
    return pipeline_result_to_response(result)


def pipeline_result_to_response(result: PipelineResult) -> RecommendResponse:
    """Convert internal PipelineResult to API RecommendResponse."""
    return RecommendResponse(
        answer=result.answer,
        refined_query=result.refined_query,
        nearest_neighbors=result.nearest_neighbors,
        tool_output=result.tool_output,
    )
