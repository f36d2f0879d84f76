"""Planner and synthesizer agents and the pipeline that chains them."""

from documentdb_agent.agents.models import (
    PipelineResult,
    PlannerState,
    SearchToolArguments,
    ToolInvocation,
    parse_tool_arguments,
)
from documentdb_agent.agents.pipeline import AgentPipeline, open_pipeline
from documentdb_agent.agents.planner import PlannerAgent, resolve_nearest_neighbors
from documentdb_agent.agents.synthesizer import SynthesizerAgent
from documentdb_agent.agents.tools import SEARCH_ERROR_MESSAGE, VectorSearchTool

__all__ = [
    "SEARCH_ERROR_MESSAGE",
    "AgentPipeline",
    "PipelineResult",
    "PlannerAgent",
    "PlannerState",
    "SearchToolArguments",
    "SynthesizerAgent",
    "ToolInvocation",
    "VectorSearchTool",
    "open_pipeline",
    "parse_tool_arguments",
    "resolve_nearest_neighbors",
]
