"""Agent pipeline data models."""

import json
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, StrictInt
from pydantic import ValidationError as PydanticValidationError

from documentdb_agent.exceptions import MalformedToolArguments


class PlannerState(str, Enum):
    """Planner lifecycle within one run."""

    AWAITING_TOOL_CALL = "awaiting_tool_call"
    COMPLETED = "completed"


class SearchToolArguments(BaseModel):
    """Decoded arguments of a search tool call.

    ``nearest_neighbors`` is ``None`` when the model left it out.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
    )

    query: str = Field(min_length=1, description="Refined search query")
    nearest_neighbors: StrictInt | None = Field(
        default=None,
        ge=0,
        alias="nearestNeighbors",
        description="Requested result count",
    )


def parse_tool_arguments(raw: str) -> SearchToolArguments:
    """Decode and validate the raw JSON arguments of a search tool call.

    Raises:
        MalformedToolArguments: If the text is not a JSON object with a
            non-empty ``query`` and an optional non-negative JSON integer
            ``nearestNeighbors``.
    """
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedToolArguments(
            f"Failed to parse tool arguments: {e}",
            raw_arguments=raw,
        ) from e

    if not isinstance(payload, dict):
        raise MalformedToolArguments(
            "Tool arguments must be a JSON object",
            raw_arguments=raw,
        )

    try:
        return SearchToolArguments.model_validate(payload)
    except PydanticValidationError as e:
        raise MalformedToolArguments(
            "Invalid tool arguments",
            raw_arguments=raw,
            details={
                "errors": [
                    {"field": ".".join(str(p) for p in err["loc"]), "msg": err["msg"]}
                    for err in e.errors()
                ]
            },
        ) from e


class ToolInvocation(BaseModel):
    """The search the planner decided on."""

    tool_name: str = Field(description="Called tool")
    query: str = Field(description="Refined search query")
    nearest_neighbors: int = Field(ge=1, le=20, description="Result count")


class PipelineResult(BaseModel):
    """Everything one planner + synthesizer run produced.

    Attributes:
        query: The user's request.
        requested_k: Neighbor count supplied by the caller.
        refined_query: Query the planner sent to the search tool.
        nearest_neighbors: Neighbor count actually used.
        tool_output: Formatted search results handed to the synthesizer.
        answer: Final recommendation.
    """

    query: str
    requested_k: int
    refined_query: str
    nearest_neighbors: int
    tool_output: str
    answer: str
