"""Planner agent: turns a user request into exactly one search tool call."""

from documentdb_agent.agents.models import (
    PlannerState,
    ToolInvocation,
    parse_tool_arguments,
)
from documentdb_agent.agents.tools import VectorSearchTool
from documentdb_agent.exceptions import (
    ToolNotInvoked,
    TruncatedPlannerResponse,
    UnexpectedToolInvocation,
    ValidationError,
)
from documentdb_agent.llm.client import LLMClient
from documentdb_agent.llm.models import FinishReason, Message, Role
from documentdb_agent.llm.prompts import PlannerPromptTemplate
from documentdb_agent.logging_config import get_logger
from documentdb_agent.vectorstore.models import (
    MAX_NEAREST_NEIGHBORS,
    MIN_NEAREST_NEIGHBORS,
)

logger = get_logger(__name__)

_ACCEPTED_FINISH_REASONS = {FinishReason.TOOL_CALLS.value, FinishReason.STOP.value}


def resolve_nearest_neighbors(value: int | None, requested_k: int) -> int:
    """Pick the neighbor count for the search.

    A missing or zero value falls back to ``requested_k``; anything above
    the store limit is clamped to it.
    """
    if not value:
        return requested_k
    if value > MAX_NEAREST_NEIGHBORS:
        logger.warning(
            "Planner asked for too many neighbors, clamping",
            extra={"requested": value, "limit": MAX_NEAREST_NEIGHBORS},
        )
        return MAX_NEAREST_NEIGHBORS
    return value


class PlannerAgent:
    """Agent that must call the search tool once and return its output.

    Example:
        >>> planner = PlannerAgent(llm_client=planner_client, search_tool=tool)
        >>> output = await planner.run("cheap hotel near downtown", 5)
    """

    def __init__(
        self,
        llm_client: LLMClient,
        search_tool: VectorSearchTool,
        prompt_template: PlannerPromptTemplate | None = None,
    ) -> None:
        self._llm = llm_client
        self._tool = search_tool
        self._prompt = prompt_template or PlannerPromptTemplate()
        self.state = PlannerState.AWAITING_TOOL_CALL

    @property
    def search_tool(self) -> VectorSearchTool:
        return self._tool

    def build_messages(self, user_query: str, requested_k: int) -> list[Message]:
        return [
            Message(role=Role.SYSTEM, content=self._prompt.system_prompt),
            Message(
                role=Role.USER,
                content=self._prompt.format(
                    query=user_query, nearest_neighbors=requested_k
                ),
            ),
        ]

    async def plan(self, user_query: str, requested_k: int) -> ToolInvocation:
        """Ask the model for a search tool call and validate it.

        Raises:
            ValidationError: If ``requested_k`` is outside 1-20.
            LLMError: If the chat call fails.
            TruncatedPlannerResponse: If generation stopped for another reason
                than a tool call or a normal stop.
            ToolNotInvoked: If the model answered with text only.
            UnexpectedToolInvocation: If the model called another tool.
            MalformedToolArguments: If the call arguments do not validate.
        """
        if not MIN_NEAREST_NEIGHBORS <= requested_k <= MAX_NEAREST_NEIGHBORS:
            raise ValidationError(
                f"nearest_neighbors must be between {MIN_NEAREST_NEIGHBORS} "
                f"and {MAX_NEAREST_NEIGHBORS}",
                details={"nearest_neighbors": requested_k},
            )

        self.state = PlannerState.AWAITING_TOOL_CALL

        result = await self._llm.complete(
            messages=self.build_messages(user_query, requested_k),
            tools=[self._tool.definition],
            tool_choice="required",
            temperature=0.0,
        )

        finish_reason = result.finish_reason
        # Some deployments omit finish_reason on tool call responses.
        if not finish_reason and result.tool_calls:
            finish_reason = FinishReason.TOOL_CALLS.value
        if finish_reason not in _ACCEPTED_FINISH_REASONS:
            raise TruncatedPlannerResponse(finish_reason)

        if not result.tool_calls:
            raise ToolNotInvoked(result.content)

        if len(result.tool_calls) > 1:
            logger.warning(
                "Planner returned several tool calls, using the first",
                extra={"tool_calls": len(result.tool_calls)},
            )

        call = result.tool_calls[0]
        if call.name != self._tool.name:
            raise UnexpectedToolInvocation(call.name, expected=self._tool.name)

        arguments = parse_tool_arguments(call.arguments)
        nearest_neighbors = resolve_nearest_neighbors(
            arguments.nearest_neighbors, requested_k
        )

        logger.info(
            "Planner selected search",
            extra={
                "refined_query": arguments.query,
                "nearest_neighbors": nearest_neighbors,
            },
        )

        return ToolInvocation(
            tool_name=call.name,
            query=arguments.query,
            nearest_neighbors=nearest_neighbors,
        )

    async def execute(self, invocation: ToolInvocation) -> str:
        """Run the planned search; the tool output is returned unmodified."""
        output = await self._tool.execute(
            invocation.query, invocation.nearest_neighbors
        )
        self.state = PlannerState.COMPLETED
        return output

    async def run(self, user_query: str, requested_k: int) -> str:
        invocation = await self.plan(user_query, requested_k)
        return await self.execute(invocation)
