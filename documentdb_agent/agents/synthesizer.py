"""Synthesizer agent: compares the top hits and writes the recommendation."""

from documentdb_agent.exceptions import ErrorCode, LLMError
from documentdb_agent.llm.client import LLMClient
from documentdb_agent.llm.models import Message, Role
from documentdb_agent.llm.prompts import SynthesizerPromptTemplate
from documentdb_agent.logging_config import get_logger

logger = get_logger(__name__)

SYNTHESIZER_TEMPERATURE = 0.3


class SynthesizerAgent:
    """Single tool-free chat call over the planner's tool output."""

    def __init__(
        self,
        llm_client: LLMClient,
        prompt_template: SynthesizerPromptTemplate | None = None,
    ) -> None:
        self._llm = llm_client
        self._prompt = prompt_template or SynthesizerPromptTemplate()

    def build_messages(self, user_query: str, tool_output: str) -> list[Message]:
        system_prompt, user_prompt = self._prompt.build_prompt(user_query, tool_output)
        return [
            Message(role=Role.SYSTEM, content=system_prompt),
            Message(role=Role.USER, content=user_prompt),
        ]

    async def run(self, user_query: str, tool_output: str) -> str:
        """Produce the final recommendation.

        Raises:
            LLMError: If the chat call fails or returns no text.
        """
        result = await self._llm.complete(
            messages=self.build_messages(user_query, tool_output),
            temperature=SYNTHESIZER_TEMPERATURE,
        )

        answer = (result.content or "").strip()
        if not answer:
            raise LLMError(
                "Synthesizer returned an empty answer",
                code=ErrorCode.LLM_SERVICE_ERROR,
                details={"finish_reason": result.finish_reason},
            )

        logger.debug(
            "Synthesizer answered",
            extra={"completion_tokens": result.completion_tokens},
        )
        return answer
