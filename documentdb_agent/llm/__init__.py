"""LLM client module."""

from documentdb_agent.llm.client import AzureOpenAIChatClient, LLMClient
from documentdb_agent.llm.models import (
    ChatCompletionResult,
    FinishReason,
    Message,
    Role,
    ToolCall,
    ToolDefinition,
)
from documentdb_agent.llm.prompts import (
    SEARCH_TOOL_DESCRIPTION,
    SEARCH_TOOL_NAME,
    PlannerPromptTemplate,
    PromptTemplate,
    SynthesizerPromptTemplate,
)

__all__ = [
    "SEARCH_TOOL_DESCRIPTION",
    "SEARCH_TOOL_NAME",
    "AzureOpenAIChatClient",
    "ChatCompletionResult",
    "FinishReason",
    "LLMClient",
    "Message",
    "PlannerPromptTemplate",
    "PromptTemplate",
    "Role",
    "SynthesizerPromptTemplate",
    "ToolCall",
    "ToolDefinition",
]
