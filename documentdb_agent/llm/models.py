"""LLM data models."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class Role(str, Enum):
    """Message role in a conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class FinishReason(str, Enum):
    """Why the model stopped generating."""

    STOP = "stop"
    TOOL_CALLS = "tool_calls"
    LENGTH = "length"
    CONTENT_FILTER = "content_filter"
    FUNCTION_CALL = "function_call"


class Message(BaseModel):
    """A message in a conversation."""

    role: Role = Field(description="Message role")
    content: str = Field(description="Message content")


class ToolDefinition(BaseModel):
    """A function tool the model may call.

    Attributes:
        name: Function name the model must use.
        description: Instructions shown to the model.
        parameters: JSON schema of the arguments.
    """

    name: str = Field(description="Function name")
    description: str = Field(description="Function description")
    parameters: dict[str, Any] = Field(description="JSON schema of arguments")

    def to_openai(self) -> dict[str, Any]:
        """Render in the chat completions ``tools`` format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


class ToolCall(BaseModel):
    """A tool call requested by the model.

    ``arguments`` is the raw JSON string exactly as the model produced it;
    decoding and validation belong to the caller.
    """

    id: str = Field(default="", description="Tool call identifier")
    type: str = Field(default="function", description="Tool call type")
    name: str = Field(description="Called function name")
    arguments: str = Field(default="", description="Raw JSON arguments")


class ChatCompletionResult(BaseModel):
    """First choice of a chat completion.

    Attributes:
        content: Text content, if any.
        tool_calls: Tool calls, possibly empty.
        finish_reason: Raw finish reason reported by the service.
        model: Model that served the request.
        prompt_tokens: Tokens in the prompt.
        completion_tokens: Tokens in the completion.
    """

    content: str | None = Field(default=None, description="Text content")
    tool_calls: list[ToolCall] = Field(default_factory=list, description="Tool calls")
    finish_reason: str = Field(default="", description="Finish reason")
    model: str = Field(description="Model used")
    prompt_tokens: int = Field(default=0, description="Prompt token count")
    completion_tokens: int = Field(default=0, description="Completion token count")

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens
