"""Application exception hierarchy.

All custom exceptions inherit from AgentPlatformError.
Each exception has an error code for structured error handling.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error handling."""

    # General errors (1xxx)
    INTERNAL_ERROR = "AGT-1000"
    CONFIGURATION_ERROR = "AGT-1001"
    VALIDATION_ERROR = "AGT-1002"

    # Data file errors (2xxx)
    DOCUMENT_NOT_FOUND = "AGT-2000"
    DOCUMENT_PARSE_ERROR = "AGT-2001"

    # Embedding errors (3xxx)
    EMBEDDING_SERVICE_ERROR = "AGT-3000"
    EMBEDDING_EMPTY_RESULT = "AGT-3001"

    # Vector store errors (4xxx)
    VECTOR_STORE_ERROR = "AGT-4000"
    BULK_INSERT_FAILED = "AGT-4001"
    INDEX_CREATION_FAILED = "AGT-4002"

    # LLM errors (5xxx)
    LLM_SERVICE_ERROR = "AGT-5000"
    LLM_TIMEOUT = "AGT-5001"
    LLM_RATE_LIMIT = "AGT-5002"

    # Planner errors (6xxx)
    TOOL_NOT_INVOKED = "AGT-6000"
    UNEXPECTED_TOOL_INVOCATION = "AGT-6001"
    MALFORMED_TOOL_ARGUMENTS = "AGT-6002"
    TRUNCATED_PLANNER_RESPONSE = "AGT-6003"


class AgentPlatformError(Exception):
    """Base exception for all agent platform errors.

    Attributes:
        message: Human-readable error message.
        code: Structured error code.
        details: Additional error context.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
            }
        }


class ConfigurationError(AgentPlatformError):
    """Configuration or environment error."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, details)


class ValidationError(AgentPlatformError):
    """Input validation error."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details)


class DocumentError(AgentPlatformError):
    """Hotel data file error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.DOCUMENT_NOT_FOUND,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class EmbeddingError(AgentPlatformError):
    """Embedding provider failed or returned a degenerate result."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.EMBEDDING_SERVICE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class VectorStoreError(AgentPlatformError):
    """Vector store operation error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.VECTOR_STORE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class BulkInsertError(VectorStoreError):
    """Bulk insert where not a single document was written."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.BULK_INSERT_FAILED, details)


class LLMError(AgentPlatformError):
    """LLM service error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.LLM_SERVICE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class PlannerError(AgentPlatformError):
    """Planner agent could not produce a tool invocation."""


class ToolNotInvoked(PlannerError):
    """Planner model answered without calling a tool."""

    def __init__(
        self,
        content: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.content = content or ""
        if self.content:
            message = f"No tool calls in response - model returned: {self.content}"
        else:
            message = "No tool calls in response and no text content"
        super().__init__(
            message,
            ErrorCode.TOOL_NOT_INVOKED,
            {"content": self.content, **(details or {})},
        )


class UnexpectedToolInvocation(PlannerError):
    """Planner model called a tool other than the search tool."""

    def __init__(
        self,
        tool_name: str,
        expected: str,
    ) -> None:
        self.tool_name = tool_name
        super().__init__(
            f"Unexpected tool called: {tool_name}",
            ErrorCode.UNEXPECTED_TOOL_INVOCATION,
            {"tool": tool_name, "expected": expected},
        )


class MalformedToolArguments(PlannerError):
    """Tool call arguments could not be decoded."""

    def __init__(
        self,
        message: str,
        raw_arguments: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.raw_arguments = raw_arguments
        super().__init__(
            message,
            ErrorCode.MALFORMED_TOOL_ARGUMENTS,
            {"raw_arguments": raw_arguments, **(details or {})},
        )


class TruncatedPlannerResponse(PlannerError):
    """Planner response finished for a reason other than tool_calls or stop."""

    def __init__(self, finish_reason: str) -> None:
        self.finish_reason = finish_reason
        super().__init__(
            f"Unexpected finish reason: {finish_reason} (expected 'tool_calls' or 'stop')",
            ErrorCode.TRUNCATED_PLANNER_RESPONSE,
            {"finish_reason": finish_reason},
        )
