"""LLM client interface and the Azure OpenAI chat implementation."""

import time
from abc import ABC, abstractmethod
from typing import Any

import httpx

from documentdb_agent.config import AzureOpenAISettings, get_settings
from documentdb_agent.exceptions import ErrorCode, LLMError
from documentdb_agent.llm.models import (
    ChatCompletionResult,
    Message,
    ToolCall,
    ToolDefinition,
)
from documentdb_agent.logging_config import get_logger
from documentdb_agent.observability.metrics import track_llm_request

logger = get_logger(__name__)


class LLMClient(ABC):
    """Abstract base class for chat completion clients."""

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        tools: list[ToolDefinition] | None = None,
        tool_choice: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> ChatCompletionResult:
        """Run one chat completion round trip.

        Args:
            messages: Conversation messages.
            tools: Function tools the model may call.
            tool_choice: ``"auto"``, ``"required"`` or ``"none"``.
            temperature: Sampling temperature override.
            max_tokens: Maximum tokens override.

        Returns:
            The first choice of the completion.

        Raises:
            LLMError: If the request fails.
        """
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model (deployment) name."""
        ...


class AzureOpenAIChatClient(LLMClient):
    """Chat completions against one Azure OpenAI deployment.

    The planner and the synthesizer each get their own instance, built with
    ``for_planner`` and ``for_synthesizer``.
    """

    def __init__(
        self,
        deployment: str,
        api_version: str,
        settings: AzureOpenAISettings | None = None,
        temperature: float = 0.0,
        top_p: float | None = None,
        max_tokens: int | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the chat client.

        Args:
            deployment: Chat deployment name.
            api_version: Azure OpenAI API version.
            settings: Endpoint, key and timeout configuration.
            temperature: Default sampling temperature.
            top_p: Default nucleus sampling value.
            max_tokens: Default completion token limit.
            client: HTTP client (for testing).
        """
        self._settings = settings or get_settings().openai
        self._deployment = deployment
        self._api_version = api_version
        self._temperature = temperature
        self._top_p = top_p
        self._max_tokens = max_tokens
        self._client = client
        self._owns_client = client is None

    @classmethod
    def for_planner(
        cls,
        settings: AzureOpenAISettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> "AzureOpenAIChatClient":
        """Deterministic client for tool selection."""
        settings = settings or get_settings().openai
        return cls(
            deployment=settings.planner_deployment,
            api_version=settings.planner_api_version,
            settings=settings,
            temperature=0.0,
            top_p=1.0,
            max_tokens=settings.planner_max_tokens,
            client=client,
        )

    @classmethod
    def for_synthesizer(
        cls,
        settings: AzureOpenAISettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> "AzureOpenAIChatClient":
        """Client for the final recommendation."""
        settings = settings or get_settings().openai
        return cls(
            deployment=settings.synth_deployment,
            api_version=settings.synth_api_version,
            settings=settings,
            temperature=0.3,
            client=client,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._settings.timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def model_name(self) -> str:
        return self._deployment

    @property
    def url(self) -> str:
        endpoint = self._settings.endpoint.rstrip("/")
        return f"{endpoint}/openai/deployments/{self._deployment}/chat/completions"

    def _build_payload(
        self,
        messages: list[Message],
        tools: list[ToolDefinition] | None,
        tool_choice: str | None,
        temperature: float | None,
        max_tokens: int | None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "messages": [
                {"role": msg.role.value, "content": msg.content} for msg in messages
            ],
            "temperature": self._temperature if temperature is None else temperature,
        }
        if self._top_p is not None:
            payload["top_p"] = self._top_p

        limit = self._max_tokens if max_tokens is None else max_tokens
        if limit is not None:
            payload["max_tokens"] = limit

        if tools:
            payload["tools"] = [tool.to_openai() for tool in tools]
            if tool_choice:
                payload["tool_choice"] = tool_choice

        return payload

    async def complete(
        self,
        messages: list[Message],
        tools: list[ToolDefinition] | None = None,
        tool_choice: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> ChatCompletionResult:
        client = await self._get_client()
        url = self.url
        payload = self._build_payload(messages, tools, tool_choice, temperature, max_tokens)

        logger.debug(
            "Calling chat deployment",
            extra={
                "deployment": self._deployment,
                "messages": len(messages),
                "tools": len(tools or []),
            },
        )

        start = time.perf_counter()
        try:
            response = await client.post(
                url,
                params={"api-version": self._api_version},
                headers={"api-key": self._settings.api_key.get_secret_value()},
                json=payload,
            )
            response.raise_for_status()

        except httpx.TimeoutException as e:
            track_llm_request(self._deployment, time.perf_counter() - start, 0, 0, False)
            logger.error(f"LLM request timed out: {e}")
            raise LLMError(
                "LLM request timed out",
                code=ErrorCode.LLM_TIMEOUT,
                details={"timeout": self._settings.timeout},
            ) from e

        except httpx.HTTPStatusError as e:
            track_llm_request(self._deployment, time.perf_counter() - start, 0, 0, False)
            status = e.response.status_code
            logger.error(f"LLM request failed: {status}")

            if status == 429:
                raise LLMError(
                    "Rate limit exceeded",
                    code=ErrorCode.LLM_RATE_LIMIT,
                    details={"status_code": status},
                ) from e

            raise LLMError(
                f"LLM service returned {status}",
                code=ErrorCode.LLM_SERVICE_ERROR,
                details={"status_code": status},
            ) from e

        except httpx.RequestError as e:
            track_llm_request(self._deployment, time.perf_counter() - start, 0, 0, False)
            logger.error(f"LLM connection error: {e}")
            raise LLMError(
                f"Failed to connect to LLM service: {e}",
                code=ErrorCode.LLM_SERVICE_ERROR,
                details={"url": url},
            ) from e

        try:
            data = response.json()
            choice = data["choices"][0]
            message = choice["message"]
            usage = data.get("usage") or {}

            result = ChatCompletionResult(
                content=message.get("content"),
                tool_calls=[
                    ToolCall(
                        id=call.get("id", ""),
                        type=call.get("type", "function"),
                        name=call["function"]["name"],
                        arguments=call["function"].get("arguments") or "",
                    )
                    for call in message.get("tool_calls") or []
                ],
                finish_reason=choice.get("finish_reason") or "",
                model=data.get("model", self._deployment),
                prompt_tokens=usage.get("prompt_tokens", 0),
                completion_tokens=usage.get("completion_tokens", 0),
            )

        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise LLMError(
                f"Invalid response from LLM: {e}",
                code=ErrorCode.LLM_SERVICE_ERROR,
                details={"error": str(e)},
            ) from e

        track_llm_request(
            self._deployment,
            time.perf_counter() - start,
            result.prompt_tokens,
            result.completion_tokens,
        )
        logger.debug(
            "Chat completion received",
            extra={
                "deployment": self._deployment,
                "finish_reason": result.finish_reason,
                "tool_calls": len(result.tool_calls),
            },
        )
        return result
