"""Tests for LLM module."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from pydantic import SecretStr

from documentdb_agent.config import AzureOpenAISettings
from documentdb_agent.documents.formatting import RECORD_START
from documentdb_agent.exceptions import ErrorCode, LLMError
from documentdb_agent.llm.client import AzureOpenAIChatClient
from documentdb_agent.llm.models import (
    ChatCompletionResult,
    Message,
    Role,
    ToolDefinition,
)
from documentdb_agent.llm.prompts import (
    SEARCH_TOOL_NAME,
    PlannerPromptTemplate,
    SynthesizerPromptTemplate,
)


def _settings() -> AzureOpenAISettings:
    return AzureOpenAISettings(
        endpoint="https://test.openai.azure.com",
        api_key=SecretStr("test-key"),
        planner_deployment="planner-model",
        planner_api_version="2024-08-01-preview",
        synth_deployment="synth-model",
        synth_api_version="2024-10-21",
        planner_max_tokens=500,
    )


def _response(body: dict[str, object]) -> MagicMock:
    mock_response = MagicMock()
    mock_response.json.return_value = body
    mock_response.raise_for_status = MagicMock()
    return mock_response


def _error_response(status: int) -> MagicMock:
    mock_response = MagicMock()
    mock_response.status_code = status
    mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
        "Error",
        request=MagicMock(),
        response=mock_response,
    )
    return mock_response


SEARCH_TOOL = ToolDefinition(
    name=SEARCH_TOOL_NAME,
    description="Search hotels",
    parameters={"type": "object", "properties": {"query": {"type": "string"}}},
)


class TestModels:
    """Tests for LLM data models."""

    def test_role_values(self) -> None:
        """Role enum has expected values."""
        assert Role.SYSTEM.value == "system"
        assert Role.USER.value == "user"
        assert Role.ASSISTANT.value == "assistant"

    def test_tool_definition_to_openai(self) -> None:
        """Tool definitions render in the function-tool wire format."""
        rendered = SEARCH_TOOL.to_openai()
        assert rendered["type"] == "function"
        assert rendered["function"]["name"] == SEARCH_TOOL_NAME
        assert rendered["function"]["parameters"]["type"] == "object"

    def test_total_tokens(self) -> None:
        result = ChatCompletionResult(
            content="Hi",
            model="m",
            prompt_tokens=10,
            completion_tokens=20,
        )
        assert result.total_tokens == 30
        assert result.tool_calls == []


class TestAzureOpenAIChatClient:
    """Tests for AzureOpenAIChatClient."""

    def test_for_planner(self) -> None:
        """Planner client uses the planner deployment, deterministically."""
        client = AzureOpenAIChatClient.for_planner(settings=_settings())
        assert client.model_name == "planner-model"
        assert client.url == (
            "https://test.openai.azure.com/openai/deployments/"
            "planner-model/chat/completions"
        )

    def test_for_synthesizer(self) -> None:
        client = AzureOpenAIChatClient.for_synthesizer(settings=_settings())
        assert client.model_name == "synth-model"

    @pytest.mark.asyncio
    async def test_complete_text(self) -> None:
        """A plain completion is parsed with usage."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = _response(
            {
                "choices": [
                    {
                        "message": {"role": "assistant", "content": "Generated response"},
                        "finish_reason": "stop",
                    }
                ],
                "model": "gpt-4o-mini",
                "usage": {"prompt_tokens": 10, "completion_tokens": 20},
            }
        )

        client = AzureOpenAIChatClient.for_synthesizer(
            settings=_settings(), client=mock_client
        )
        result = await client.complete([Message(role=Role.USER, content="Hello")])

        assert result.content == "Generated response"
        assert result.finish_reason == "stop"
        assert result.model == "gpt-4o-mini"
        assert result.total_tokens == 30
        assert result.tool_calls == []

    @pytest.mark.asyncio
    async def test_complete_tool_calls(self) -> None:
        """Tool calls keep their raw argument text."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = _response(
            {
                "choices": [
                    {
                        "message": {
                            "role": "assistant",
                            "content": None,
                            "tool_calls": [
                                {
                                    "id": "call_1",
                                    "type": "function",
                                    "function": {
                                        "name": SEARCH_TOOL_NAME,
                                        "arguments": '{"query": "x", "nearestNeighbors": 3}',
                                    },
                                }
                            ],
                        },
                        "finish_reason": "tool_calls",
                    }
                ],
                "usage": {},
            }
        )

        client = AzureOpenAIChatClient.for_planner(settings=_settings(), client=mock_client)
        result = await client.complete(
            [Message(role=Role.USER, content="Find a hotel")],
            tools=[SEARCH_TOOL],
            tool_choice="required",
        )

        assert result.content is None
        assert result.finish_reason == "tool_calls"
        assert result.model == "planner-model"
        assert len(result.tool_calls) == 1
        assert result.tool_calls[0].id == "call_1"
        assert result.tool_calls[0].name == SEARCH_TOOL_NAME
        assert result.tool_calls[0].arguments == '{"query": "x", "nearestNeighbors": 3}'

    @pytest.mark.asyncio
    async def test_planner_payload(self) -> None:
        """Planner requests carry tools, tool_choice and deterministic sampling."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = _response(
            {"choices": [{"message": {"content": "ok"}, "finish_reason": "stop"}]}
        )

        client = AzureOpenAIChatClient.for_planner(settings=_settings(), client=mock_client)
        await client.complete(
            [Message(role=Role.USER, content="Hi")],
            tools=[SEARCH_TOOL],
            tool_choice="required",
        )

        call = mock_client.post.call_args
        payload = call.kwargs["json"]
        assert call.kwargs["params"] == {"api-version": "2024-08-01-preview"}
        assert call.kwargs["headers"] == {"api-key": "test-key"}
        assert payload["temperature"] == 0.0
        assert payload["top_p"] == 1.0
        assert payload["max_tokens"] == 500
        assert payload["tool_choice"] == "required"
        assert payload["tools"][0]["function"]["name"] == SEARCH_TOOL_NAME

    @pytest.mark.asyncio
    async def test_payload_without_tools(self) -> None:
        """tool_choice is never sent without tools."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = _response(
            {"choices": [{"message": {"content": "ok"}, "finish_reason": "stop"}]}
        )

        client = AzureOpenAIChatClient.for_synthesizer(
            settings=_settings(), client=mock_client
        )
        await client.complete(
            [Message(role=Role.USER, content="Hi")],
            tool_choice="required",
        )

        payload = mock_client.post.call_args.kwargs["json"]
        assert "tools" not in payload
        assert "tool_choice" not in payload
        assert payload["temperature"] == 0.3

    @pytest.mark.asyncio
    async def test_timeout_error(self) -> None:
        """Timeout raises LLMError with correct code."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.side_effect = httpx.TimeoutException("Timeout")

        client = AzureOpenAIChatClient.for_planner(settings=_settings(), client=mock_client)

        with pytest.raises(LLMError) as exc_info:
            await client.complete([Message(role=Role.USER, content="Hello")])

        assert exc_info.value.code == ErrorCode.LLM_TIMEOUT

    @pytest.mark.asyncio
    async def test_rate_limit_error(self) -> None:
        """Rate limit returns correct error code."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = _error_response(429)

        client = AzureOpenAIChatClient.for_planner(settings=_settings(), client=mock_client)

        with pytest.raises(LLMError) as exc_info:
            await client.complete([Message(role=Role.USER, content="Hello")])

        assert exc_info.value.code == ErrorCode.LLM_RATE_LIMIT

    @pytest.mark.asyncio
    async def test_server_error(self) -> None:
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = _error_response(500)

        client = AzureOpenAIChatClient.for_planner(settings=_settings(), client=mock_client)

        with pytest.raises(LLMError) as exc_info:
            await client.complete([Message(role=Role.USER, content="Hello")])

        assert exc_info.value.code == ErrorCode.LLM_SERVICE_ERROR
        assert exc_info.value.details["status_code"] == 500

    @pytest.mark.asyncio
    async def test_connection_error(self) -> None:
        """Connection error raises LLMError."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.side_effect = httpx.RequestError("Connection failed")

        client = AzureOpenAIChatClient.for_planner(settings=_settings(), client=mock_client)

        with pytest.raises(LLMError) as exc_info:
            await client.complete([Message(role=Role.USER, content="Hello")])

        assert exc_info.value.code == ErrorCode.LLM_SERVICE_ERROR

    @pytest.mark.asyncio
    async def test_malformed_response(self) -> None:
        """A body without choices is a service error."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = _response({"choices": []})

        client = AzureOpenAIChatClient.for_planner(settings=_settings(), client=mock_client)

        with pytest.raises(LLMError) as exc_info:
            await client.complete([Message(role=Role.USER, content="Hello")])

        assert exc_info.value.code == ErrorCode.LLM_SERVICE_ERROR

    @pytest.mark.asyncio
    async def test_close(self) -> None:
        """Client closes properly."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)

        client = AzureOpenAIChatClient.for_planner(settings=_settings(), client=mock_client)
        client._owns_client = True

        await client.close()

        mock_client.aclose.assert_called_once()


def _blocks(count: int) -> str:
    return "\n\n".join(
        f"{RECORD_START}\nHotelName: Hotel {i}\n--- RECORD END ---"
        for i in range(1, count + 1)
    )


class TestPlannerPromptTemplate:
    """Tests for PlannerPromptTemplate."""

    def test_default_prompts(self) -> None:
        """System prompt insists on the search tool."""
        template = PlannerPromptTemplate()
        assert SEARCH_TOOL_NAME in template.system_prompt
        assert "MUST" in template.system_prompt

    def test_format(self) -> None:
        """User message embeds the request and the neighbor count."""
        template = PlannerPromptTemplate()
        result = template.format(query="cheap hotel", nearest_neighbors=7)
        assert result == (
            'Search for hotels matching this request: "cheap hotel". '
            "Use nearestNeighbors=7."
        )

    def test_custom_prompts(self) -> None:
        template = PlannerPromptTemplate(
            system_prompt="Custom system",
            user_template="Q={query} k={nearest_neighbors}",
        )
        assert template.system_prompt == "Custom system"
        assert template.format(query="a", nearest_neighbors=2) == "Q=a k=2"


class TestSynthesizerPromptTemplate:
    """Tests for SynthesizerPromptTemplate."""

    def test_default_prompts(self) -> None:
        template = SynthesizerPromptTemplate()
        assert "TOP 3" in template.system_prompt
        assert "220 words" in template.system_prompt
        assert "{tool_summary}" in template.user_template
        assert "{query}" in template.user_template

    def test_build_prompt_keeps_top_three(self) -> None:
        """Only the first three records reach the prompt."""
        template = SynthesizerPromptTemplate()
        system, user = template.build_prompt("quiet hotel", _blocks(5))

        assert system == template.system_prompt
        assert "User asked: quiet hotel" in user
        assert user.count(RECORD_START) == 3
        assert "Hotel 3" in user
        assert "Hotel 4" not in user
        assert "Hotel 5" not in user

    def test_build_prompt_fewer_than_three(self) -> None:
        _, user = SynthesizerPromptTemplate().build_prompt("q", _blocks(2))
        assert user.count(RECORD_START) == 2

    def test_build_prompt_without_records(self) -> None:
        """Error text from the search tool is embedded as is."""
        message = "Error occurred while searching for hotels: DocumentDB down"
        _, user = SynthesizerPromptTemplate().build_prompt("q", message)
        assert message in user

    def test_custom_top_results(self) -> None:
        _, user = SynthesizerPromptTemplate(top_results=1).build_prompt("q", _blocks(3))
        assert user.count(RECORD_START) == 1
