"""Tests for embedding service."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from pydantic import SecretStr

from documentdb_agent.config import AzureOpenAISettings
from documentdb_agent.embeddings.models import EmbeddingResult
from documentdb_agent.embeddings.service import AzureOpenAIEmbeddingService
from documentdb_agent.exceptions import EmbeddingError, ErrorCode


def _settings(**overrides: object) -> AzureOpenAISettings:
    values: dict[str, object] = {
        "endpoint": "https://test.openai.azure.com/",
        "api_key": SecretStr("test-key"),
        "embedding_deployment": "text-embedding-3-small",
        "embedding_api_version": "2024-06-01",
    }
    values.update(overrides)
    return AzureOpenAISettings(**values)


def _response(data: list[dict[str, object]]) -> MagicMock:
    mock_response = MagicMock()
    mock_response.json.return_value = {"data": data}
    mock_response.raise_for_status = MagicMock()
    return mock_response


class TestEmbeddingResult:
    """Tests for EmbeddingResult model."""

    def test_valid_result(self) -> None:
        """Valid embedding result is created."""
        result = EmbeddingResult(
            text="test",
            embedding=[0.1, 0.2, 0.3],
            model="test-model",
            dimensions=3,
        )
        assert result.text == "test"
        assert result.dimensions == 3

    def test_dimensions_mismatch(self) -> None:
        """Mismatched dimensions raise error."""
        with pytest.raises(ValueError, match="dimensions"):
            EmbeddingResult(
                text="test",
                embedding=[0.1, 0.2, 0.3],
                model="test-model",
                dimensions=5,
            )

    def test_empty_embedding_rejected(self) -> None:
        """A zero-length vector is never a valid result."""
        with pytest.raises(ValueError):
            EmbeddingResult(text="test", embedding=[], model="m", dimensions=0)


class TestAzureOpenAIEmbeddingService:
    """Tests for AzureOpenAIEmbeddingService."""

    def test_model_name(self) -> None:
        """Service reports the deployment name."""
        service = AzureOpenAIEmbeddingService(settings=_settings())
        assert service.model_name == "text-embedding-3-small"

    def test_known_model_dimensions(self) -> None:
        service = AzureOpenAIEmbeddingService(
            settings=_settings(embedding_deployment="text-embedding-3-large")
        )
        assert service.dimensions == 3072

    def test_url(self) -> None:
        """URL targets the deployment's embeddings route."""
        service = AzureOpenAIEmbeddingService(settings=_settings())
        assert service.url == (
            "https://test.openai.azure.com/openai/deployments/"
            "text-embedding-3-small/embeddings"
        )

    @pytest.mark.asyncio
    async def test_embed_single(self) -> None:
        """Single text embedding works."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = _response(
            [{"index": 0, "embedding": [0.1, 0.2, 0.3]}]
        )

        service = AzureOpenAIEmbeddingService(settings=_settings(), client=mock_client)
        result = await service.embed("test text")

        assert result.text == "test text"
        assert result.embedding == [0.1, 0.2, 0.3]
        assert result.model == "text-embedding-3-small"
        assert service.dimensions == 3

    @pytest.mark.asyncio
    async def test_request_format(self) -> None:
        """Requests carry the api-version, the api-key header and the inputs."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = _response([{"index": 0, "embedding": [0.5]}])

        service = AzureOpenAIEmbeddingService(settings=_settings(), client=mock_client)
        await service.embed("hello")

        call = mock_client.post.call_args
        assert call.kwargs["params"] == {"api-version": "2024-06-01"}
        assert call.kwargs["headers"] == {"api-key": "test-key"}
        assert call.kwargs["json"] == {"input": ["hello"]}

    @pytest.mark.asyncio
    async def test_embed_batch_orders_by_index(self) -> None:
        """Vectors are matched to texts by their index, not response order."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = _response(
            [
                {"index": 1, "embedding": [0.3, 0.4]},
                {"index": 0, "embedding": [0.1, 0.2]},
            ]
        )

        service = AzureOpenAIEmbeddingService(settings=_settings(), client=mock_client)
        results = await service.embed_batch(["text1", "text2"])

        assert [r.text for r in results] == ["text1", "text2"]
        assert results[0].embedding == [0.1, 0.2]
        assert results[1].embedding == [0.3, 0.4]

    @pytest.mark.asyncio
    async def test_embed_empty_list(self) -> None:
        """Empty list returns empty results without a request."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        service = AzureOpenAIEmbeddingService(settings=_settings(), client=mock_client)

        assert await service.embed_batch([]) == []
        mock_client.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_embed_no_vectors(self) -> None:
        """A response without vectors is an error, not an empty result."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = _response([])

        service = AzureOpenAIEmbeddingService(settings=_settings(), client=mock_client)

        with pytest.raises(EmbeddingError) as exc_info:
            await service.embed("test")

        assert exc_info.value.code == ErrorCode.EMBEDDING_EMPTY_RESULT

    @pytest.mark.asyncio
    async def test_embed_zero_length_vector(self) -> None:
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = _response([{"index": 0, "embedding": []}])

        service = AzureOpenAIEmbeddingService(settings=_settings(), client=mock_client)

        with pytest.raises(EmbeddingError) as exc_info:
            await service.embed("test")

        assert exc_info.value.code == ErrorCode.EMBEDDING_EMPTY_RESULT

    @pytest.mark.asyncio
    async def test_embed_http_error(self) -> None:
        """HTTP error raises EmbeddingError."""
        mock_response = MagicMock()
        mock_response.status_code = 500
        mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "Server error",
            request=MagicMock(),
            response=mock_response,
        )

        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = mock_response

        service = AzureOpenAIEmbeddingService(settings=_settings(), client=mock_client)

        with pytest.raises(EmbeddingError) as exc_info:
            await service.embed("test")

        assert exc_info.value.code == ErrorCode.EMBEDDING_SERVICE_ERROR
        assert exc_info.value.details["status_code"] == 500

    @pytest.mark.asyncio
    async def test_embed_connection_error(self) -> None:
        """Connection error raises EmbeddingError."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.side_effect = httpx.RequestError("Connection failed")

        service = AzureOpenAIEmbeddingService(settings=_settings(), client=mock_client)

        with pytest.raises(EmbeddingError):
            await service.embed("test")

    @pytest.mark.asyncio
    async def test_batch_chunking(self) -> None:
        """Large batches are chunked by embedding_batch_size."""
        call_count = 0

        def make_response(*_args: object, **kwargs: object) -> MagicMock:
            nonlocal call_count
            call_count += 1
            texts = kwargs["json"]["input"]  # type: ignore[index]
            return _response(
                [{"index": i, "embedding": [0.1 * (i + 1)]} for i in range(len(texts))]
            )

        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.side_effect = make_response

        service = AzureOpenAIEmbeddingService(
            settings=_settings(embedding_batch_size=2),
            client=mock_client,
        )
        results = await service.embed_batch(["t1", "t2", "t3", "t4", "t5"])

        assert len(results) == 5
        assert call_count == 3
        assert [r.text for r in results] == ["t1", "t2", "t3", "t4", "t5"]

    @pytest.mark.asyncio
    async def test_close(self) -> None:
        """Service closes owned client."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        service = AzureOpenAIEmbeddingService(settings=_settings(), client=mock_client)
        service._owns_client = True

        await service.close()
        mock_client.aclose.assert_called_once()

    @pytest.mark.asyncio
    async def test_close_leaves_shared_client_open(self) -> None:
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        service = AzureOpenAIEmbeddingService(settings=_settings(), client=mock_client)

        await service.close()
        mock_client.aclose.assert_not_called()
