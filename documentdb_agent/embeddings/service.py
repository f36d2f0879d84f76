"""Embedding service interface and implementations."""

import time
from abc import ABC, abstractmethod

import httpx

from documentdb_agent.config import AzureOpenAISettings, get_settings
from documentdb_agent.embeddings.models import EmbeddingResult
from documentdb_agent.exceptions import EmbeddingError, ErrorCode
from documentdb_agent.logging_config import get_logger
from documentdb_agent.observability.metrics import track_embedding_request

logger = get_logger(__name__)


class EmbeddingService(ABC):
    """Abstract base class for embedding services.

    Defines the interface for generating text embeddings.
    """

    @abstractmethod
    async def embed(self, text: str) -> EmbeddingResult:
        """Generate embedding for a single text.

        Args:
            text: Text to embed.

        Returns:
            EmbeddingResult with vector.

        Raises:
            EmbeddingError: If the provider fails or returns no vector.
        """
        ...

    @abstractmethod
    async def embed_batch(self, texts: list[str]) -> list[EmbeddingResult]:
        """Generate embeddings for multiple texts.

        Args:
            texts: List of texts to embed.

        Returns:
            One EmbeddingResult per text, in input order.

        Raises:
            EmbeddingError: If embedding fails.
        """
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model name used for embeddings."""
        ...

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Get the embedding dimensions."""
        ...


class AzureOpenAIEmbeddingService(EmbeddingService):
    """Embedding service backed by an Azure OpenAI embedding deployment."""

    MODEL_DIMENSIONS = {
        "text-embedding-ada-002": 1536,
        "text-embedding-3-small": 1536,
        "text-embedding-3-large": 3072,
    }

    def __init__(
        self,
        settings: AzureOpenAISettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the embedding service.

        Args:
            settings: Azure OpenAI configuration. Uses defaults if not provided.
            client: HTTP client. Creates new one if not provided.
        """
        self._settings = settings or get_settings().openai
        self._client = client
        self._owns_client = client is None
        self._dimensions: int | None = None

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
        return self._settings.embedding_deployment

    @property
    def dimensions(self) -> int:
        if self._dimensions is not None:
            return self._dimensions
        return self.MODEL_DIMENSIONS.get(self._settings.embedding_deployment, 1536)

    @property
    def url(self) -> str:
        """Embeddings endpoint of the configured deployment."""
        endpoint = self._settings.endpoint.rstrip("/")
        return (
            f"{endpoint}/openai/deployments/"
            f"{self._settings.embedding_deployment}/embeddings"
        )

    async def embed(self, text: str) -> EmbeddingResult:
        results = await self.embed_batch([text])
        if not results:
            raise EmbeddingError(
                "No embeddings returned",
                code=ErrorCode.EMBEDDING_EMPTY_RESULT,
                details={"model": self.model_name},
            )
        return results[0]

    async def embed_batch(self, texts: list[str]) -> list[EmbeddingResult]:
        if not texts:
            return []

        client = await self._get_client()

        all_results: list[EmbeddingResult] = []
        batch_size = self._settings.embedding_batch_size

        for i in range(0, len(texts), batch_size):
            batch = texts[i : i + batch_size]
            all_results.extend(await self._embed_batch_request(client, batch))

        return all_results

    async def _embed_batch_request(
        self,
        client: httpx.AsyncClient,
        texts: list[str],
    ) -> list[EmbeddingResult]:
        """Make one embedding request.

        Raises:
            EmbeddingError: On transport errors, error statuses, malformed
                bodies, or when the provider returns fewer vectors than texts.
        """
        url = self.url
        start = time.perf_counter()

        try:
            response = await client.post(
                url,
                params={"api-version": self._settings.embedding_api_version},
                headers={"api-key": self._settings.api_key.get_secret_value()},
                json={"input": texts},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            track_embedding_request(
                self.model_name, time.perf_counter() - start, len(texts), success=False
            )
            logger.error(
                f"Embedding request failed: {e.response.status_code}",
                extra={"url": url, "status": e.response.status_code},
            )
            raise EmbeddingError(
                f"Embedding service returned {e.response.status_code}",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"status_code": e.response.status_code},
            ) from e
        except httpx.RequestError as e:
            track_embedding_request(
                self.model_name, time.perf_counter() - start, len(texts), success=False
            )
            logger.error(f"Embedding request error: {e}", extra={"url": url})
            raise EmbeddingError(
                f"Failed to connect to embedding service: {e}",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"url": url},
            ) from e

        try:
            data = response.json()
            items = sorted(data.get("data", []), key=lambda item: item.get("index", 0))
            vectors = [item["embedding"] for item in items]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise EmbeddingError(
                f"Invalid response from embedding service: {e}",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"error": str(e)},
            ) from e

        if len(vectors) != len(texts) or any(not vector for vector in vectors):
            track_embedding_request(
                self.model_name, time.perf_counter() - start, len(texts), success=False
            )
            raise EmbeddingError(
                "Embedding service returned no vector for some inputs",
                code=ErrorCode.EMBEDDING_EMPTY_RESULT,
                details={"expected": len(texts), "received": len(vectors)},
            )

        track_embedding_request(self.model_name, time.perf_counter() - start, len(texts))

        if self._dimensions is None:
            self._dimensions = len(vectors[0])

        return [
            EmbeddingResult(
                text=text,
                embedding=vector,
                model=self.model_name,
                dimensions=len(vector),
            )
            for text, vector in zip(texts, vectors, strict=True)
        ]
