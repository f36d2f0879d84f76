"""Vector store interface, DocumentDB and in-memory implementations."""

import math
import time
from abc import ABC, abstractmethod
from typing import Any

from pymongo import AsyncMongoClient
from pymongo.errors import BulkWriteError, PyMongoError

from documentdb_agent.config import (
    DocumentDBSettings,
    SimilarityMetric,
    get_settings,
)
from documentdb_agent.documents.models import Hotel
from documentdb_agent.exceptions import (
    BulkInsertError,
    ErrorCode,
    ValidationError,
    VectorStoreError,
)
from documentdb_agent.logging_config import get_logger
from documentdb_agent.observability.metrics import (
    track_bulk_insert,
    track_search_results,
    track_vectorstore_operation,
)
from documentdb_agent.vectorstore.models import (
    MAX_NEAREST_NEIGHBORS,
    MIN_NEAREST_NEIGHBORS,
    BulkInsertResult,
    SearchResult,
    VectorIndexConfig,
)

logger = get_logger(__name__)

DUPLICATE_KEY_ERROR = 11000


def rank_results(
    results: list[SearchResult],
    similarity: SimilarityMetric,
) -> list[SearchResult]:
    """Order results best match first for the given metric.

    L2 is a distance (ascending); cosine and inner product are similarities
    (descending). The sort is stable, so ties keep the order the store
    returned them in.
    """
    descending = similarity != SimilarityMetric.EUCLIDEAN
    return sorted(results, key=lambda r: r.score, reverse=descending)


def _validate_bulk_input(hotels: list[Hotel], vectors: list[list[float]]) -> None:
    if len(hotels) != len(vectors):
        raise ValidationError(
            "hotels and vectors must have the same length",
            details={"hotels": len(hotels), "vectors": len(vectors)},
        )


def _validate_k(k: int) -> None:
    if not MIN_NEAREST_NEIGHBORS <= k <= MAX_NEAREST_NEIGHBORS:
        raise ValidationError(
            f"k must be between {MIN_NEAREST_NEIGHBORS} and {MAX_NEAREST_NEIGHBORS}",
            details={"k": k},
        )


def _finish_bulk_insert(
    total: int,
    inserted: int,
    errors: list[dict[str, Any]],
    collection: str,
) -> BulkInsertResult:
    """Apply the partial-success policy to raw bulk insert counts.

    Raises:
        BulkInsertError: If no document was written.
    """
    failed = total - inserted
    track_bulk_insert(inserted, failed)

    if inserted == 0:
        raise BulkInsertError(
            f"Failed to insert any of {total} documents",
            details={"collection": collection, "errors": errors[:10]},
        )

    if failed:
        logger.warning(
            f"Partial insert: {inserted} inserted, {failed} failed",
            extra={"collection": collection, "inserted": inserted, "failed": failed},
        )
    else:
        logger.info(
            f"Inserted {inserted} documents",
            extra={"collection": collection},
        )

    return BulkInsertResult(inserted=inserted, failed=failed, errors=errors)


class VectorStore(ABC):
    """Abstract base class for vector stores.

    Stateless wrapper over request/response calls; the only state held across
    calls is the (pooled) client handle.
    """

    @abstractmethod
    async def bulk_insert(
        self,
        hotels: list[Hotel],
        vectors: list[list[float]],
    ) -> BulkInsertResult:
        """Insert hotels with their embeddings using an unordered write.

        A failing document never aborts the others.

        Args:
            hotels: Hotels to insert.
            vectors: Embedding per hotel, same length and order as ``hotels``.

        Returns:
            Inserted / failed counts (``inserted + failed == len(hotels)``).

        Raises:
            ValidationError: If the inputs differ in length.
            BulkInsertError: If no document was inserted.
            VectorStoreError: If the store cannot be reached.
        """
        ...

    @abstractmethod
    async def vector_search(
        self,
        vector: list[float],
        k: int,
    ) -> list[SearchResult]:
        """Find the k nearest hotels to a query vector.

        Returns:
            At most ``k`` results, best match first. Tie order is
            implementation-defined.

        Raises:
            ValidationError: If k is outside 1-20.
            VectorStoreError: If the search fails.
        """
        ...

    @abstractmethod
    async def create_index(self, config: VectorIndexConfig) -> None:
        """Create the vector index.

        Whether repeated calls succeed is up to the backing store.

        Raises:
            VectorStoreError: If index creation fails.
        """
        ...

    @abstractmethod
    async def drop_database(self) -> None:
        """Drop the whole database. Irreversible."""
        ...

    async def ping(self) -> bool:
        """Check that the store is reachable."""
        return True

    async def close(self) -> None:
        """Release resources held by the store."""
        return None


class DocumentDBVectorStore(VectorStore):
    """Azure DocumentDB (MongoDB compatible) vector store."""

    def __init__(
        self,
        settings: DocumentDBSettings | None = None,
        similarity: SimilarityMetric | None = None,
        client: AsyncMongoClient | None = None,
    ) -> None:
        """Initialize the DocumentDB vector store.

        Args:
            settings: Connection and collection configuration.
            similarity: Metric of the vector index; decides result ordering.
            client: Existing client (for testing or sharing a pool).
        """
        self._settings = settings or get_settings().documentdb
        self._similarity = similarity or get_settings().vector_index.similarity
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> AsyncMongoClient:
        if self._client is None:
            self._client = AsyncMongoClient(
                self._settings.connection_string.get_secret_value(),
                serverSelectionTimeoutMS=self._settings.server_selection_timeout_ms,
            )
        return self._client

    def _database(self) -> Any:
        return self._get_client()[self._settings.database_name]

    def _collection(self) -> Any:
        return self._database()[self._settings.collection]

    async def close(self) -> None:
        """Close the Mongo client if we own it."""
        if self._owns_client and self._client is not None:
            await self._client.close()
            self._client = None

    async def ping(self) -> bool:
        """Check that the cluster answers."""
        try:
            await self._get_client().admin.command("ping")
        except PyMongoError as e:
            logger.warning(f"DocumentDB ping failed: {e}")
            return False
        return True

    async def bulk_insert(
        self,
        hotels: list[Hotel],
        vectors: list[list[float]],
    ) -> BulkInsertResult:
        _validate_bulk_input(hotels, vectors)
        if not hotels:
            return BulkInsertResult(inserted=0, failed=0)

        field = self._settings.embedded_field
        documents = [
            hotel.to_document(vector, field)
            for hotel, vector in zip(hotels, vectors, strict=True)
        ]
        total = len(documents)
        start = time.perf_counter()
        errors: list[dict[str, Any]] = []

        try:
            result = await self._collection().insert_many(documents, ordered=False)
            inserted = len(result.inserted_ids)
        except BulkWriteError as e:
            write_errors = e.details.get("writeErrors", [])
            inserted = e.details.get("nInserted", total - len(write_errors))
            errors = [
                {
                    "index": err.get("index"),
                    "code": err.get("code"),
                    "message": err.get("errmsg", ""),
                }
                for err in write_errors
            ]
        except PyMongoError as e:
            track_vectorstore_operation("bulk_insert", time.perf_counter() - start, False)
            raise VectorStoreError(
                f"Failed to insert documents: {e}",
                details={"collection": self._settings.collection, "error": str(e)},
            ) from e

        track_vectorstore_operation(
            "bulk_insert", time.perf_counter() - start, inserted > 0
        )
        return _finish_bulk_insert(total, inserted, errors, self._settings.collection)

    async def vector_search(
        self,
        vector: list[float],
        k: int,
    ) -> list[SearchResult]:
        _validate_k(k)

        pipeline = [
            {
                "$search": {
                    "cosmosSearch": {
                        "vector": list(vector),
                        "path": self._settings.embedded_field,
                        "k": k,
                    }
                }
            },
            {
                "$project": {
                    "score": {"$meta": "searchScore"},
                    "document": "$$ROOT",
                }
            },
        ]

        start = time.perf_counter()
        try:
            cursor = await self._collection().aggregate(pipeline)
            results = [
                SearchResult(
                    hotel=Hotel.from_document(row["document"]),
                    score=float(row.get("score", 0.0)),
                )
                async for row in cursor
            ]
        except PyMongoError as e:
            track_vectorstore_operation("vector_search", time.perf_counter() - start, False)
            raise VectorStoreError(
                f"Vector search failed: {e}",
                details={"collection": self._settings.collection, "error": str(e)},
            ) from e

        track_vectorstore_operation("vector_search", time.perf_counter() - start)
        ranked = rank_results(results, self._similarity)[:k]
        track_search_results(len(ranked))

        logger.debug(
            f"Found {len(ranked)} results from vector search",
            extra={"k": k, "similarity": self._similarity.value},
        )
        return ranked

    async def create_index(self, config: VectorIndexConfig) -> None:
        command = {
            "createIndexes": self._settings.collection,
            "indexes": [
                {
                    "name": self._settings.index_name,
                    "key": {self._settings.embedded_field: "cosmosSearch"},
                    "cosmosSearchOptions": config.search_options(),
                }
            ],
        }

        start = time.perf_counter()
        try:
            await self._database().command(command)
        except PyMongoError as e:
            track_vectorstore_operation("create_index", time.perf_counter() - start, False)
            raise VectorStoreError(
                f"Failed to create vector index: {e}",
                code=ErrorCode.INDEX_CREATION_FAILED,
                details={
                    "index": self._settings.index_name,
                    "algorithm": config.algorithm.value,
                    "error": str(e),
                },
            ) from e

        track_vectorstore_operation("create_index", time.perf_counter() - start)
        self._similarity = config.similarity
        logger.info(
            f"Created vector index: {self._settings.index_name}",
            extra={
                "algorithm": config.algorithm.value,
                "similarity": config.similarity.value,
                "dimensions": config.dimensions,
            },
        )

    async def drop_database(self) -> None:
        try:
            await self._get_client().drop_database(self._settings.database_name)
        except PyMongoError as e:
            raise VectorStoreError(
                f"Failed to drop database: {e}",
                details={"database": self._settings.database_name, "error": str(e)},
            ) from e

        logger.info(f"Dropped database: {self._settings.database_name}")


def _score(
    query: list[float],
    candidate: list[float],
    similarity: SimilarityMetric,
) -> float:
    if similarity == SimilarityMetric.EUCLIDEAN:
        return math.dist(query, candidate)

    dot = math.fsum(a * b for a, b in zip(query, candidate, strict=True))
    if similarity == SimilarityMetric.INNER_PRODUCT:
        return dot

    norm = math.hypot(*query) * math.hypot(*candidate)
    return dot / norm if norm else 0.0


class InMemoryVectorStore(VectorStore):
    """Brute-force vector store held in process memory.

    Mirrors the DocumentDB contract: documents are keyed by ``HotelId`` and
    a duplicate key fails only that document.
    """

    def __init__(
        self,
        similarity: SimilarityMetric = SimilarityMetric.COSINE,
        dimensions: int | None = None,
    ) -> None:
        self._similarity = similarity
        self._dimensions = dimensions
        self._documents: dict[str, tuple[Hotel, list[float]]] = {}

    def __len__(self) -> int:
        return len(self._documents)

    async def bulk_insert(
        self,
        hotels: list[Hotel],
        vectors: list[list[float]],
    ) -> BulkInsertResult:
        _validate_bulk_input(hotels, vectors)
        if not hotels:
            return BulkInsertResult(inserted=0, failed=0)

        errors: list[dict[str, Any]] = []
        inserted = 0

        for index, (hotel, vector) in enumerate(zip(hotels, vectors, strict=True)):
            if hotel.hotel_id in self._documents:
                errors.append(
                    {
                        "index": index,
                        "code": DUPLICATE_KEY_ERROR,
                        "message": f"duplicate key: {hotel.hotel_id}",
                    }
                )
                continue
            if not vector or (
                self._dimensions is not None and len(vector) != self._dimensions
            ):
                errors.append(
                    {
                        "index": index,
                        "code": None,
                        "message": f"invalid vector length: {len(vector)}",
                    }
                )
                continue
            if self._dimensions is None:
                self._dimensions = len(vector)
            self._documents[hotel.hotel_id] = (hotel, list(vector))
            inserted += 1

        return _finish_bulk_insert(len(hotels), inserted, errors, "memory")

    async def vector_search(
        self,
        vector: list[float],
        k: int,
    ) -> list[SearchResult]:
        _validate_k(k)
        if self._dimensions is not None and len(vector) != self._dimensions:
            raise VectorStoreError(
                "Query vector dimensions do not match the stored vectors",
                details={"expected": self._dimensions, "received": len(vector)},
            )

        results = [
            SearchResult(hotel=hotel, score=_score(vector, stored, self._similarity))
            for hotel, stored in self._documents.values()
        ]
        ranked = rank_results(results, self._similarity)[:k]
        track_search_results(len(ranked))
        return ranked

    async def create_index(self, config: VectorIndexConfig) -> None:
        self._similarity = config.similarity
        self._dimensions = config.dimensions
        logger.debug(
            "In-memory index configured",
            extra={"similarity": config.similarity.value, "dimensions": config.dimensions},
        )

    async def drop_database(self) -> None:
        self._documents.clear()
