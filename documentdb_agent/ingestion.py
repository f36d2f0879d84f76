"""Hotel data ingestion: load, embed, insert, index."""

from pathlib import Path

from pydantic import BaseModel, Field

from documentdb_agent.documents.loader import DocumentLoader
from documentdb_agent.documents.models import Hotel
from documentdb_agent.embeddings.service import EmbeddingService
from documentdb_agent.exceptions import EmbeddingError, ErrorCode
from documentdb_agent.logging_config import get_logger
from documentdb_agent.vectorstore.models import BulkInsertResult, VectorIndexConfig
from documentdb_agent.vectorstore.service import VectorStore

logger = get_logger(__name__)


class IngestionResult(BaseModel):
    """Summary of one ingestion run.

    Attributes:
        hotels_loaded: Hotels read from the data file.
        embedded: Hotels that got a vector.
        skipped: Hotels dropped because their embedding batch failed.
        insert: Outcome of the bulk insert.
        index_created: Whether the vector index was (re)created.
    """

    hotels_loaded: int = Field(ge=0)
    embedded: int = Field(ge=0)
    skipped: int = Field(ge=0)
    insert: BulkInsertResult
    index_created: bool = False


class DocumentIngestor:
    """Loads the hotel data file into the vector store and indexes it.

    Embedding happens in batches; a failed batch is logged and its hotels are
    skipped so the rest of the file still lands in the store.
    """

    def __init__(
        self,
        loader: DocumentLoader,
        embedding_service: EmbeddingService,
        vector_store: VectorStore,
        batch_size: int = 16,
    ) -> None:
        self._loader = loader
        self._embedding_service = embedding_service
        self._vector_store = vector_store
        self._batch_size = max(1, batch_size)

    async def embed_hotels(
        self,
        hotels: list[Hotel],
    ) -> tuple[list[Hotel], list[list[float]]]:
        """Embed each hotel's page content.

        Returns:
            The hotels that were embedded and their vectors, index aligned.

        Raises:
            EmbeddingError: If not a single hotel could be embedded.
        """
        embedded: list[Hotel] = []
        vectors: list[list[float]] = []

        for i in range(0, len(hotels), self._batch_size):
            batch = hotels[i : i + self._batch_size]
            try:
                results = await self._embedding_service.embed_batch(
                    [hotel.page_content() for hotel in batch]
                )
            except EmbeddingError as e:
                logger.warning(
                    f"Skipping {len(batch)} hotels, embedding failed: {e.message}",
                    extra={"batch_start": i, "error_code": e.code.value},
                )
                continue

            embedded.extend(batch)
            vectors.extend(result.embedding for result in results)
            logger.debug(f"Embedded {len(embedded)}/{len(hotels)} hotels")

        if hotels and not embedded:
            raise EmbeddingError(
                "Failed to embed any hotel",
                code=ErrorCode.EMBEDDING_EMPTY_RESULT,
                details={"hotels": len(hotels)},
            )

        return embedded, vectors

    async def ingest(
        self,
        source: str | Path,
        index_config: VectorIndexConfig | None = None,
    ) -> IngestionResult:
        """Run the whole upload.

        Args:
            source: Hotel data file.
            index_config: Index to create after the insert; skipped if None.

        Raises:
            DocumentError: If the data file cannot be loaded.
            EmbeddingError: If no hotel could be embedded.
            BulkInsertError: If no document was written.
            VectorStoreError: If index creation fails.
        """
        hotels = self._loader.load(source)
        embedded, vectors = await self.embed_hotels(hotels)

        insert = await self._vector_store.bulk_insert(embedded, vectors)
        logger.info(
            f"Inserted {insert.inserted} of {len(embedded)} hotels",
            extra={"failed": insert.failed},
        )

        index_created = False
        if index_config is not None:
            await self._vector_store.create_index(index_config)
            index_created = True

        return IngestionResult(
            hotels_loaded=len(hotels),
            embedded=len(embedded),
            skipped=len(hotels) - len(embedded),
            insert=insert,
            index_created=index_created,
        )
