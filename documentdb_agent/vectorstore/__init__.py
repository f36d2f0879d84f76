"""Vector store module."""

from documentdb_agent.vectorstore.models import (
    MAX_NEAREST_NEIGHBORS,
    MIN_NEAREST_NEIGHBORS,
    BulkInsertResult,
    SearchResult,
    VectorIndexConfig,
)
from documentdb_agent.vectorstore.service import (
    DocumentDBVectorStore,
    InMemoryVectorStore,
    VectorStore,
    rank_results,
)

__all__ = [
    "MAX_NEAREST_NEIGHBORS",
    "MIN_NEAREST_NEIGHBORS",
    "BulkInsertResult",
    "DocumentDBVectorStore",
    "InMemoryVectorStore",
    "SearchResult",
    "VectorIndexConfig",
    "VectorStore",
    "rank_results",
]
