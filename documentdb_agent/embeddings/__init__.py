"""Embedding service module."""

from documentdb_agent.embeddings.models import EmbeddingResult
from documentdb_agent.embeddings.service import (
    AzureOpenAIEmbeddingService,
    EmbeddingService,
)

__all__ = [
    "AzureOpenAIEmbeddingService",
    "EmbeddingResult",
    "EmbeddingService",
]
