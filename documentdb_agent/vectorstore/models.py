"""Vector store data models."""

from typing import Any

from pydantic import BaseModel, Field

from documentdb_agent.config import IndexAlgorithm, SimilarityMetric, VectorIndexSettings
from documentdb_agent.documents.models import Hotel

MIN_NEAREST_NEIGHBORS = 1
MAX_NEAREST_NEIGHBORS = 20


class SearchResult(BaseModel):
    """A hotel returned by a vector search.

    Attributes:
        hotel: The matched hotel (without its vector).
        score: Similarity score as reported by the metric. Higher is better
            for cosine and inner product, lower is better for L2.
    """

    hotel: Hotel = Field(description="Matched hotel")
    score: float = Field(description="Similarity score")


class BulkInsertResult(BaseModel):
    """Outcome of an unordered bulk insert.

    Attributes:
        inserted: Documents written.
        failed: Documents rejected by the store.
        errors: One summary per rejected document.
    """

    inserted: int = Field(ge=0, description="Documents written")
    failed: int = Field(ge=0, description="Documents rejected")
    errors: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Per-document error summaries",
    )

    @property
    def total(self) -> int:
        return self.inserted + self.failed


class VectorIndexConfig(BaseModel):
    """Vector index definition.

    Only the tuning knobs of the selected algorithm are sent to the store.
    """

    algorithm: IndexAlgorithm = Field(default=IndexAlgorithm.IVF)
    dimensions: int = Field(default=1536, ge=1)
    similarity: SimilarityMetric = Field(default=SimilarityMetric.COSINE)
    num_lists: int = Field(default=10, ge=1)
    m: int = Field(default=16, ge=2)
    ef_construction: int = Field(default=64, ge=4)
    max_degree: int = Field(default=20, ge=1)
    l_build: int = Field(default=10, ge=1)

    @classmethod
    def from_settings(cls, settings: VectorIndexSettings) -> "VectorIndexConfig":
        return cls.model_validate(settings.model_dump())

    def search_options(self) -> dict[str, Any]:
        """Build the ``cosmosSearchOptions`` document for ``createIndexes``."""
        options: dict[str, Any] = {"kind": self.algorithm.value}

        if self.algorithm == IndexAlgorithm.IVF:
            options["numLists"] = self.num_lists
        elif self.algorithm == IndexAlgorithm.HNSW:
            options["m"] = self.m
            options["efConstruction"] = self.ef_construction
        else:
            options["maxDegree"] = self.max_degree
            options["lBuild"] = self.l_build

        options["similarity"] = self.similarity.value
        options["dimensions"] = self.dimensions
        return options
