"""Application configuration using Pydantic Settings.

All configuration is loaded from environment variables (or a local .env).
No secrets are hardcoded.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from documentdb_agent.exceptions import ConfigurationError


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class IndexAlgorithm(str, Enum):
    """Vector index kinds supported by DocumentDB."""

    IVF = "vector-ivf"
    HNSW = "vector-hnsw"
    DISKANN = "vector-diskann"


class SimilarityMetric(str, Enum):
    """Similarity metrics supported by DocumentDB vector indexes."""

    COSINE = "COS"
    EUCLIDEAN = "L2"
    INNER_PRODUCT = "IP"


class AzureOpenAISettings(BaseSettings):
    """Azure OpenAI configuration.

    One resource endpoint serves three deployments: embeddings,
    the planner model and the synthesizer model.
    """

    model_config = SettingsConfigDict(
        env_prefix="AZURE_OPENAI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    endpoint: str = Field(
        default="",
        description="Azure OpenAI resource endpoint",
    )
    api_key: SecretStr = Field(
        default=SecretStr(""),
        description="Azure OpenAI API key",
    )
    embedding_deployment: str = Field(
        default="text-embedding-3-small",
        description="Embedding model deployment name",
    )
    embedding_api_version: str = Field(
        default="2024-06-01",
        description="API version for embedding requests",
    )
    planner_deployment: str = Field(
        default="gpt-4o-mini",
        description="Chat deployment used by the planner agent",
    )
    planner_api_version: str = Field(
        default="2024-08-01-preview",
        description="API version for planner requests",
    )
    synth_deployment: str = Field(
        default="gpt-4o-mini",
        description="Chat deployment used by the synthesizer agent",
    )
    synth_api_version: str = Field(
        default="2024-08-01-preview",
        description="API version for synthesizer requests",
    )
    timeout: float = Field(
        default=60.0,
        description="Request timeout in seconds",
    )
    embedding_batch_size: int = Field(
        default=16,
        ge=1,
        description="Texts per embedding request during bulk load",
    )
    planner_max_tokens: int = Field(
        default=1000,
        description="Maximum tokens in the planner response",
    )

    def require_credentials(self) -> None:
        """Raise ConfigurationError unless the endpoint and API key are set."""
        missing = []
        if not self.endpoint:
            missing.append("AZURE_OPENAI_ENDPOINT")
        if not self.api_key.get_secret_value():
            missing.append("AZURE_OPENAI_API_KEY")
        if missing:
            raise ConfigurationError(
                f"Missing Azure OpenAI settings: {', '.join(missing)}",
                details={"missing": missing},
            )


class DocumentDBSettings(BaseSettings):
    """Azure DocumentDB (MongoDB compatible) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="AZURE_DOCUMENTDB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    connection_string: SecretStr = Field(
        default=SecretStr("mongodb://localhost:27017"),
        description="MongoDB connection string",
    )
    database_name: str = Field(
        default="Hotels",
        description="Database holding the hotel collection",
    )
    collection: str = Field(
        default="hotel_data",
        description="Collection name",
    )
    index_name: str = Field(
        default="vectorSearchIndex",
        description="Name of the vector index",
    )
    embedded_field: str = Field(
        default="DescriptionVector",
        description="Document field that stores the embedding",
    )
    server_selection_timeout_ms: int = Field(
        default=30000,
        description="Server selection timeout in milliseconds",
    )


class VectorIndexSettings(BaseSettings):
    """Vector index build configuration."""

    model_config = SettingsConfigDict(
        env_prefix="VECTOR_INDEX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    algorithm: IndexAlgorithm = Field(
        default=IndexAlgorithm.IVF,
        description="Index kind",
    )
    dimensions: int = Field(
        default=1536,
        ge=1,
        description="Embedding dimensions",
    )
    similarity: SimilarityMetric = Field(
        default=SimilarityMetric.COSINE,
        description="Similarity metric",
    )
    num_lists: int = Field(default=10, ge=1, description="IVF cluster count")
    m: int = Field(default=16, ge=2, description="HNSW max connections per layer")
    ef_construction: int = Field(
        default=64,
        ge=4,
        description="HNSW candidate list size during build",
    )
    max_degree: int = Field(default=20, ge=1, description="DiskANN max graph degree")
    l_build: int = Field(default=10, ge=1, description="DiskANN build candidates")


class AgentSettings(BaseSettings):
    """Defaults for the agent pipeline."""

    model_config = SettingsConfigDict(
        env_prefix="AGENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    query: str = Field(
        default="quintessential lodging near running trails, eateries, retail",
        description="Default user request",
    )
    nearest_neighbors: int = Field(
        default=5,
        ge=1,
        le=20,
        description="Default number of hotels to retrieve",
    )


class Settings(BaseSettings):
    """Main application settings.

    Aggregates all configuration sections.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Verbose output (forces DEBUG logging)",
    )
    data_file: Path = Field(
        default=Path("data/HotelsData_toCosmosDB.JSON"),
        description="Hotel data file used by the bulk load",
    )

    api_host: str = Field(
        default="0.0.0.0",
        description="API server host",
    )
    api_port: int = Field(
        default=8000,
        description="API server port",
    )

    openai: AzureOpenAISettings = Field(default_factory=AzureOpenAISettings)
    documentdb: DocumentDBSettings = Field(default_factory=DocumentDBSettings)
    vector_index: VectorIndexSettings = Field(default_factory=VectorIndexSettings)
    agent: AgentSettings = Field(default_factory=AgentSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()
