"""Observability module for metrics and monitoring."""

from documentdb_agent.observability.metrics import (
    MetricsMiddleware,
    get_metrics,
    track_bulk_insert,
    track_embedding_request,
    track_llm_request,
    track_pipeline_run,
    track_search_results,
    track_vectorstore_operation,
)

__all__ = [
    "MetricsMiddleware",
    "get_metrics",
    "track_bulk_insert",
    "track_embedding_request",
    "track_llm_request",
    "track_pipeline_run",
    "track_search_results",
    "track_vectorstore_operation",
]
