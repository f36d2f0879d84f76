"""Prometheus metrics for the agent pipeline.

Provides metrics instrumentation for:
- HTTP request latency and counts
- Embedding and chat completion requests (latency, tokens)
- Vector store operations
- Planner / synthesizer pipeline runs
"""

import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

HTTP_REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint", "status_code"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

HTTP_REQUEST_TOTAL = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

PIPELINE_RUN_DURATION = Histogram(
    "agent_pipeline_duration_seconds",
    "Planner + synthesizer run duration in seconds",
    ["status"],
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0],
)

PIPELINE_RUN_TOTAL = Counter(
    "agent_pipeline_runs_total",
    "Total pipeline runs",
    ["status"],
)

LLM_REQUEST_DURATION = Histogram(
    "llm_request_duration_seconds",
    "Chat completion duration in seconds",
    ["model", "status"],
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0],
)

LLM_REQUEST_TOTAL = Counter(
    "llm_requests_total",
    "Total chat completion requests",
    ["model", "status"],
)

LLM_TOKENS_TOTAL = Counter(
    "llm_tokens_total",
    "Total LLM tokens used",
    ["model", "type"],
)

EMBEDDING_REQUEST_DURATION = Histogram(
    "embedding_request_duration_seconds",
    "Embedding request duration in seconds",
    ["model", "status"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0],
)

EMBEDDING_REQUEST_TOTAL = Counter(
    "embedding_requests_total",
    "Total embedding requests",
    ["model", "status"],
)

EMBEDDING_BATCH_SIZE = Histogram(
    "embedding_batch_size",
    "Texts per embedding request",
    ["model"],
    buckets=[1, 2, 4, 8, 16, 32, 64],
)

VECTORSTORE_OPERATION_DURATION = Histogram(
    "vectorstore_operation_duration_seconds",
    "Vector store operation duration",
    ["operation", "status"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0],
)

VECTORSTORE_DOCUMENTS_TOTAL = Counter(
    "vectorstore_documents_total",
    "Documents processed by bulk inserts",
    ["outcome"],
)

SEARCH_RESULTS_RETURNED = Histogram(
    "vector_search_results_returned",
    "Hotels returned per vector search",
    buckets=[0, 1, 2, 3, 5, 10, 20],
)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to collect HTTP request metrics."""

    def __init__(self, app: ASGIApp) -> None:
        super().__init__(app)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Process request and collect metrics."""
        if request.url.path == "/metrics":
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        endpoint = self._normalize_endpoint(request.url.path)

        HTTP_REQUEST_DURATION.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).observe(duration)
        HTTP_REQUEST_TOTAL.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).inc()

        return response

    def _normalize_endpoint(self, path: str) -> str:
        """Normalize endpoint path to reduce cardinality."""
        if path.startswith("/health"):
            return "/health"
        if path.startswith("/api/v1/"):
            parts = path.split("/")
            if len(parts) >= 4:
                return f"/api/v1/{parts[3]}"
        return path


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Get the content type for metrics response."""
    return CONTENT_TYPE_LATEST


def _status(success: bool) -> str:
    return "success" if success else "error"


def track_llm_request(
    model: str,
    duration: float,
    prompt_tokens: int,
    completion_tokens: int,
    success: bool = True,
) -> None:
    """Track chat completion metrics.

    Args:
        model: Deployment name.
        duration: Request duration in seconds.
        prompt_tokens: Number of prompt tokens.
        completion_tokens: Number of completion tokens.
        success: Whether the request succeeded.
    """
    status = _status(success)

    LLM_REQUEST_DURATION.labels(model=model, status=status).observe(duration)
    LLM_REQUEST_TOTAL.labels(model=model, status=status).inc()

    if success:
        LLM_TOKENS_TOTAL.labels(model=model, type="prompt").inc(prompt_tokens)
        LLM_TOKENS_TOTAL.labels(model=model, type="completion").inc(completion_tokens)


def track_embedding_request(
    model: str,
    duration: float,
    batch_size: int,
    success: bool = True,
) -> None:
    """Track embedding request metrics."""
    status = _status(success)

    EMBEDDING_REQUEST_DURATION.labels(model=model, status=status).observe(duration)
    EMBEDDING_REQUEST_TOTAL.labels(model=model, status=status).inc()
    EMBEDDING_BATCH_SIZE.labels(model=model).observe(batch_size)


def track_vectorstore_operation(
    operation: str,
    duration: float,
    success: bool = True,
) -> None:
    """Track a vector store call (bulk_insert, vector_search, create_index, ...)."""
    VECTORSTORE_OPERATION_DURATION.labels(
        operation=operation,
        status=_status(success),
    ).observe(duration)


def track_bulk_insert(inserted: int, failed: int) -> None:
    """Track per-document outcomes of a bulk insert."""
    VECTORSTORE_DOCUMENTS_TOTAL.labels(outcome="inserted").inc(inserted)
    VECTORSTORE_DOCUMENTS_TOTAL.labels(outcome="failed").inc(failed)


def track_search_results(count: int) -> None:
    """Track how many hotels a vector search returned."""
    SEARCH_RESULTS_RETURNED.observe(count)


def track_pipeline_run(duration: float, success: bool = True) -> None:
    """Track one planner + synthesizer run."""
    status = _status(success)

    PIPELINE_RUN_DURATION.labels(status=status).observe(duration)
    PIPELINE_RUN_TOTAL.labels(status=status).inc()
