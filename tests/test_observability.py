"""Tests for observability module."""

import pytest
from httpx import ASGITransport, AsyncClient

from documentdb_agent.api.app import app
from documentdb_agent.observability.metrics import (
    get_metrics,
    get_metrics_content_type,
    track_bulk_insert,
    track_embedding_request,
    track_llm_request,
    track_pipeline_run,
    track_search_results,
    track_vectorstore_operation,
)


class TestMetricsEndpoint:
    """Tests for /metrics endpoint."""

    @pytest.mark.asyncio
    async def test_metrics_endpoint_returns_prometheus_format(self) -> None:
        """Metrics endpoint returns Prometheus format."""
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/metrics")

        assert response.status_code == 200
        assert "text/plain" in response.headers["content-type"]
        assert b"# HELP" in response.content


class TestMetricsFunctions:
    """Tests for metrics tracking functions."""

    def test_get_metrics_returns_bytes(self) -> None:
        """get_metrics returns bytes."""
        assert isinstance(get_metrics(), bytes)
        assert "text/plain" in get_metrics_content_type()

    def test_track_llm_request_success(self) -> None:
        """track_llm_request records tokens on success."""
        track_llm_request(
            model="gpt-4o-mini",
            duration=1.5,
            prompt_tokens=100,
            completion_tokens=50,
            success=True,
        )

        metrics = get_metrics().decode()
        assert "llm_request_duration_seconds" in metrics
        assert 'llm_tokens_total{model="gpt-4o-mini",type="prompt"}' in metrics

    def test_track_llm_request_failure(self) -> None:
        track_llm_request(
            model="gpt-4o-mini",
            duration=0.5,
            prompt_tokens=0,
            completion_tokens=0,
            success=False,
        )

        metrics = get_metrics().decode()
        assert 'llm_requests_total{model="gpt-4o-mini",status="error"}' in metrics

    def test_track_embedding_request(self) -> None:
        track_embedding_request(
            model="text-embedding-3-small",
            duration=0.1,
            batch_size=16,
        )

        metrics = get_metrics().decode()
        assert "embedding_request_duration_seconds" in metrics
        assert "embedding_batch_size" in metrics

    def test_track_vectorstore_operation(self) -> None:
        track_vectorstore_operation("vector_search", 0.02)

        metrics = get_metrics().decode()
        assert 'operation="vector_search"' in metrics

    def test_track_bulk_insert(self) -> None:
        track_bulk_insert(inserted=48, failed=2)

        metrics = get_metrics().decode()
        assert 'vectorstore_documents_total{outcome="inserted"}' in metrics
        assert 'vectorstore_documents_total{outcome="failed"}' in metrics

    def test_track_search_results(self) -> None:
        track_search_results(5)
        assert "vector_search_results_returned" in get_metrics().decode()

    def test_track_pipeline_run(self) -> None:
        track_pipeline_run(3.2)
        track_pipeline_run(0.4, success=False)

        metrics = get_metrics().decode()
        assert 'agent_pipeline_runs_total{status="success"}' in metrics
        assert 'agent_pipeline_runs_total{status="error"}' in metrics


class TestMetricsMiddleware:
    """Tests for MetricsMiddleware."""

    @pytest.mark.asyncio
    async def test_middleware_records_request_metrics(self) -> None:
        """Middleware records HTTP request metrics."""
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            await client.get("/health/live")

        metrics = get_metrics().decode()
        assert "http_request_duration_seconds" in metrics
        assert "http_requests_total" in metrics
