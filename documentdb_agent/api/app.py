"""FastAPI application entry point.

Configures the application with logging, metrics, exception handling, and
health checks. The agent pipeline is opened for the lifetime of the app.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse

from documentdb_agent import __version__
from documentdb_agent.agents.pipeline import open_pipeline
from documentdb_agent.api.routes import router
from documentdb_agent.config import get_settings
from documentdb_agent.exceptions import AgentPlatformError, ErrorCode
from documentdb_agent.logging_config import get_logger, setup_logging
from documentdb_agent.observability.metrics import (
    MetricsMiddleware,
    get_metrics,
    get_metrics_content_type,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Opens the agent pipeline on startup and closes its clients on shutdown.
    """
    settings = get_settings()
    setup_logging(level=settings.log_level)
    logger.info(
        "Starting DocumentDB hotel agent",
        extra={
            "version": __version__,
            "environment": settings.environment.value,
        },
    )

    async with open_pipeline(settings) as pipeline:
        app.state.pipeline = pipeline
        yield
        app.state.pipeline = None

    logger.info("Shutting down DocumentDB hotel agent")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="DocumentDB Hotel Agent",
        description="Planner/synthesizer hotel recommendations over DocumentDB vector search",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.pipeline = None

    app.add_middleware(MetricsMiddleware)

    # Register exception handlers
    app.add_exception_handler(AgentPlatformError, agent_exception_handler)

    # Register routes
    app.add_api_route("/health", health_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/health/ready", readiness_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/health/live", liveness_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/metrics", metrics, methods=["GET"], tags=["Observability"])
    app.include_router(router)

    return app


async def agent_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle AgentPlatformError exceptions.

    Converts exceptions to structured JSON responses.
    """
    if not isinstance(exc, AgentPlatformError):
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": ErrorCode.INTERNAL_ERROR.value,
                    "message": str(exc),
                    "details": {},
                }
            },
        )

    logger.error(
        f"Request failed: {exc.message}",
        extra={
            "error_code": exc.code.value,
            "path": request.url.path,
            "details": exc.details,
        },
    )

    return JSONResponse(
        status_code=_get_status_code(exc.code),
        content=exc.to_dict(),
    )


def _get_status_code(error_code: ErrorCode) -> int:
    """Map error code to HTTP status code."""
    if error_code == ErrorCode.VALIDATION_ERROR:
        return 400

    if error_code == ErrorCode.DOCUMENT_NOT_FOUND:
        return 404

    if error_code == ErrorCode.LLM_RATE_LIMIT:
        return 429

    # The model misbehaved upstream
    if error_code in (
        ErrorCode.TOOL_NOT_INVOKED,
        ErrorCode.UNEXPECTED_TOOL_INVOCATION,
        ErrorCode.MALFORMED_TOOL_ARGUMENTS,
        ErrorCode.TRUNCATED_PLANNER_RESPONSE,
    ):
        return 502

    if error_code == ErrorCode.LLM_TIMEOUT:
        return 504

    return 500


async def health_check() -> dict[str, Any]:
    """Basic health check endpoint.

    Returns:
        Health status with version and timestamp.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.now(UTC).isoformat(),
    }


async def readiness_check(request: Request, response: Response) -> dict[str, Any]:
    """Kubernetes readiness probe.

    Ready once the pipeline is open and DocumentDB answers a ping.
    """
    checks: dict[str, str] = {"config": "ok"}

    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        checks["pipeline"] = "not_configured"
    else:
        checks["pipeline"] = "ok"
        checks["vector_store"] = "ok" if await pipeline.vector_store.ping() else "unreachable"

    all_ok = all(v == "ok" for v in checks.values())
    if not all_ok:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return {
        "status": "ready" if all_ok else "not_ready",
        "checks": checks,
        "timestamp": datetime.now(UTC).isoformat(),
    }


async def liveness_check() -> dict[str, str]:
    """Kubernetes liveness probe."""
    return {"status": "alive"}


async def metrics() -> Response:
    """Prometheus scrape endpoint."""
    return Response(content=get_metrics(), media_type=get_metrics_content_type())


# Create the application instance
app = create_app()
