"""Cross-Border Settlement Review Service.

Staff-facing API behind the employee transactions view: filter and select
transactions, approve or reject them, and submit verified transactions to
the settlement network in batches.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from app.api.routes import health_router, review_router
from app.clients.payments_gateway import HttpPaymentsGateway
from app.core.config import AppEnvironment, Settings, get_settings
from app.core.dependencies import WorkspaceRegistry
from app.core.errors import SettlementReviewError, get_status_code
from app.core.logging import setup_logging

logger = logging.getLogger(__name__)

# API version prefix
API_V1_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan context manager."""
    settings = get_settings()
    setup_logging(settings)

    logger.info(
        "Starting Settlement Review Service",
        extra={
            "app": settings.app.name,
            "env": settings.app.env,
            "version": settings.app.version,
        },
    )

    gateway = getattr(app.state, "gateway", None) or HttpPaymentsGateway(settings.payments_api)
    app.state.settings = settings
    app.state.gateway = gateway
    app.state.workspaces = WorkspaceRegistry(settings, gateway)

    yield

    app.state.workspaces.close_all()
    await gateway.aclose()

    logger.info("Settlement Review Service stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Settlement Review API",
        description=(
            "Employee review of cross-border payment transactions and batch "
            "submission of verified transactions for settlement."
        ),
        version=settings.app.version,
        lifespan=lifespan,
        docs_url="/docs" if settings.app.env != AppEnvironment.PROD else None,
        redoc_url="/redoc" if settings.app.env != AppEnvironment.PROD else None,
        openapi_url="/openapi.json" if settings.app.env != AppEnvironment.PROD else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_allowed_origins,
        allow_credentials=settings.security.cors_allow_credentials,
        allow_methods=settings.security.cors_allow_methods,
        allow_headers=settings.security.cors_allow_headers,
    )

    app.include_router(health_router, prefix=API_V1_PREFIX)
    app.include_router(review_router, prefix=API_V1_PREFIX)

    setup_telemetry(app, settings)

    @app.exception_handler(SettlementReviewError)
    async def domain_error_handler(  # type: ignore[reportUnusedFunction]
        request: Request, exc: SettlementReviewError
    ) -> JSONResponse:
        """Handle domain-specific errors and return appropriate HTTP responses."""
        status_code = get_status_code(exc)
        return JSONResponse(
            status_code=status_code,
            content={"detail": exc.message, **({"errors": exc.details} if exc.details else {})},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(  # type: ignore[reportUnusedFunction]
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions and return 500 error responses."""
        logger.exception(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app


def setup_telemetry(app: FastAPI, settings: Settings) -> None:
    """Setup OpenTelemetry instrumentation."""
    if not settings.observability.otlp_endpoint:
        return

    resource = Resource(
        attributes={
            SERVICE_NAME: settings.observability.service_name,
        }
    )

    provider = TracerProvider(resource=resource)
    exporter = OTLPSpanExporter(
        endpoint=settings.observability.otlp_endpoint,
        insecure=settings.observability.otlp_insecure,
    )
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    FastAPIInstrumentor.instrument_app(app)


def run() -> None:
    """Run the application using uvicorn."""
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "app.main:create_app",
        factory=True,
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.app.env == AppEnvironment.LOCAL,
        workers=1 if settings.app.env == AppEnvironment.LOCAL else settings.server.workers,
        log_level=settings.app.log_level.value.lower(),
    )


if __name__ == "__main__":
    run()
