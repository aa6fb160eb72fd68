"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from tfs_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from tfs_gateway.api.v1 import financing, score, tax, vehicles
from tfs_gateway.infrastructure.observability.logging import setup_logging
from tfs_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="TFS Gateway",
        description="TFS Score, financing, tax lookup and vehicle ranking service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(score.router, prefix="/v1", tags=["score"])
    app.include_router(financing.router, prefix="/v1", tags=["financing"])
    app.include_router(tax.router, prefix="/v1", tags=["tax"])
    app.include_router(vehicles.router, prefix="/v1", tags=["vehicles"])

    return app


app = create_app()
