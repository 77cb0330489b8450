"""FastAPI application factory"""

import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from runway_guard.api.dependencies import get_request_id
from runway_guard.api.middleware import RequestIDMiddleware, MetricsMiddleware
from runway_guard.api.v1 import alerts, digest, runway
from runway_guard.domain.exceptions import DomainException
from runway_guard.infrastructure.observability.logging import setup_logging
from runway_guard.config import settings

# Setup structured logging
setup_logging(settings.log_level)


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """Map typed domain errors to their declared HTTP status"""
    log = logging.error if exc.status_code >= 500 else logging.warning
    log(
        f"{exc.code}: {exc}",
        extra={"request_id": get_request_id(request), "error_code": exc.code},
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Runway Guard",
        description="Burn, runway and spend alerting with multi-channel notifications",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(DomainException, domain_exception_handler)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(alerts.router, prefix="/v1", tags=["alerts"])
    app.include_router(runway.router, prefix="/v1", tags=["metrics"])
    app.include_router(digest.router, prefix="/v1", tags=["digest"])

    return app


app = create_app()
