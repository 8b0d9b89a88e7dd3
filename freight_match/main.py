"""
FastAPI Application Entry Point

Main application with lifecycle management for the service container
(record store + FMCSA HTTP client).
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from freight_match.constants.constants import SERVICE_NAME, SERVICE_VERSION, TRACE_HEADER_NAME
from freight_match.core.config import is_development, is_production, settings
from freight_match.core.errors import AppError, error_payload
from freight_match.core.logging import get_trace_id, set_trace_id, setup_logging
from freight_match.services.container import ServiceContainer

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Builds the service container on startup unless one was injected, and
    closes the FMCSA client on shutdown.
    """
    # Startup
    logger.info("Freight Match service starting up...")
    owned = app.state.container is None
    if owned:
        app.state.container = ServiceContainer.from_settings()

    yield

    # Shutdown
    logger.info("Freight Match service shutting down...")
    if owned:
        try:
            await app.state.container.aclose()
            logger.info("Closed FMCSA client")
        except Exception as e:
            logger.error(f"Error closing FMCSA client: {e}")
        app.state.container = None

    logger.info("Freight Match service shutdown complete")


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    trace_id = get_trace_id()
    if exc.status_code >= 500:
        logger.error(f"{exc.code}: {exc.message} {exc.details}")
    else:
        logger.info(f"{exc.code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.to_dict(trace_id)}
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"error": error_payload("validation_error", "Invalid request", {"errors": errors}, get_trace_id())}
    )


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Build the FastAPI app.

    Args:
        container: Pre-built services (tests); built from settings when omitted
    """
    setup_logging()

    app = FastAPI(
        title="Freight Match Service",
        description="Carrier verification and load matching for freight brokerage",
        version=SERVICE_VERSION,
        docs_url=None if is_production() else "/docs",
        redoc_url=None if is_production() else "/redoc",
        lifespan=lifespan
    )
    app.state.container = container

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def trace_id_middleware(request: Request, call_next):
        trace_id = set_trace_id(request.headers.get(TRACE_HEADER_NAME))
        response = await call_next(request)
        response.headers[TRACE_HEADER_NAME] = trace_id
        return response

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    from freight_match.api.router import api_router
    app.include_router(api_router, prefix="/api")

    @app.get("/")
    async def root():
        """Health check endpoint."""
        return {
            "service": SERVICE_NAME,
            "status": "running",
            "version": SERVICE_VERSION
        }

    @app.get("/health")
    async def health():
        """Detailed health check."""
        current = app.state.container
        return {
            "status": "healthy",
            "service": SERVICE_NAME,
            "components": {
                "api": "ok",
                "record_store": "ok" if current is not None else "not_initialized",
                "fmcsa_client": "ok" if current is not None and not current.client.is_closed else "closed"
            }
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("freight_match.main:app", host="0.0.0.0", port=8000, reload=is_development())
