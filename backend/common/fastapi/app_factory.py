"""
Common FastAPI application factory with standard middleware and configuration.

This module provides a factory function for creating FastAPI applications with
consistent configuration, middleware, and error handling across services.

Features:
    - Automatic logging setup
    - CORS configuration (environment-aware)
    - Request timing middleware
    - APIError rendering and global exception handling
    - Health check endpoints
    - OpenAPI documentation

Middleware:
    - CORS: Configured based on environment (local development vs deployed)
    - Request Timing: Adds X-Process-Time header to all responses
    - Logging: Automatic request/response logging

Endpoints:
    - GET /: Root endpoint with service information
    - GET /health: Health check endpoint
    - GET /docs: Swagger UI documentation

Usage:
    ```python
    from common.fastapi import create_fastapi_app

    app = create_fastapi_app(
        service_name="company-auth-service",
        description="Company auth service API",
        api_router=api_router,
        lifespan=lifespan,
    )
    ```
"""

from collections.abc import Callable
import time
from typing import Any

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from loguru import logger

from common.config import BaseServiceSettings, get_settings
from common.exceptions import GENERIC_ERROR_MESSAGE, APIError, api_error_response
from common.logging import setup_logging


def create_fastapi_app(
    service_name: str,
    description: str,
    api_router: APIRouter | None = None,
    additional_setup: Callable[[FastAPI, BaseServiceSettings], None] | None = None,
    root_path: str = "",
    lifespan: Callable[[FastAPI], Any] | None = None,
    settings: BaseServiceSettings | None = None,
) -> FastAPI:
    """
    Create a FastAPI application with standardized configuration and middleware.

    Args:
        service_name: Name of the service (e.g., "company-auth-service").
            Used to load service-specific settings and configure logging.
        description: Human-readable description of the service. Used in OpenAPI documentation.
        api_router: Optional FastAPI APIRouter instance containing route definitions.
            If provided, routes are included with the API_V1_STR prefix.
        additional_setup: Optional callback for additional application setup, called
            after all standard configuration is complete. Signature:
            `(app: FastAPI, settings: BaseServiceSettings) -> None`
        root_path: Optional root path for reverse proxy scenarios. Ignored in local
            development.
        lifespan: Optional lifespan context manager factory, passed to FastAPI.
            Services use it to own resources such as database engines.
        settings: Optional pre-built settings instance. Loaded from the environment
            when omitted.

    Returns:
        Fully configured FastAPI application instance ready to run.

    Side Effects:
        - Configures logging for the service (via setup_logging)
        - Adds middleware to the application
        - Registers exception handlers
        - Creates health check and root endpoints
    """

    # Setup logging first
    setup_logging(service_name)

    settings = settings or get_settings(service_name)

    # In development, root_path should be empty as we are not behind a reverse proxy
    effective_root_path = "" if settings.is_local else root_path

    app = FastAPI(
        title=settings.SERVICE_NAME,
        version=settings.SERVICE_VERSION,
        description=description,
        openapi_url="/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        root_path=effective_root_path,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Configure CORS
    if not settings.is_local:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    else:
        # Note: allow_credentials=True is incompatible with allow_origins=["*"]
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ORIGINS
            or [
                "http://localhost:3000",
                "http://localhost:3001",
                "http://127.0.0.1:3000",
                "http://127.0.0.1:3001",
            ],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def add_process_time_header(
        request: Request, call_next: Callable[[Request], Any]
    ) -> Response:
        """Add process time header to responses."""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        # Path only: query strings may carry codes and signatures
        logger.info(
            f"{request.method} {request.url.path} - {response.status_code} - {process_time:.3f}s"
        )
        return response

    if api_router:
        app.include_router(api_router, prefix=settings.API_V1_STR)

    @app.get("/health")
    async def health_check() -> dict[str, Any]:
        """Health check endpoint."""
        return {
            "service": settings.SERVICE_NAME,
            "version": settings.SERVICE_VERSION,
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "timestamp": time.time(),
        }

    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint."""
        return {
            "service": settings.SERVICE_NAME,
            "version": settings.SERVICE_VERSION,
            "message": f"{settings.SERVICE_NAME} is running",
            "docs": "/docs",
            "health": "/health",
        }

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
        return api_error_response(exc)

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.opt(exception=exc).error(
            f"Unhandled exception in {request.method} {request.url.path}: {exc}"
        )
        return JSONResponse(
            status_code=500,
            content={"error": GENERIC_ERROR_MESSAGE},
        )

    if additional_setup:
        additional_setup(app, settings)

    return app
