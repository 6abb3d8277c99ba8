"""
Company Auth Service - FastAPI Application Entrypoint

This module is the main entry point for the Company Auth Service, which installs
a third-party app on tenant companies of an external commerce platform and keeps
a stateless, cookie-based admin session for each of them.

It provides RESTful APIs for:

- The signed OAuth callback (authorization-code exchange and company storage)
- Session refresh with rotation of the provider's single-use refresh token
- Current company profile, logout and session check
- Provider webhooks

Architecture:
    - API Layer: FastAPI endpoints handling HTTP requests/responses
    - Service Layer: HMAC verification, session tokens, auth orchestration
    - Client Layer: httpx client for the authorization server
    - Database Layer: Company repository over an app-owned async engine

Resource Ownership:
    The lifespan builds the database engine and the shared httpx client on
    startup, stores the wired service objects on ``app.state`` and disposes
    both on shutdown. Nothing is a module-level singleton.

Example:
    To run the service locally:
        ```bash
        uvicorn services.company_auth_service:app --port 4000 --reload
        ```

    The service will be available at:
        - Callback: http://localhost:4000/auth/callback
        - Swagger UI: http://localhost:4000/docs
        - Health Check: http://localhost:4000/health

Attributes:
    app (FastAPI): The FastAPI application instance.

See Also:
    - services.company_auth_service.api.v1.api: API router definitions
    - services.company_auth_service.services.auth_orchestrator: Core auth flows
    - common.fastapi.app_factory: FastAPI application factory
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
import httpx
from loguru import logger

from common.config import CompanyAuthServiceSettings
from common.database import create_async_engine_from_settings, create_session_maker
from common.fastapi import create_fastapi_app
from services.company_auth_service.api.v1.api import api_router
from services.company_auth_service.clients.provider_client import ProviderClient
from services.company_auth_service.database.company_repository import CompanyRepository
from services.company_auth_service.services.auth_orchestrator import AuthOrchestrator
from services.company_auth_service.services.clock import Clock, system_clock_ms
from services.company_auth_service.services.hmac_verifier import HmacVerifier
from services.company_auth_service.services.interfaces import (
    AuthorizationServerClient,
    CompanyStore,
)
from services.company_auth_service.services.session_manager import SessionManager
from services.company_auth_service.services.webhook_registry import build_default_registry

SERVICE_NAME = "company-auth-service"


def wire_services(
    app: FastAPI,
    store: CompanyStore,
    provider: AuthorizationServerClient,
    clock: Clock = system_clock_ms,
) -> None:
    """
    Build the service objects around ``store`` and ``provider`` and put them on app.state.

    Args:
        app: Application whose ``state.settings`` holds CompanyAuthServiceSettings.
        store: Company persistence.
        provider: Authorization server client.
        clock: Millisecond clock shared by the session manager and the orchestrator.
    """
    settings: CompanyAuthServiceSettings = app.state.settings
    sessions = SessionManager(settings, clock=clock)

    app.state.store = store
    app.state.sessions = sessions
    app.state.orchestrator = AuthOrchestrator(
        verifier=HmacVerifier(settings.CLIENT_SECRET),
        provider=provider,
        store=store,
        sessions=sessions,
        settings=settings,
        clock=clock,
    )
    app.state.webhooks = build_default_registry(store)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings: CompanyAuthServiceSettings = app.state.settings

    missing = settings.missing_required()
    if missing:
        logger.warning(f"Missing required settings: {', '.join(missing)}")

    engine = create_async_engine_from_settings(settings)
    http_client = httpx.AsyncClient(timeout=settings.PROVIDER_TIMEOUT_SECONDS)

    wire_services(
        app,
        store=CompanyRepository(create_session_maker(engine)),
        provider=ProviderClient(settings, http_client),
    )
    logger.info(f"{settings.SERVICE_NAME} started (environment={settings.ENVIRONMENT})")

    try:
        yield
    finally:
        await http_client.aclose()
        await engine.dispose()
        logger.info(f"{settings.SERVICE_NAME} stopped")


def create_app(settings: CompanyAuthServiceSettings | None = None) -> FastAPI:
    return create_fastapi_app(
        service_name=SERVICE_NAME,
        description="Company OAuth install and session service",
        api_router=api_router,
        lifespan=lifespan,
        settings=settings,
    )


app = create_app()
