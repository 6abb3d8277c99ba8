"""
Shared API dependencies for the company auth service.

Service objects are built once by the application lifespan and stored on
``app.state``; these dependencies hand them to the endpoints.
"""

from fastapi import Depends, Request
from loguru import logger

from common.models import Company
from services.company_auth_service.services.auth_orchestrator import AuthOrchestrator
from services.company_auth_service.services.errors import (
    PersistenceError,
    UnauthenticatedError,
)
from services.company_auth_service.services.interfaces import CompanyStore
from services.company_auth_service.services.session_manager import (
    SESSION_COOKIE,
    SessionManager,
)
from services.company_auth_service.services.webhook_registry import WebhookRegistry


def get_orchestrator(request: Request) -> AuthOrchestrator:
    return request.app.state.orchestrator


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.sessions


def get_company_store(request: Request) -> CompanyStore:
    return request.app.state.store


def get_webhook_registry(request: Request) -> WebhookRegistry:
    return request.app.state.webhooks


async def require_company(
    request: Request,
    sessions: SessionManager = Depends(get_session_manager),
    store: CompanyStore = Depends(get_company_store),
) -> Company:
    """
    Resolve the authenticated company from the ``session`` cookie.

    Raises:
        UnauthenticatedError: No cookie, an invalid or expired token, or a
            company that no longer exists (401).
    """
    token = request.cookies.get(SESSION_COOKIE)
    if not token:
        raise UnauthenticatedError("No session token provided")

    company_id = sessions.verify_session(token)
    if company_id is None:
        raise UnauthenticatedError("Invalid or expired session")

    company = await store.find_by_company_id(company_id)
    if company is None:
        logger.warning(f"Valid session for unknown company {company_id}")
        raise UnauthenticatedError()
    return company


def optional_company_id(
    request: Request,
    sessions: SessionManager = Depends(get_session_manager),
) -> str | None:
    """Company id of a valid session cookie, or None. Never raises."""
    return sessions.verify_session(request.cookies.get(SESSION_COOKIE))


async def optional_company(
    company_id: str | None = Depends(optional_company_id),
    store: CompanyStore = Depends(get_company_store),
) -> Company | None:
    """Company behind a valid session cookie, or None. Never raises."""
    if company_id is None:
        return None
    try:
        return await store.find_by_company_id(company_id)
    except PersistenceError:
        logger.warning(f"Session check could not load company {company_id}")
        return None
