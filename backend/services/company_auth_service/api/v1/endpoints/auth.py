"""
Company Auth API Endpoints

This module defines the REST API endpoints of the company auth service: the
signed OAuth callback that installs the app for a company, the cookie-based
session endpoints, and the provider webhook receiver.

Endpoints:
    GET /auth/callback
        Verify the signed callback, exchange the authorization code, store the
        company and redirect with ``session`` and ``refresh_session`` cookies.

    POST /auth/refresh
        Rotate the provider token pair using the ``refresh_session`` cookie and
        issue a new cookie pair.

    GET /auth/me
        Public profile of the company behind the ``session`` cookie.

    POST /auth/logout
        Clear both session cookies.

    GET /auth/check
        Report whether the ``session`` cookie is valid and its company still
        exists. Never fails.

    POST /auth/webhook
        Dispatch a provider event to its registered handler.

Error Handling:
    Failures are raised as APIError subclasses and rendered by the app factory:
    - 400 Bad Request: Missing callback parameters
    - 401 Unauthorized: Bad signature, stale callback, missing/invalid session,
      or a refresh that requires reinstalling the app
    - 500 Internal Server Error: Provider or database failures (generic message)

Example Usage:
    ```python
    response = client.post("/auth/refresh", cookies={"refresh_session": token})
    if response.status_code == 401:
        show_reinstall_prompt(response.json()["message"])
    ```
"""

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import RedirectResponse

from common.exceptions import create_api_error
from common.models import Company
from services.company_auth_service.api.dependencies import (
    get_orchestrator,
    get_session_manager,
    get_webhook_registry,
    optional_company,
    require_company,
)
from services.company_auth_service.api.v1.models import (
    CheckResponse,
    CompanyProfileResponse,
    CompanySummary,
    LogoutResponse,
    RefreshResponse,
    WebhookRequest,
    WebhookResponse,
)
from services.company_auth_service.services.auth_orchestrator import AuthOrchestrator
from services.company_auth_service.services.session_manager import (
    REFRESH_COOKIE,
    SessionManager,
)
from services.company_auth_service.services.webhook_registry import (
    WebhookEvent,
    WebhookRegistry,
)

router = APIRouter()


@router.get("/callback", status_code=302, response_class=RedirectResponse)
async def callback(
    code: str | None = Query(None),
    company_id: str | None = Query(None),
    timestamp: str | None = Query(None),
    signature: str | None = Query(None, alias="hmac"),
    redirect_to: str | None = Query(None),
    orchestrator: AuthOrchestrator = Depends(get_orchestrator),
    sessions: SessionManager = Depends(get_session_manager),
) -> RedirectResponse:
    """
    Handle the provider's signed OAuth callback.

    Query parameters ``code``, ``company_id``, ``timestamp`` and ``hmac`` are
    required; ``redirect_to`` is optional and part of the signed payload.

    Returns:
        302 redirect to the percent-decoded ``redirect_to`` (or APP_URL) with
        the ``session`` and ``refresh_session`` cookies set.

    Raises:
        ValidationError: Missing parameters (400).
        SignatureError / ExpiredRequestError: Bad signature or stale request (401).
        InternalError: Code exchange, profile fetch or persistence failed (500).
    """
    outcome = await orchestrator.handle_callback(
        code=code,
        company_id=company_id,
        timestamp=timestamp,
        signature=signature,
        redirect_to=redirect_to,
    )
    response = RedirectResponse(url=outcome.redirect_url, status_code=302)
    sessions.set_cookies(response, outcome.sessions)
    return response


@router.post("/refresh", response_model=RefreshResponse)
async def refresh(
    request: Request,
    response: Response,
    orchestrator: AuthOrchestrator = Depends(get_orchestrator),
    sessions: SessionManager = Depends(get_session_manager),
) -> RefreshResponse:
    """
    Renew the session from the ``refresh_session`` cookie.

    The request body is ignored; only the cookie identifies the company. On
    success the provider tokens are rotated and stored before the new cookie
    pair is returned.

    Raises:
        UnauthenticatedError: No refresh cookie (401).
        ReinstallRequiredError: Invalid refresh token, unknown company, or the
            provider revoked the stored token (401, reinstall guidance).
        UpstreamTransientError / PersistenceError: Retryable failure (500).
    """
    outcome = await orchestrator.refresh(request.cookies.get(REFRESH_COOKIE))
    sessions.set_cookies(response, outcome.sessions)
    company = outcome.company
    return RefreshResponse(
        success=True,
        message="Session refreshed successfully",
        company=CompanySummary(id=company.id, handle=company.handle, name=company.name),
    )


@router.get("/me", response_model=CompanyProfileResponse)
async def me(company: Company = Depends(require_company)) -> CompanyProfileResponse:
    """Return the authenticated company's public profile (never tokens)."""
    return CompanyProfileResponse(**company.public_profile())


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    response: Response,
    sessions: SessionManager = Depends(get_session_manager),
) -> LogoutResponse:
    sessions.destroy(response)
    return LogoutResponse(success=True, message="Logged out successfully")


@router.get("/check", response_model=CheckResponse)
async def check(company: Company | None = Depends(optional_company)) -> CheckResponse:
    """Report whether the session cookie belongs to a stored company."""
    return CheckResponse(authenticated=company is not None)


@router.post("/webhook", response_model=WebhookResponse)
async def webhook(
    payload: WebhookRequest,
    registry: WebhookRegistry = Depends(get_webhook_registry),
) -> WebhookResponse:
    """
    Receive a provider event and dispatch it by type.

    Unknown event types are acknowledged and ignored.

    Raises:
        APIError: The handler failed (500, "Failed to process webhook").
    """
    event = WebhookEvent(
        type=payload.type,
        data=payload.data,
        timestamp=payload.timestamp,
        company_id=payload.company_id,
    )
    try:
        await registry.dispatch(event)
    except Exception as e:
        raise create_api_error(
            f"processing webhook {payload.type}",
            internal_error=e,
            user_message="Failed to process webhook",
        ) from e
    return WebhookResponse(success=True)
