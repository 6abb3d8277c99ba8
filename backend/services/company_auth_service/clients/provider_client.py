"""
Authorization Server Client

This module talks to the external authorization server (the commerce platform
the app is installed on). It exchanges authorization codes, rotates refresh
tokens and fetches company profiles.

Wire format:
    POST {PROVIDER_BASE_URL}/oauth/token    (form) grant_type=authorization_code, code,
                                            client_id, client_secret, redirect_uri
    POST {PROVIDER_BASE_URL}/oauth/refresh  (form) grant_type=refresh_token, refresh_token,
                                            client_id, client_secret
    GET  {PROVIDER_BASE_URL}/companies/{company_id}   (Bearer access token when known)

    Token responses: {"access_token", "refresh_token", "expires_in_minutes"}

Failure model:
    Any non-2xx response raises UpstreamError(status_code, body). Transport
    failures raise UpstreamError with status_code=None. Callers decide what an
    error means; UpstreamError.is_terminal() is the documented classifier for
    refresh rejections.

Retries:
    Only fetch_profile (an idempotent GET) is retried, once, with jittered
    backoff, and only on 5xx or transport failures. Code exchange and refresh
    consume single-use credentials and are never retried.

Example:
    ```python
    async with httpx.AsyncClient(timeout=30.0) as http:
        client = ProviderClient(settings, http)
        tokens = await client.exchange_code("abc123")
        profile = await client.fetch_profile("co_1", access_token=tokens.access_token)
    ```
"""

import asyncio
from dataclasses import dataclass
import json
import random
from typing import Any

import httpx
from loguru import logger

from common.config import CompanyAuthServiceSettings

TOKEN_ENDPOINT = "/oauth/token"
REFRESH_ENDPOINT = "/oauth/refresh"
COMPANY_ENDPOINT = "/companies/{company_id}"

AUTHORIZATION_CODE_GRANT = "authorization_code"
REFRESH_TOKEN_GRANT = "refresh_token"

# Structured error codes the provider uses for dead refresh tokens
TERMINAL_ERROR_CODES = frozenset(
    {"invalid_grant", "invalid_token", "token_revoked", "revoked_token"}
)
# Fallback when the provider answers with free text instead of a code
TERMINAL_BODY_MARKERS = (
    "revoked",
    "invalid_grant",
    "invalid_token",
    "invalid refresh token",
    "refresh token is invalid",
    "token expired",
)
TERMINAL_STATUS_CODES = frozenset({400, 401, 403})


class UpstreamError(Exception):
    """
    Non-2xx response or transport failure from the authorization server.

    Attributes:
        status_code: HTTP status, or None when no response was received.
        body: Raw response body (or the transport error description).
    """

    def __init__(self, status_code: int | None, body: str, operation: str = "") -> None:
        self.status_code = status_code
        self.body = body or ""
        self.operation = operation
        super().__init__(f"{operation or 'provider call'} failed: {status_code} {self.body[:200]}")

    @property
    def error_code(self) -> str | None:
        """The ``error`` (or ``code``) field of a JSON body, if any."""
        try:
            payload = json.loads(self.body)
        except (ValueError, TypeError):
            return None
        if not isinstance(payload, dict):
            return None
        code = payload.get("error") or payload.get("code")
        return str(code).lower() if code else None

    @property
    def is_transport_error(self) -> bool:
        return self.status_code is None

    def is_terminal(self) -> bool:
        """
        Whether the provider rejected the token for good.

        Terminal iff the status is 400, 401 or 403 and either the structured
        error code is in TERMINAL_ERROR_CODES or the lowercased body contains
        one of TERMINAL_BODY_MARKERS. 5xx responses, transport failures and
        unmarked 4xx responses are transient.
        """
        if self.status_code not in TERMINAL_STATUS_CODES:
            return False
        if self.error_code in TERMINAL_ERROR_CODES:
            return True
        body = self.body.lower()
        return any(marker in body for marker in TERMINAL_BODY_MARKERS)


@dataclass(frozen=True)
class ProviderTokens:
    access_token: str
    refresh_token: str | None
    expires_in_minutes: int | None


@dataclass(frozen=True)
class ProviderProfile:
    name: str
    handle: str | None = None
    description: str | None = None
    logo_url: str | None = None
    contact: str | None = None


def _parse_tokens(payload: Any, operation: str) -> ProviderTokens:
    if not isinstance(payload, dict) or not payload.get("access_token"):
        raise UpstreamError(200, json.dumps(payload)[:500], operation)

    expires_in_minutes = payload.get("expires_in_minutes")
    if expires_in_minutes is None and payload.get("expires_in") is not None:
        expires_in_minutes = int(payload["expires_in"]) // 60

    return ProviderTokens(
        access_token=payload["access_token"],
        refresh_token=payload.get("refresh_token"),
        expires_in_minutes=int(expires_in_minutes) if expires_in_minutes is not None else None,
    )


def _parse_profile(payload: Any, company_id: str) -> ProviderProfile:
    if not isinstance(payload, dict):
        raise UpstreamError(200, str(payload)[:500], "fetch profile")
    # Some deployments wrap the resource in {"data": {...}}
    if isinstance(payload.get("data"), dict):
        payload = payload["data"]

    metadata = payload.get("metadata") if isinstance(payload.get("metadata"), dict) else {}
    return ProviderProfile(
        name=payload.get("name") or company_id,
        handle=payload.get("handle"),
        description=payload.get("description"),
        logo_url=payload.get("logoUrl") or payload.get("logo_url"),
        contact=payload.get("contact") or metadata.get("contact"),
    )


class ProviderClient:
    """
    httpx implementation of the AuthorizationServerClient interface.

    Args:
        settings: Service settings (base URL, client credentials, timeout, backoff).
        http_client: Shared httpx.AsyncClient. Owned by the caller, which closes it.
    """

    def __init__(self, settings: CompanyAuthServiceSettings, http_client: httpx.AsyncClient) -> None:
        self.settings = settings
        self._http = http_client
        self._base_url = settings.PROVIDER_BASE_URL.rstrip("/")

    async def exchange_code(self, code: str) -> ProviderTokens:
        response = await self._send(
            "exchange code",
            "POST",
            TOKEN_ENDPOINT,
            data={
                "grant_type": AUTHORIZATION_CODE_GRANT,
                "code": code,
                "client_id": self.settings.CLIENT_ID,
                "client_secret": self.settings.CLIENT_SECRET,
                "redirect_uri": self.settings.REDIRECT_URI,
            },
        )
        return _parse_tokens(self._json(response, "exchange code"), "exchange code")

    async def refresh(self, refresh_token: str) -> ProviderTokens:
        response = await self._send(
            "refresh token",
            "POST",
            REFRESH_ENDPOINT,
            data={
                "grant_type": REFRESH_TOKEN_GRANT,
                "refresh_token": refresh_token,
                "client_id": self.settings.CLIENT_ID,
                "client_secret": self.settings.CLIENT_SECRET,
            },
        )
        return _parse_tokens(self._json(response, "refresh token"), "refresh token")

    async def fetch_profile(self, company_id: str, access_token: str | None = None) -> ProviderProfile:
        headers = {"Accept": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        path = COMPANY_ENDPOINT.format(company_id=company_id)

        try:
            response = await self._send("fetch profile", "GET", path, headers=headers)
        except UpstreamError as e:
            if not (e.is_transport_error or e.status_code >= 500):
                raise
            delay = self.settings.PROVIDER_RETRY_BACKOFF_SECONDS * (1 + random.random())
            logger.warning(
                f"Profile fetch for company {company_id} failed ({e.status_code}), retrying in {delay:.2f}s"
            )
            await asyncio.sleep(delay)
            response = await self._send("fetch profile", "GET", path, headers=headers)

        return _parse_profile(self._json(response, "fetch profile"), company_id)

    async def _send(self, operation: str, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = f"{self._base_url}{path}"
        try:
            response = await self._http.request(
                method, url, timeout=self.settings.PROVIDER_TIMEOUT_SECONDS, **kwargs
            )
        except httpx.RequestError as e:
            logger.error(f"Provider {operation} transport error: {e.__class__.__name__}")
            raise UpstreamError(None, f"{e.__class__.__name__}: {e}", operation) from e

        if not response.is_success:
            logger.warning(f"Provider {operation} returned {response.status_code}")
            raise UpstreamError(response.status_code, response.text, operation)
        return response

    @staticmethod
    def _json(response: httpx.Response, operation: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(response.status_code, response.text[:500], operation) from e
