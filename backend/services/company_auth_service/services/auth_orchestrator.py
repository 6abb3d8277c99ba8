"""
Auth Orchestrator

Composes the HMAC verifier, the provider client, the company store and the
session manager into the two flows of the service.

Callback handshake (``handle_callback``):
    ValidateParams -> VerifySignature -> CheckFreshness -> ExchangeCode
    -> FetchProfile -> UpsertCompany -> IssueSession -> Redirect

    Missing parameters are a 400, a bad signature or a stale timestamp a 401.
    Failures after the request is authenticated (exchange, profile, persist)
    collapse to a generic 500; details go to the log only.

Refresh rotation (``refresh``):
    ReadRefreshCookie -> VerifyRefresh -> LookupCompany -> CallUpstreamRefresh
    -> PersistRotatedTokens -> IssueNewSessionPair

    The provider refresh token is single-use. Two concurrent refreshes for the
    same tenant race upstream: the first rotates the token, the second gets a
    terminal rejection and answers 401. This is not deduplicated.

Example:
    ```python
    orchestrator = AuthOrchestrator(verifier, provider, store, sessions, settings)
    outcome = await orchestrator.handle_callback(
        code="abc123",
        company_id="co_1",
        timestamp="1700000000",
        signature="9f2c...",
        redirect_to="https://app.example.com/done",
    )
    sessions.set_cookies(response, outcome.sessions)
    ```
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from urllib.parse import unquote

from loguru import logger

from common.config import CompanyAuthServiceSettings
from common.models import Company
from services.company_auth_service.clients.provider_client import (
    ProviderTokens,
    UpstreamError,
)
from services.company_auth_service.services.clock import Clock, system_clock_ms
from services.company_auth_service.services.errors import (
    ExpiredRequestError,
    InternalError,
    PersistenceError,
    ReinstallRequiredError,
    SignatureError,
    UnauthenticatedError,
    UpstreamAuthError,
    UpstreamTransientError,
    ValidationError,
)
from services.company_auth_service.services.hmac_verifier import HmacVerifier
from services.company_auth_service.services.interfaces import (
    AuthorizationServerClient,
    CompanyData,
    CompanyStore,
)
from services.company_auth_service.services.session_manager import (
    SessionManager,
    SessionPair,
)

REQUIRED_CALLBACK_PARAMS = ("code", "company_id", "timestamp", "hmac")


@dataclass(frozen=True)
class CallbackOutcome:
    company: Company
    sessions: SessionPair
    redirect_url: str


@dataclass(frozen=True)
class RefreshOutcome:
    company: Company
    sessions: SessionPair


class AuthOrchestrator:
    """
    Callback and refresh state machines.

    Args:
        verifier: Callback signature verifier keyed by the client secret.
        provider: Authorization server client.
        store: Company persistence.
        sessions: Session token manager.
        settings: Service settings (tolerance, fallback redirect).
        clock: Millisecond clock.
    """

    def __init__(
        self,
        verifier: HmacVerifier,
        provider: AuthorizationServerClient,
        store: CompanyStore,
        sessions: SessionManager,
        settings: CompanyAuthServiceSettings,
        clock: Clock = system_clock_ms,
    ) -> None:
        self.verifier = verifier
        self.provider = provider
        self.store = store
        self.sessions = sessions
        self.settings = settings
        self._clock = clock

    async def handle_callback(
        self,
        code: str | None,
        company_id: str | None,
        timestamp: str | None,
        signature: str | None,
        redirect_to: str | None = None,
    ) -> CallbackOutcome:
        """
        Run the install/login handshake for one signed callback request.

        Raises:
            ValidationError: A required parameter is missing or the timestamp
                is not an integer (400).
            SignatureError: The HMAC does not match (401).
            ExpiredRequestError: The timestamp is older than the tolerance (401).
            InternalError: Code exchange, profile fetch or persistence failed (500).
        """
        received = {
            "code": code,
            "company_id": company_id,
            "timestamp": timestamp,
            "hmac": signature,
        }
        missing = [name for name in REQUIRED_CALLBACK_PARAMS if not received[name]]
        if missing:
            logger.warning(f"Callback rejected, missing parameters: {missing}")
            raise ValidationError(required=list(REQUIRED_CALLBACK_PARAMS))

        signed = {
            "code": code,
            "company_id": company_id,
            "redirect_to": redirect_to or "",
            "timestamp": timestamp,
        }
        if not self.verifier.verify(signed, signature):
            logger.warning(f"Callback rejected for company {company_id}: invalid signature")
            raise SignatureError()

        self._check_freshness(timestamp, company_id)

        # Exactly one exchange per callback; the code is single-use upstream
        try:
            tokens = await self.provider.exchange_code(code)
            profile = await self.provider.fetch_profile(company_id, access_token=tokens.access_token)
            company = await self.store.upsert(
                CompanyData(
                    id=company_id,
                    name=profile.name,
                    handle=profile.handle,
                    description=profile.description,
                    logo_url=profile.logo_url,
                    phone=profile.contact,
                    authorization_code=code,
                    access_token=tokens.access_token,
                    refresh_token=tokens.refresh_token,
                    token_expires_at=self._expires_at(tokens),
                )
            )
        except (UpstreamError, PersistenceError) as e:
            logger.error(f"Callback failed for company {company_id}: {e.__class__.__name__}: {e}")
            raise InternalError(internal_error=e) from e

        pair = self.sessions.issue(company.id)
        redirect_url = unquote(redirect_to) if redirect_to else self.settings.APP_URL
        logger.info(f"Company {company.id} authenticated via callback")
        return CallbackOutcome(company=company, sessions=pair, redirect_url=redirect_url)

    async def refresh(self, refresh_token: str | None) -> RefreshOutcome:
        """
        Rotate the provider token pair and mint a new session pair.

        Raises:
            UnauthenticatedError: No refresh cookie (401).
            ReinstallRequiredError: Refresh token invalid, tenant unknown, or no
                stored provider refresh token (401).
            UpstreamAuthError: The provider revoked the refresh token (401).
            UpstreamTransientError: Any other provider failure (500, retryable).
            PersistenceError: The rotated tokens could not be stored (500).
        """
        if not refresh_token:
            raise UnauthenticatedError("No refresh token")

        company_id = self.sessions.verify_refresh(refresh_token)
        if company_id is None:
            raise ReinstallRequiredError()

        company = await self.store.find_by_company_id(company_id)
        if company is None or not company.refresh_token:
            logger.warning(f"Refresh rejected for company {company_id}: no stored provider refresh token")
            raise ReinstallRequiredError()

        try:
            tokens = await self.provider.refresh(company.refresh_token)
        except UpstreamError as e:
            if e.is_terminal():
                logger.warning(f"Provider rejected refresh token for company {company_id} ({e.status_code})")
                raise UpstreamAuthError(internal_error=e) from e
            logger.error(f"Provider refresh failed for company {company_id}: {e}")
            raise UpstreamTransientError(internal_error=e) from e

        # The previous provider token is dead from here on
        try:
            updated = await self.store.update_tokens(
                company_id,
                tokens.access_token,
                tokens.refresh_token or company.refresh_token,
                self._expires_at(tokens),
            )
        except PersistenceError:
            logger.error(
                f"Rotated tokens for company {company_id} were not persisted; reinstall required"
            )
            raise
        if updated is None:
            logger.error(f"Company {company_id} disappeared during token rotation")
            raise ReinstallRequiredError()

        pair = self.sessions.issue(company_id)
        logger.info(f"Session refreshed for company {company_id}")
        return RefreshOutcome(company=updated, sessions=pair)

    def _check_freshness(self, timestamp: str, company_id: str) -> None:
        try:
            issued_at_ms = int(timestamp) * 1000
        except ValueError as e:
            raise ValidationError("Invalid timestamp") from e

        age_ms = self._clock() - issued_at_ms
        if age_ms > self.settings.CALLBACK_TOLERANCE_MS:
            logger.warning(f"Callback rejected for company {company_id}: {age_ms}ms old")
            raise ExpiredRequestError()

    def _expires_at(self, tokens: ProviderTokens) -> datetime | None:
        if tokens.expires_in_minutes is None:
            return None
        now = datetime.fromtimestamp(self._clock() / 1000, tz=timezone.utc)
        return now + timedelta(minutes=tokens.expires_in_minutes)
