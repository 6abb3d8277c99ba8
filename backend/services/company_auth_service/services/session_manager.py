"""
Stateless dual-token browser sessions.

Each authenticated browser holds two signed JWTs (HS256) in HTTP-only cookies:

    session          short-lived (SESSION_TTL_SECONDS), proves the tenant identity
    refresh_session  long-lived (REFRESH_TTL_SECONDS), only accepted by /auth/refresh

Both tokens carry ``{companyId, type, iat, exp, jti}``; ``type`` must match the
cookie slot the token was read from. Nothing is stored server-side: validity is
decided by signature, expiry and type alone.

Key rotation:
    The token header carries a ``kid``. New tokens are signed with
    SESSION_KEY_ID / session_secret; verification also accepts any key in
    SESSION_PREVIOUS_KEYS. A token with an unknown or missing kid is rejected.

Example:
    ```python
    sessions = SessionManager(settings)
    pair = sessions.issue("co_1")
    sessions.set_cookies(response, pair)

    company_id = sessions.verify_session(request.cookies.get(SESSION_COOKIE))
    ```
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any
import uuid

from fastapi import Request, Response
import jwt
from loguru import logger

from common.config import CompanyAuthServiceSettings
from services.company_auth_service.services.clock import Clock, system_clock_ms

SESSION_COOKIE = "session"
REFRESH_COOKIE = "refresh_session"

SESSION_TYPE = "session"
REFRESH_TYPE = "refresh"

ALGORITHM = "HS256"


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    SESSION_VALID = "session_valid"
    SESSION_EXPIRED = "session_expired"
    REFRESH_VALID = "refresh_valid"
    REFRESH_EXPIRED = "refresh_expired"


@dataclass(frozen=True)
class SessionPair:
    session_token: str
    refresh_token: str


class SessionManager:
    """
    Mints, verifies and clears the session/refresh token pair.

    Args:
        settings: Service settings (secrets, key ids, lifetimes, environment).
        clock: Millisecond clock used for ``iat``/``exp``. Expiry checks on
            decode use the real clock.
    """

    def __init__(self, settings: CompanyAuthServiceSettings, clock: Clock = system_clock_ms) -> None:
        self.settings = settings
        self._clock = clock
        self._kid = settings.SESSION_KEY_ID
        self._signing_key = settings.session_secret
        self._keys = dict(settings.SESSION_PREVIOUS_KEYS)
        self._keys[self._kid] = self._signing_key

    @property
    def cookie_options(self) -> dict[str, Any]:
        """Attributes shared by set and delete; a mismatch leaves stale cookies behind."""
        return {
            "path": "/",
            "secure": not self.settings.is_local,
            "httponly": True,
            "samesite": "lax",
        }

    def issue(self, company_id: str) -> SessionPair:
        return SessionPair(
            session_token=self._mint(company_id, SESSION_TYPE, self.settings.SESSION_TTL_SECONDS),
            refresh_token=self._mint(company_id, REFRESH_TYPE, self.settings.REFRESH_TTL_SECONDS),
        )

    def set_cookies(self, response: Response, pair: SessionPair) -> None:
        response.set_cookie(
            SESSION_COOKIE,
            pair.session_token,
            max_age=self.settings.SESSION_TTL_SECONDS,
            **self.cookie_options,
        )
        response.set_cookie(
            REFRESH_COOKIE,
            pair.refresh_token,
            max_age=self.settings.REFRESH_TTL_SECONDS,
            **self.cookie_options,
        )

    def destroy(self, response: Response) -> None:
        response.delete_cookie(SESSION_COOKIE, **self.cookie_options)
        response.delete_cookie(REFRESH_COOKIE, **self.cookie_options)

    def verify_session(self, token: str | None) -> str | None:
        """Company id of a valid session token, otherwise None."""
        return self._verify(token, SESSION_TYPE)

    def verify_refresh(self, token: str | None) -> str | None:
        """Company id of a valid refresh token, otherwise None."""
        return self._verify(token, REFRESH_TYPE)

    def read_state(self, request: Request) -> SessionState:
        session_token = request.cookies.get(SESSION_COOKIE)
        refresh_token = request.cookies.get(REFRESH_COOKIE)

        session_expired = False
        if session_token:
            try:
                self._decode(session_token, SESSION_TYPE)
                return SessionState.SESSION_VALID
            except jwt.ExpiredSignatureError:
                session_expired = True
            except jwt.InvalidTokenError:
                pass

        if refresh_token:
            try:
                self._decode(refresh_token, REFRESH_TYPE)
                return SessionState.REFRESH_VALID
            except jwt.ExpiredSignatureError:
                return SessionState.REFRESH_EXPIRED
            except jwt.InvalidTokenError:
                pass

        if session_expired:
            return SessionState.SESSION_EXPIRED
        return SessionState.UNAUTHENTICATED

    def _mint(self, company_id: str, token_type: str, ttl_seconds: int) -> str:
        issued_at = self._clock() // 1000
        claims = {
            "companyId": company_id,
            "type": token_type,
            "iat": issued_at,
            "exp": issued_at + ttl_seconds,
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(claims, self._signing_key, algorithm=ALGORITHM, headers={"kid": self._kid})

    def _verify(self, token: str | None, expected_type: str) -> str | None:
        if not token:
            return None
        try:
            return self._decode(token, expected_type)
        except jwt.ExpiredSignatureError:
            logger.debug(f"Rejected expired {expected_type} token")
        except jwt.InvalidTokenError as e:
            logger.debug(f"Rejected {expected_type} token: {e.__class__.__name__}")
        return None

    def _decode(self, token: str, expected_type: str) -> str:
        """Return the company id or raise a jwt.InvalidTokenError subclass."""
        kid = jwt.get_unverified_header(token).get("kid")
        key = self._keys.get(kid) if isinstance(kid, str) else None
        if key is None:
            raise jwt.InvalidTokenError(f"Unknown signing key id: {kid!r}")

        claims = jwt.decode(
            token,
            key,
            algorithms=[ALGORITHM],
            options={"require": ["exp", "iat"]},
        )
        if claims.get("type") != expected_type:
            raise jwt.InvalidTokenError(f"Expected a {expected_type} token")
        company_id = claims.get("companyId")
        if not isinstance(company_id, str) or not company_id:
            raise jwt.InvalidTokenError("Token has no companyId")
        return company_id
