"""
Tests for the session/refresh token pair and its cookies.
"""

import jwt
from starlette.requests import Request
from starlette.responses import Response

from services.company_auth_service.services.session_manager import (
    REFRESH_COOKIE,
    SESSION_COOKIE,
    SessionManager,
    SessionState,
)

EIGHT_HOURS_MS = 8 * 60 * 60 * 1000


def request_with_cookies(**cookies) -> Request:
    header = "; ".join(f"{name}={value}" for name, value in cookies.items())
    return Request({"type": "http", "headers": [(b"cookie", header.encode())]})


def cookie_headers(response: Response) -> dict[str, str]:
    headers = {}
    for key, value in response.raw_headers:
        if key == b"set-cookie":
            decoded = value.decode()
            headers[decoded.split("=", 1)[0]] = decoded
    return headers


def cookie_attributes(header: str) -> set[str]:
    """Attributes of a Set-Cookie header, without value, Max-Age and Expires."""
    parts = [part.strip().lower() for part in header.split(";")[1:]]
    return {part for part in parts if not part.startswith(("max-age", "expires"))}


def max_age(header: str) -> list[str]:
    return [part.strip().lower() for part in header.split(";") if part.strip().lower().startswith("max-age")]


class TestIssueAndVerify:
    """Tests for minting and verifying tokens."""

    def test_session_token_verifies_as_session(self, sessions):
        pair = sessions.issue("co_1")
        assert sessions.verify_session(pair.session_token) == "co_1"

    def test_refresh_token_verifies_as_refresh(self, sessions):
        pair = sessions.issue("co_1")
        assert sessions.verify_refresh(pair.refresh_token) == "co_1"

    def test_session_token_rejected_as_refresh(self, sessions):
        pair = sessions.issue("co_1")
        assert sessions.verify_refresh(pair.session_token) is None

    def test_refresh_token_rejected_as_session(self, sessions):
        pair = sessions.issue("co_1")
        assert sessions.verify_session(pair.refresh_token) is None

    def test_claims_and_header(self, sessions, settings, clock):
        pair = sessions.issue("co_1")
        header = jwt.get_unverified_header(pair.session_token)
        claims = jwt.decode(pair.session_token, options={"verify_signature": False})

        assert header["alg"] == "HS256"
        assert header["kid"] == "k1"
        assert claims["companyId"] == "co_1"
        assert claims["type"] == "session"
        assert claims["iat"] == clock.now_ms // 1000
        assert claims["exp"] - claims["iat"] == settings.SESSION_TTL_SECONDS

        refresh_claims = jwt.decode(pair.refresh_token, options={"verify_signature": False})
        assert refresh_claims["exp"] - refresh_claims["iat"] == settings.REFRESH_TTL_SECONDS

    def test_tokens_are_unique_per_issue(self, sessions):
        first = sessions.issue("co_1")
        second = sessions.issue("co_1")
        assert first.session_token != second.session_token
        assert first.refresh_token != second.refresh_token

    def test_expired_session_rejected(self, sessions, clock):
        clock.advance(-EIGHT_HOURS_MS)
        pair = sessions.issue("co_1")
        assert sessions.verify_session(pair.session_token) is None
        # The refresh token outlives the session
        assert sessions.verify_refresh(pair.refresh_token) == "co_1"

    def test_forged_signature_rejected(self, sessions):
        token = sessions.issue("co_1").session_token
        claims = jwt.decode(token, options={"verify_signature": False})
        forged = jwt.encode(
            claims, "attacker-secret-0123456789abcdef", algorithm="HS256", headers={"kid": "k1"}
        )
        assert sessions.verify_session(forged) is None

    def test_swapped_payload_rejected(self, sessions):
        token = sessions.issue("co_1").session_token
        other = sessions.issue("co_2").session_token
        head, _, signature = token.split(".")
        spliced = f"{head}.{other.split('.')[1]}.{signature}"
        assert sessions.verify_session(spliced) is None

    def test_garbage_rejected(self, sessions):
        assert sessions.verify_session(None) is None
        assert sessions.verify_session("") is None
        assert sessions.verify_session("not-a-jwt") is None
        assert sessions.verify_refresh("a.b.c") is None

    def test_token_without_kid_rejected(self, sessions, settings, clock):
        now = clock.now_ms // 1000
        token = jwt.encode(
            {"companyId": "co_1", "type": "session", "iat": now, "exp": now + 60},
            settings.session_secret,
            algorithm="HS256",
        )
        assert sessions.verify_session(token) is None

    def test_token_without_company_rejected(self, sessions, settings, clock):
        now = clock.now_ms // 1000
        token = jwt.encode(
            {"type": "session", "iat": now, "exp": now + 60},
            settings.session_secret,
            algorithm="HS256",
            headers={"kid": "k1"},
        )
        assert sessions.verify_session(token) is None


class TestKeyRotation:
    """Tests for kid-based signing key rotation."""

    def test_previous_key_still_verifies(self, settings_factory, clock):
        old = SessionManager(
            settings_factory(SESSION_KEY_ID="k0", SESSION_SECRET="old-secret-0123456789abcdef0123"),
            clock=clock,
        )
        token = old.issue("co_1").session_token

        rotated = SessionManager(
            settings_factory(
                SESSION_KEY_ID="k1",
                SESSION_SECRET="new-secret-0123456789abcdef01234",
                SESSION_PREVIOUS_KEYS="k0:old-secret-0123456789abcdef0123",
            ),
            clock=clock,
        )
        assert rotated.verify_session(token) == "co_1"
        assert jwt.get_unverified_header(rotated.issue("co_1").session_token)["kid"] == "k1"

    def test_retired_key_rejected(self, settings_factory, clock):
        old = SessionManager(
            settings_factory(SESSION_KEY_ID="k0", SESSION_SECRET="old-secret-0123456789abcdef0123"),
            clock=clock,
        )
        token = old.issue("co_1").session_token

        rotated = SessionManager(
            settings_factory(SESSION_KEY_ID="k1", SESSION_SECRET="new-secret-0123456789abcdef01234"),
            clock=clock,
        )
        assert rotated.verify_session(token) is None

    def test_session_secret_defaults_to_client_secret(self, settings_factory):
        settings = settings_factory(SESSION_SECRET="")
        assert settings.session_secret == settings.CLIENT_SECRET


class TestCookies:
    """Tests for cookie attributes on set and delete."""

    def test_set_cookies_local(self, sessions, settings):
        response = Response()
        sessions.set_cookies(response, sessions.issue("co_1"))
        headers = cookie_headers(response)

        assert set(headers) == {SESSION_COOKIE, REFRESH_COOKIE}
        attributes = cookie_attributes(headers[SESSION_COOKIE])
        assert "httponly" in attributes
        assert "samesite=lax" in attributes
        assert "path=/" in attributes
        assert "secure" not in attributes
        assert f"max-age={settings.SESSION_TTL_SECONDS}" in max_age(headers[SESSION_COOKIE])
        assert f"max-age={settings.REFRESH_TTL_SECONDS}" in max_age(headers[REFRESH_COOKIE])

    def test_set_cookies_production_is_secure(self, settings_factory, clock):
        sessions = SessionManager(settings_factory(ENVIRONMENT="PROD"), clock=clock)
        response = Response()
        sessions.set_cookies(response, sessions.issue("co_1"))

        for header in cookie_headers(response).values():
            assert "secure" in cookie_attributes(header)

    def test_destroy_matches_set_attributes(self, settings_factory, clock):
        for environment in ("DEV", "PROD"):
            sessions = SessionManager(settings_factory(ENVIRONMENT=environment), clock=clock)
            issued = Response()
            sessions.set_cookies(issued, sessions.issue("co_1"))
            cleared = Response()
            sessions.destroy(cleared)

            issued_headers = cookie_headers(issued)
            cleared_headers = cookie_headers(cleared)
            assert set(cleared_headers) == {SESSION_COOKIE, REFRESH_COOKIE}
            for name in (SESSION_COOKIE, REFRESH_COOKIE):
                assert cookie_attributes(cleared_headers[name]) == cookie_attributes(issued_headers[name])
                assert max_age(cleared_headers[name]) == ["max-age=0"]


class TestReadState:
    """Tests for the derived per-request session state."""

    def test_no_cookies(self, sessions):
        assert sessions.read_state(request_with_cookies()) is SessionState.UNAUTHENTICATED

    def test_valid_session(self, sessions):
        pair = sessions.issue("co_1")
        request = request_with_cookies(session=pair.session_token, refresh_session=pair.refresh_token)
        assert sessions.read_state(request) is SessionState.SESSION_VALID

    def test_expired_session_with_valid_refresh(self, sessions, clock):
        clock.advance(-EIGHT_HOURS_MS)
        pair = sessions.issue("co_1")
        request = request_with_cookies(session=pair.session_token, refresh_session=pair.refresh_token)
        assert sessions.read_state(request) is SessionState.REFRESH_VALID

    def test_expired_session_alone(self, sessions, clock):
        clock.advance(-EIGHT_HOURS_MS)
        pair = sessions.issue("co_1")
        assert sessions.read_state(request_with_cookies(session=pair.session_token)) is SessionState.SESSION_EXPIRED

    def test_expired_refresh(self, settings_factory, clock):
        sessions = SessionManager(settings_factory(REFRESH_TTL_SECONDS=60), clock=clock)
        clock.advance(-EIGHT_HOURS_MS)
        pair = sessions.issue("co_1")
        request = request_with_cookies(refresh_session=pair.refresh_token)
        assert sessions.read_state(request) is SessionState.REFRESH_EXPIRED

    def test_cross_presented_token_is_unauthenticated(self, sessions):
        pair = sessions.issue("co_1")
        assert sessions.read_state(request_with_cookies(session=pair.refresh_token)) is SessionState.UNAUTHENTICATED
