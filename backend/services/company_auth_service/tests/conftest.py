"""
Pytest configuration and fixtures for the company auth service tests.
"""

import os
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

# Set test environment variables before importing modules
os.environ.setdefault("LOG_TO_FILES", "false")
os.environ.setdefault("ENVIRONMENT", "DEV")
os.environ.setdefault("CLIENT_ID", "test-client-id")
os.environ.setdefault("CLIENT_SECRET", "test-client-secret-0123456789abcdef")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

from common.config import CompanyAuthServiceSettings
from common.models import Company
from services.company_auth_service.services.clock import system_clock_ms
from services.company_auth_service.services.hmac_verifier import HmacVerifier
from services.company_auth_service.services.session_manager import SessionManager

CLIENT_SECRET = "test-client-secret-0123456789abcdef"
SESSION_SECRET = "test-session-secret-0123456789abcdef"


class FakeClock:
    """Settable millisecond clock."""

    def __init__(self, now_ms: int) -> None:
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


def make_settings(**overrides) -> CompanyAuthServiceSettings:
    values = {
        "ENVIRONMENT": "DEV",
        "CLIENT_ID": "test-client-id",
        "CLIENT_SECRET": CLIENT_SECRET,
        "SESSION_SECRET": SESSION_SECRET,
        "SESSION_KEY_ID": "k1",
        "REDIRECT_URI": "http://localhost:4000/auth/callback",
        "APP_URL": "http://localhost:4000",
        "PROVIDER_BASE_URL": "https://provider.test",
        "PROVIDER_RETRY_BACKOFF_SECONDS": 0.0,
        "DATABASE_URL": "sqlite+aiosqlite://",
    }
    values.update(overrides)
    return CompanyAuthServiceSettings(**values)


@pytest.fixture
def settings() -> CompanyAuthServiceSettings:
    return make_settings()


@pytest.fixture
def clock() -> FakeClock:
    """Starts at the real current time: session tokens are checked against the real clock."""
    return FakeClock(system_clock_ms())


@pytest.fixture
def verifier() -> HmacVerifier:
    return HmacVerifier(CLIENT_SECRET)


@pytest.fixture
def sessions(settings, clock) -> SessionManager:
    return SessionManager(settings, clock=clock)


@pytest.fixture
def sample_company() -> Company:
    """Return a stored company with a provider token pair."""
    return Company(
        id="co_1",
        handle="acme",
        name="Acme",
        description="Acme shop",
        logo_url="https://cdn.example.com/acme.png",
        phone="+237600000000",
        authorization_code="abc123",
        access_token="provider-access-1",
        refresh_token="provider-refresh-1",
        token_expires_at=datetime(2030, 1, 1, tzinfo=timezone.utc),
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        updated_at=datetime(2024, 1, 2, tzinfo=timezone.utc),
    )


@pytest.fixture
def mock_store(sample_company):
    """Return a mock CompanyStore that knows sample_company."""
    mock = AsyncMock()
    mock.find_by_company_id.return_value = sample_company
    mock.upsert.return_value = sample_company
    mock.update_tokens.return_value = sample_company
    mock.update_profile.return_value = sample_company
    mock.delete_by_id.return_value = True
    return mock


@pytest.fixture
def mock_provider():
    """Return a mock AuthorizationServerClient."""
    from services.company_auth_service.clients.provider_client import (
        ProviderProfile,
        ProviderTokens,
    )

    mock = AsyncMock()
    mock.exchange_code.return_value = ProviderTokens(
        access_token="provider-access-1",
        refresh_token="provider-refresh-1",
        expires_in_minutes=60,
    )
    mock.refresh.return_value = ProviderTokens(
        access_token="provider-access-2",
        refresh_token="provider-refresh-2",
        expires_in_minutes=60,
    )
    mock.fetch_profile.return_value = ProviderProfile(
        name="Acme",
        handle="acme",
        description="Acme shop",
        logo_url="https://cdn.example.com/acme.png",
        contact="+237600000000",
    )
    return mock


@pytest.fixture
def settings_factory():
    """Return a builder for settings with per-test overrides."""
    return make_settings
