"""
Collaborator interfaces consumed by the auth orchestrator.

The orchestrator depends on these protocols only. Production wiring supplies
``CompanyRepository`` (SQLAlchemy) and ``ProviderClient`` (httpx); tests pass
AsyncMock objects with the same shape.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

from common.models import Company
from services.company_auth_service.clients.provider_client import (
    ProviderProfile,
    ProviderTokens,
)


@dataclass
class CompanyData:
    """Every persisted field of a company, as written by the callback handshake."""

    id: str
    name: str
    handle: str | None = None
    description: str | None = None
    logo_url: str | None = None
    phone: str | None = None
    authorization_code: str | None = None
    access_token: str | None = None
    refresh_token: str | None = None
    token_expires_at: datetime | None = None


class CompanyStore(Protocol):
    """Persistence of tenant records and their provider token pair."""

    async def find_by_company_id(self, company_id: str) -> Company | None: ...

    async def upsert(self, data: CompanyData) -> Company: ...

    async def update_tokens(
        self,
        company_id: str,
        access_token: str,
        refresh_token: str | None,
        token_expires_at: datetime | None,
    ) -> Company | None: ...

    async def update_profile(self, company_id: str, **fields: Any) -> Company | None: ...

    async def delete_by_id(self, company_id: str) -> bool: ...


class AuthorizationServerClient(Protocol):
    """The external provider's token and company endpoints."""

    async def exchange_code(self, code: str) -> ProviderTokens: ...

    async def refresh(self, refresh_token: str) -> ProviderTokens: ...

    async def fetch_profile(
        self, company_id: str, access_token: str | None = None
    ) -> ProviderProfile: ...
