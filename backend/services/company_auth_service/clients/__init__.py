"""
Company Auth Service Clients

Clients for the external authorization server.

Modules:
    - provider_client: ProviderClient (httpx) plus the UpstreamError classifier
"""

from .provider_client import (
    ProviderClient,
    ProviderProfile,
    ProviderTokens,
    UpstreamError,
)

__all__ = ["ProviderClient", "ProviderProfile", "ProviderTokens", "UpstreamError"]
