"""
Company Auth API v1 Models Package

This package exports all Pydantic models used for request/response validation
in the company auth API v1.

Models:
    - CompanyProfileResponse: Public company profile (GET /auth/me)
    - CompanySummary: Company identity embedded in RefreshResponse
    - RefreshResponse: Session refresh result
    - LogoutResponse: Logout result
    - CheckResponse: Session check result
    - WebhookRequest / WebhookResponse: Provider webhook events
"""

from .auth import (
    CheckResponse,
    CompanyProfileResponse,
    CompanySummary,
    LogoutResponse,
    RefreshResponse,
    WebhookRequest,
    WebhookResponse,
)

__all__ = [
    "CheckResponse",
    "CompanyProfileResponse",
    "CompanySummary",
    "LogoutResponse",
    "RefreshResponse",
    "WebhookRequest",
    "WebhookResponse",
]
