"""
Company Auth API Request/Response Models

Pydantic models for the /auth endpoints. Response field names follow the
browser-facing JSON contract (camelCase for the company profile).

Models follow a consistent naming pattern:
    - Request models: {Action}Request (e.g., WebhookRequest)
    - Response models: {Action}Response (e.g., RefreshResponse)

Example:
    ```python
    from services.company_auth_service.api.v1.models import RefreshResponse

    response = RefreshResponse(
        success=True,
        message="Session refreshed successfully",
        company=CompanySummary(id="co_1", handle="acme", name="Acme"),
    )
    ```
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CompanySummary(BaseModel):
    """Identity fields returned after a refresh."""

    id: str
    handle: str | None = None
    name: str


class CompanyProfileResponse(BaseModel):
    """
    Public profile of the authenticated company.

    Never contains provider tokens or the authorization code.

    Example:
        ```json
        {
            "id": "co_1",
            "handle": "acme",
            "name": "Acme",
            "description": null,
            "logoUrl": "https://cdn.example.com/acme.png",
            "phone": "+237600000000",
            "createdAt": "2024-01-01T00:00:00+00:00",
            "updatedAt": "2024-01-02T00:00:00+00:00"
        }
        ```
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    handle: str | None = None
    name: str
    description: str | None = None
    logo_url: str | None = Field(None, alias="logoUrl")
    phone: str | None = None
    created_at: str | None = Field(None, alias="createdAt")
    updated_at: str | None = Field(None, alias="updatedAt")


class RefreshResponse(BaseModel):
    success: bool = Field(..., description="Whether the session was refreshed")
    message: str
    company: CompanySummary


class LogoutResponse(BaseModel):
    success: bool
    message: str


class CheckResponse(BaseModel):
    authenticated: bool = Field(..., description="Whether a valid session cookie was presented")


class WebhookRequest(BaseModel):
    """
    Event pushed by the provider.

    Attributes:
        type (str): Event type, e.g. "company.updated".
        data (dict): Event payload; for company events it carries the company ``id``.
        timestamp (int | None): Provider timestamp.
        company_id (str | None): Tenant the event belongs to.
    """

    type: str = Field(..., min_length=1)
    data: dict[str, Any] = Field(default_factory=dict)
    timestamp: int | None = None
    company_id: str | None = None


class WebhookResponse(BaseModel):
    success: bool
