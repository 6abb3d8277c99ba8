"""
API Router Aggregation for Company Auth Service v1

The v1 API provides the following endpoints, all under /auth:
    - GET  /auth/callback: Signed OAuth callback, sets the session cookies and redirects
    - POST /auth/refresh: Rotate provider tokens and the session cookies
    - GET  /auth/me: Profile of the authenticated company
    - POST /auth/logout: Clear the session cookies
    - GET  /auth/check: Whether the session cookie is valid
    - POST /auth/webhook: Provider event receiver

Example:
    ```python
    from services.company_auth_service.api.v1.api import api_router

    app.include_router(api_router)
    ```

Attributes:
    api_router (APIRouter): FastAPI router containing all v1 endpoints
"""

from fastapi import APIRouter

from services.company_auth_service.api.v1.endpoints import auth

api_router = APIRouter()

# Tags are used for organizing endpoints in Swagger/OpenAPI documentation
api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
