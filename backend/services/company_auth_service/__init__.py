"""
Company Auth Service Package

This package provides the Company Auth Service. It exports the FastAPI
application instance for use with ASGI servers like Uvicorn or Gunicorn.

The package structure:
    - main.py: FastAPI application entrypoint and lifespan wiring
    - api/: API layer with endpoints, dependencies and models
    - clients/: Authorization server client
    - database/: Company repository
    - services/: HMAC verification, session tokens, auth orchestration, webhooks

Usage:
    ```python
    from services.company_auth_service import app

    # Run with uvicorn
    # uvicorn services.company_auth_service:app --port 4000
    ```

Exports:
    app: FastAPI application instance configured for the company auth service
"""

from services.company_auth_service.main import app

__all__ = ["app"]
