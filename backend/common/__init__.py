"""
Common utilities and shared code for the company auth backend.

This package provides shared functionality used by the backend services. It
includes:

Modules:
    - config: Centralized configuration management with environment-based settings
    - database: Async engine and session factory construction, session_scope
    - exceptions: Standardized error handling and API error responses
    - fastapi: FastAPI application factory with common middleware and configuration
    - logging: Centralized logging configuration using loguru
    - models: Shared SQLAlchemy ORM models (Company)

Usage:
    Import specific modules as needed:

    ```python
    from common.config import get_settings
    from common.database import create_async_engine_from_settings
    from common.logging import setup_logging
    from common.exceptions import create_api_error
    ```

Version:
    Current version: 0.1.0
"""

__version__ = "0.1.0"
