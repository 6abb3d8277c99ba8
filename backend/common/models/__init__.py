"""
Common ORM models for backend services.

Models:
    - Company: An installed tenant, its profile mirror and its provider token pair

All models inherit from common.database.Base, which provides created_at and
updated_at timestamps.

Usage:
    ```python
    from common.models import Company

    company = await session.get(Company, "co_1")
    ```
"""

from .companies import Company

__all__ = ["Company"]
