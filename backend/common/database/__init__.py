"""
Common database utilities and session management.

Main Components:
    - Base: SQLAlchemy declarative base class for all ORM models
    - session: Async engine construction and session management

Usage:
    ```python
    from common.database import (
        create_async_engine_from_settings,
        create_session_maker,
        session_scope,
    )

    engine = create_async_engine_from_settings(settings)
    session_maker = create_session_maker(engine)
    async with session_scope(session_maker) as session:
        ...
    ```
"""

from .base import Base
from .session import (
    create_async_engine_from_settings,
    create_session_maker,
    create_sqlalchemy_url,
    session_scope,
)

__all__ = [
    "Base",
    "create_async_engine_from_settings",
    "create_session_maker",
    "create_sqlalchemy_url",
    "session_scope",
]
