"""
Base declarative class for all ORM models.

This module provides the base SQLAlchemy declarative class that all ORM models
should inherit from. It includes common fields (created_at, updated_at) and
automatic table name generation.

Features:
    - Automatic timestamp tracking (created_at, updated_at)
    - Automatic table name generation from class name
    - Timezone-aware timestamps
    - Server-side default values for timestamps (portable across PostgreSQL and SQLite)

Usage:
    ```python
    from common.database import Base
    from sqlalchemy.orm import Mapped, mapped_column
    from sqlalchemy import String

    class Company(Base):
        __tablename__ = "companies"
        id: Mapped[str] = mapped_column(String(255), primary_key=True)
        name: Mapped[str] = mapped_column(String(255))

        # created_at and updated_at are automatically included
    ```
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import TIMESTAMP, func
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column


class Base(DeclarativeBase):
    """
    Base declarative class for all SQLAlchemy ORM models.

    Attributes:
        created_at (Mapped[datetime]): Timestamp when the record was created.
            Set by the database server.
        updated_at (Mapped[datetime]): Timestamp when the record was last updated.
            Set by the database server on insert and refreshed on every ORM update.

    Table Naming:
        Table names default to the lowercase class name. Models may override
        ``__tablename__`` explicitly.
    """

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    @declared_attr.directive
    def __tablename__(cls) -> str:  # type: ignore[override]
        """Generate table name from class name."""
        return cls.__name__.lower()
