"""
Company Repository

SQLAlchemy async implementation of the CompanyStore interface. One row per
installed tenant, holding the profile mirror and the provider token pair.

The repository owns no engine: it is constructed with an ``async_sessionmaker``
built by the application lifespan, and every method runs in its own
``session_scope`` (commit on success, rollback on error).

Error Handling:
    Any SQLAlchemyError is logged with the operation and company id and
    re-raised as PersistenceError (500, generic message).

Example:
    ```python
    engine = create_async_engine_from_settings(settings)
    repo = CompanyRepository(create_session_maker(engine))

    company = await repo.upsert(CompanyData(id="co_1", name="Acme"))
    await repo.update_tokens("co_1", "access", "refresh", expires_at)
    ```
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from common.database import session_scope
from common.models import Company
from services.company_auth_service.services.errors import PersistenceError
from services.company_auth_service.services.interfaces import CompanyData

# Fields a profile sync (webhook or callback) may overwrite
PROFILE_FIELDS = frozenset({"handle", "name", "description", "logo_url", "phone"})


class CompanyRepository:
    """
    Repository for company records.

    Attributes:
        session_maker: Session factory bound to the service engine.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        self.session_maker = session_maker

    async def find_by_company_id(self, company_id: str) -> Company | None:
        try:
            async with session_scope(self.session_maker) as session:
                return await session.get(Company, company_id)
        except SQLAlchemyError as e:
            raise self._persistence_error("find company", company_id, e) from e

    async def find_by_handle(self, handle: str) -> Company | None:
        try:
            async with session_scope(self.session_maker) as session:
                result = await session.execute(select(Company).where(Company.handle == handle))
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise self._persistence_error("find company by handle", handle, e) from e

    async def upsert(self, data: CompanyData) -> Company:
        """
        Insert the company or overwrite every field of the existing row.

        Returns:
            The stored Company, with server-generated timestamps loaded.
        """
        values = asdict(data)
        company_id = values.pop("id")
        try:
            async with session_scope(self.session_maker) as session:
                company = await session.get(Company, company_id)
                if company is None:
                    company = Company(id=company_id, **values)
                    session.add(company)
                    logger.info(f"Creating company {company_id}")
                else:
                    for field, value in values.items():
                        setattr(company, field, value)
                    logger.info(f"Updating company {company_id}")
                await session.flush()
                await session.refresh(company)
                return company
        except SQLAlchemyError as e:
            raise self._persistence_error("upsert company", company_id, e) from e

    async def update_tokens(
        self,
        company_id: str,
        access_token: str,
        refresh_token: str | None,
        token_expires_at: datetime | None,
    ) -> Company | None:
        """Store a rotated provider token pair. Returns None if the company is unknown."""
        return await self._update(
            "update tokens",
            company_id,
            {
                "access_token": access_token,
                "refresh_token": refresh_token,
                "token_expires_at": token_expires_at,
            },
        )

    async def update_profile(self, company_id: str, **fields: Any) -> Company | None:
        unknown = set(fields) - PROFILE_FIELDS
        if unknown:
            msg = f"Not profile fields: {sorted(unknown)}"
            raise ValueError(msg)
        return await self._update("update profile", company_id, fields)

    async def delete_by_id(self, company_id: str) -> bool:
        try:
            async with session_scope(self.session_maker) as session:
                company = await session.get(Company, company_id)
                if company is None:
                    return False
                await session.delete(company)
                logger.info(f"Deleted company {company_id}")
                return True
        except SQLAlchemyError as e:
            raise self._persistence_error("delete company", company_id, e) from e

    async def _update(self, operation: str, company_id: str, values: dict[str, Any]) -> Company | None:
        try:
            async with session_scope(self.session_maker) as session:
                company = await session.get(Company, company_id)
                if company is None:
                    return None
                for field, value in values.items():
                    setattr(company, field, value)
                await session.flush()
                await session.refresh(company)
                return company
        except SQLAlchemyError as e:
            raise self._persistence_error(operation, company_id, e) from e

    @staticmethod
    def _persistence_error(operation: str, company_id: str, error: Exception) -> PersistenceError:
        logger.error(f"Database error during {operation} for company {company_id}: {error.__class__.__name__}")
        return PersistenceError(internal_error=error)
