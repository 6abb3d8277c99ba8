"""
Company Auth Service Database Module

This module contains the persistence layer for the company auth service.

Module Structure:
    - company_repository: CompanyRepository, the SQLAlchemy implementation of
      the CompanyStore interface

See Also:
    - common.database: Engine, session factory and session_scope
    - common.models.Company: ORM model
"""

from .company_repository import CompanyRepository

__all__ = ["CompanyRepository"]
