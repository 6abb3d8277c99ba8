"""
Company model - one installed tenant and its provider token pair.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import TIMESTAMP, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from common.database import Base


class Company(Base):
    __tablename__ = "companies"

    # Provider-issued identifier; join key between provider identity and local state
    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    handle: Mapped[Optional[str]] = mapped_column(String(255), unique=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(Text)
    logo_url: Mapped[Optional[str]] = mapped_column(String(1024))
    phone: Mapped[Optional[str]] = mapped_column(String(64))
    authorization_code: Mapped[Optional[str]] = mapped_column(String(512))
    access_token: Mapped[Optional[str]] = mapped_column(Text)
    # Single-use upstream: once rotated the previous value is dead
    refresh_token: Mapped[Optional[str]] = mapped_column(Text)
    token_expires_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True))

    def public_profile(self) -> dict:
        """Profile fields safe to return to the browser (never tokens)."""
        return {
            "id": self.id,
            "handle": self.handle,
            "name": self.name,
            "description": self.description,
            "logoUrl": self.logo_url,
            "phone": self.phone,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:
        return f"<Company id={self.id!r} handle={self.handle!r}>"
