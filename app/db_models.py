"""SQLAlchemy ORM models backing the local cache."""

from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class CacheEntryRecord(Base):
    """Key/value cache row holding a serialized movie list."""

    __tablename__ = "cache_entries"

    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    timestamp: Mapped[int] = mapped_column(BigInteger)
    payload: Mapped[Any] = mapped_column(JSON)
