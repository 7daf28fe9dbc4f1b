"""Durable cache ORM model: cache_entries."""

from __future__ import annotations

from sqlalchemy import Text
from sqlalchemy.orm import Mapped, mapped_column

from fundscope.infrastructure.database import Base


class CacheEntryRow(Base):
    """One durable cache entry.

    envelope is the JSON text {"data": <payload>, "createdAt": <ISO-8601>};
    it is decoded at the repository layer, and an undecodable envelope is
    treated as a miss there.
    """

    __tablename__ = "cache_entries"

    key: Mapped[str] = mapped_column(Text, primary_key=True)
    envelope: Mapped[str] = mapped_column(Text, nullable=False)
