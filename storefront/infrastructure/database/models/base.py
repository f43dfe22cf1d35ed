"""
Declarative base and the columns every storefront table shares.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, MetaData, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ....domain.entities.base import new_id, utc_now


# Constraint names as they appear in the migrations
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Root of the ORM mapping."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime read from the database to aware UTC.

    Engines without a timezone-aware column type hand back naive values;
    those are stored in UTC, so the zone is attached rather than converted.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class StringIdMixin:
    """String UUID primary key, matching the entity id."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)


class TimestampMixin:
    """Audit timestamps, stored timezone-aware."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
        index=True,
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        default=None,
        nullable=True,
    )


class BaseModel(Base, StringIdMixin, TimestampMixin):
    """id, created_at and updated_at for every table."""
    __abstract__ = True
