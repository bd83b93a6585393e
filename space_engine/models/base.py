"""
Declarative base and the columns every table shares.

UUID columns use SQLAlchemy's ``Uuid`` type: native UUID on PostgreSQL,
32-character hex elsewhere.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    type_annotation_map = {
        uuid.UUID: Uuid(as_uuid=True),
    }


class Entity(Base):
    """
    A row keyed by a random UUID and stamped with its creation time.

    ``created_at`` is filled client-side so a freshly flushed row maps to a
    record without a reload; search orders listings by it.
    """

    __abstract__ = True

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
