"""Base model mixins: string primary key and timestamps."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from gms.database import Base


class TimestampMixin:
    """Adds created_at and updated_at columns."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class StringPrimaryKeyMixin:
    """Adds a string primary key.

    Workshop ids are human-facing (``inv_12``, ``WO-1042``), so they are not
    UUID columns; a random UUID string is used when none is supplied.
    """

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )


class BaseModel(StringPrimaryKeyMixin, TimestampMixin, Base):
    __abstract__ = True
