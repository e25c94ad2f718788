"""Column mixins shared by every table."""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import String, func
from sqlalchemy.orm import Mapped, mapped_column


def new_id() -> str:
    return str(uuid4())


def utcnow() -> datetime:
    # Timestamp columns are naive UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


class StringIdMixin:
    """Text primary key; generated when the caller does not supply one."""

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)


class TimestampMixin:
    """created_at/updated_at maintained by the application and the database."""

    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
    )
