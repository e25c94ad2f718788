"""Schedule model definition."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base
from .mixins import StringIdMixin, TimestampMixin

if TYPE_CHECKING:
    from .tour import Tour


class ScheduleStatus(str, Enum):
    """Schedule status enumeration."""
    OPEN = "OPEN"
    FULL = "FULL"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class Schedule(StringIdMixin, TimestampMixin, Base):
    """A dated, capacity-bounded instance of a tour."""

    __tablename__ = "schedules"

    # Foreign key to tour
    tour_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("tours.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Schedule details
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Overrides the tour's base price when set
    price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)

    available_spots: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[ScheduleStatus] = mapped_column(
        String(20),
        nullable=False,
        default=ScheduleStatus.OPEN,
        index=True
    )

    # Constraints
    __table_args__ = (
        CheckConstraint("available_spots >= 0", name="ck_schedule_available_spots_non_negative"),
        CheckConstraint("end_date >= start_date", name="ck_schedule_dates_ordered"),
        CheckConstraint("price IS NULL OR price >= 0", name="ck_schedule_price_non_negative"),
    )

    # Relationships
    tour: Mapped["Tour"] = relationship("Tour", back_populates="schedules")

    def __repr__(self) -> str:
        return (
            f"<Schedule(id={self.id}, tour_id={self.tour_id}, "
            f"start_date={self.start_date}, available_spots={self.available_spots}, status={self.status})>"
        )
