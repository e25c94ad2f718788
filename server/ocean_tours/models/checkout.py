"""Checkout order model definition."""

from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import CheckConstraint, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base
from .mixins import StringIdMixin, TimestampMixin


class CheckoutOrderStatus(str, Enum):
    """Checkout order status enumeration."""
    CREATED = "CREATED"
    APPROVED = "APPROVED"
    CAPTURED = "CAPTURED"
    FAILED = "FAILED"


class CheckoutOrder(StringIdMixin, TimestampMixin, Base):
    """
    A local booking attempt paired with the payment provider's order.

    The provider order id is authoritative. Rows are never deleted, so tours and
    schedules referenced here cannot be hard-deleted.
    """

    __tablename__ = "checkout_orders"

    provider_order_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    status: Mapped[CheckoutOrderStatus] = mapped_column(
        String(20),
        nullable=False,
        default=CheckoutOrderStatus.CREATED,
        index=True
    )

    tour_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("tours.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    schedule_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("schedules.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    participants: Mapped[int] = mapped_column(Integer, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")

    # Serialized contact details; never queried by field
    contact_info: Mapped[str] = mapped_column(Text, nullable=False)

    approval_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)

    # Client-supplied retry key and SHA-256 of the normalized request
    idempotency_key: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, unique=True)
    request_hash: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    __table_args__ = (
        CheckConstraint("participants > 0", name="ck_checkout_order_participants_positive"),
        CheckConstraint("amount >= 0", name="ck_checkout_order_amount_non_negative"),
        CheckConstraint("length(currency) = 3", name="ck_checkout_order_currency_length"),
    )

    def __repr__(self) -> str:
        return (
            f"<CheckoutOrder(id={self.id}, provider_order_id='{self.provider_order_id}', "
            f"status={self.status}, tour_id={self.tour_id}, schedule_id={self.schedule_id})>"
        )
