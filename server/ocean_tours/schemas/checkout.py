"""Checkout-related Pydantic schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from ..models.checkout import CheckoutOrderStatus
from .common import CamelModel


class ContactInfo(CamelModel):
    full_name: str
    email: str
    phone: str


class CheckoutRequest(CamelModel):
    """A checkout request that passed field validation."""

    tour_id: str
    schedule_id: str
    participants: int = Field(..., gt=0)
    total_price: Decimal = Field(..., ge=0)
    contact_info: ContactInfo


class CheckoutOrderCreated(CamelModel):
    """Response for a created checkout order."""

    order_id: str = Field(..., alias="orderID", description="Payment provider order ID")
    approval_url: str = Field(..., description="URL the buyer follows to approve the payment")


class CheckoutOrderOut(CamelModel):
    """Stored checkout order as shown to administrators."""

    id: str
    order_id: str = Field(..., alias="orderID")
    status: CheckoutOrderStatus
    tour_id: str
    schedule_id: str
    participants: int
    amount: float
    currency: str
    contact_info: ContactInfo
    approval_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime
