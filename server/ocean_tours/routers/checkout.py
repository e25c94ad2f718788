"""Checkout router: PayPal order creation and stored order lookup."""

import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Header
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import AdminAuth, get_paypal_client
from ..core.exceptions import InternalServerError, ProblemDetailsException
from ..core.security import AuthContext
from ..schemas.checkout import CheckoutOrderCreated, CheckoutOrderOut, ContactInfo
from ..services.checkout_service import CheckoutService
from ..services.paypal_client import PayPalClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/checkout", tags=["checkout"])

# Define dependencies to avoid B008 linting errors
DB_DEPENDENCY = Depends(get_db)
PAYPAL_DEPENDENCY = Depends(get_paypal_client)
IDEMPOTENCY_KEY_HEADER = Header(None, alias="Idempotency-Key", max_length=255)
RAW_BODY = Body(None)


@router.post("/create-order", response_model=CheckoutOrderCreated, status_code=201)
async def create_order(
    payload: Any = RAW_BODY,
    idempotency_key: Optional[str] = IDEMPOTENCY_KEY_HEADER,
    db: AsyncSession = DB_DEPENDENCY,
    paypal: PayPalClient = PAYPAL_DEPENDENCY,
) -> JSONResponse:
    """
    Create a PayPal order for a booking.

    The body is validated field by field so every error carries a specific
    code and the list of offending fields. Send an ``Idempotency-Key`` header
    to make retries safe.
    """
    service = CheckoutService(db, paypal)

    try:
        created = await service.create_order(payload, idempotency_key=idempotency_key)
    except ProblemDetailsException:
        raise
    except Exception as e:
        logger.error(
            "Unexpected error in checkout order creation",
            extra={"idempotency_key": idempotency_key, "error": str(e)},
            exc_info=True
        )
        raise InternalServerError(detail="Failed to create order")

    return JSONResponse(status_code=201, content=created.to_json())


@router.get("/orders/{order_id}", response_model=CheckoutOrderOut)
async def get_order(
    order_id: str,
    auth: AuthContext = AdminAuth,
    db: AsyncSession = DB_DEPENDENCY,
) -> JSONResponse:
    """Get a stored checkout order by its PayPal order ID."""
    order = await CheckoutService(db, paypal=None).get_order(order_id)

    response = CheckoutOrderOut(
        id=order.id,
        order_id=order.provider_order_id,
        status=order.status,
        tour_id=order.tour_id,
        schedule_id=order.schedule_id,
        participants=order.participants,
        amount=order.amount,
        currency=order.currency,
        contact_info=ContactInfo.model_validate(json.loads(order.contact_info)),
        approval_url=order.approval_url,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )
    logger.info(
        "Checkout order viewed",
        extra={"provider_order_id": order.provider_order_id, "user_id": auth.user_id}
    )
    return JSONResponse(content=response.to_json())
