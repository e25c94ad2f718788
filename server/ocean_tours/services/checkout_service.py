"""Checkout service: validate a booking request, create the PayPal order, record it."""

import hashlib
import json
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import Settings, settings as default_settings
from ..core.exceptions import (
    IdempotencyMismatchError,
    NotFoundError,
    OrderCreationError,
    PersistenceError,
    UpstreamError,
    ValidationError,
)
from ..core.observability import metrics_collector
from ..models.checkout import CheckoutOrder, CheckoutOrderStatus
from ..models.schedule import Schedule
from ..models.tour import Tour
from ..schemas.checkout import CheckoutOrderCreated, CheckoutRequest, ContactInfo
from .paypal_client import PayPalClient, approval_link

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("tourId", "scheduleId", "participants", "totalPrice")
CONTACT_FIELDS = ("fullName", "email", "phone")
IDEMPOTENCY_METHOD = "checkout.create-order"

# Largest amount a Numeric(10, 2) column holds
MAX_TOTAL_PRICE = 99_999_999.99


def _is_absent(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _missing_contact_fields(contact: dict[str, Any]) -> list[str]:
    return [
        f"contactInfo.{name}"
        for name in CONTACT_FIELDS
        if not isinstance(contact.get(name), str) or _is_absent(contact.get(name))
    ]


def validate_checkout_payload(payload: Any) -> CheckoutRequest:
    """
    Validate a raw checkout body in a fixed order, failing on the first step that finds a problem.

    1. Required fields present (``MISSING_FIELDS``; also lists absent contact details)
    2. Field types (``INVALID_FIELDS``)
    3. Contact details present (``MISSING_CONTACT_INFO``)

    Absent keys, ``null`` and blank strings all count as missing. ``participants``
    must be a positive integer and ``totalPrice`` a non-negative finite number;
    booleans are not numbers.

    Raises:
        ValidationError: With ``missing`` or ``invalid`` itemizing the problem
    """
    if not isinstance(payload, dict):
        payload = {}

    contact = payload.get("contactInfo")

    missing = [name for name in REQUIRED_FIELDS if _is_absent(payload.get(name))]
    if _is_absent(contact):
        missing.extend(f"contactInfo.{name}" for name in CONTACT_FIELDS)
    elif missing and isinstance(contact, dict):
        missing.extend(_missing_contact_fields(contact))

    if missing:
        raise ValidationError(
            detail="Missing required fields",
            code="MISSING_FIELDS",
            missing=missing,
        )

    invalid: list[dict[str, Any]] = []
    for name in ("tourId", "scheduleId"):
        if not isinstance(payload[name], str):
            invalid.append({"field": name, "reason": "must be a non-empty string"})

    participants = payload["participants"]
    if not isinstance(participants, int) or isinstance(participants, bool) or participants <= 0:
        invalid.append({"field": "participants", "reason": "must be a positive integer"})

    total_price = payload["totalPrice"]
    # NaN fails both comparisons, so the range check also rejects non-finite floats
    if not _is_number(total_price) or not 0 <= total_price <= MAX_TOTAL_PRICE:
        invalid.append({"field": "totalPrice", "reason": f"must be a number between 0 and {MAX_TOTAL_PRICE}"})

    if not isinstance(contact, dict):
        invalid.append({"field": "contactInfo", "reason": "must be an object"})

    if invalid:
        raise ValidationError(
            detail="Invalid field values",
            code="INVALID_FIELDS",
            invalid=invalid,
        )

    missing_contact = _missing_contact_fields(contact)
    if missing_contact:
        raise ValidationError(
            detail="Missing contact information",
            code="MISSING_CONTACT_INFO",
            missing=missing_contact,
        )

    return CheckoutRequest(
        tour_id=payload["tourId"],
        schedule_id=payload["scheduleId"],
        participants=participants,
        total_price=Decimal(str(total_price)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP),
        contact_info=ContactInfo(
            full_name=contact["fullName"].strip(),
            email=contact["email"].strip(),
            phone=contact["phone"].strip(),
        ),
    )


def format_amount(value: Decimal) -> str:
    return str(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def build_order_payload(request: CheckoutRequest, config: Settings) -> dict[str, Any]:
    """Build the ``POST /v2/checkout/orders`` body for a validated request."""
    custom = {
        "tourId": request.tour_id,
        "scheduleId": request.schedule_id,
        "participants": request.participants,
        "contactInfo": request.contact_info.to_json(),
    }
    return {
        "intent": "CAPTURE",
        "purchase_units": [
            {
                "reference_id": f"tour_{request.tour_id}_{request.schedule_id}",
                "description": f"Tour booking for {request.participants} participant(s)",
                "custom_id": json.dumps(custom, separators=(",", ":")),
                "amount": {
                    "currency_code": config.checkout_currency,
                    "value": format_amount(request.total_price),
                },
            }
        ],
        "application_context": {
            "brand_name": config.brand_name,
            "shipping_preference": "NO_SHIPPING",
            "user_action": "PAY_NOW",
            "return_url": f"{config.app_url}/checkout/success",
            "cancel_url": f"{config.app_url}/checkout/cancel",
        },
    }


def compute_request_hash(request: CheckoutRequest) -> str:
    """SHA-256 of the normalized request; keys sorted so field order does not matter."""
    normalized = json.dumps(request.to_json(), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()


class CheckoutService:
    """Service for checkout order operations."""

    def __init__(self, db: AsyncSession, paypal: Optional[PayPalClient], config: Optional[Settings] = None):
        self.db = db
        self.paypal = paypal
        self.config = config or default_settings

    async def create_order(
        self,
        payload: Any,
        idempotency_key: Optional[str] = None,
    ) -> CheckoutOrderCreated:
        """
        Turn a booking request into a provider order and a local record.

        Args:
            payload: Raw JSON body
            idempotency_key: Optional client retry key

        Returns:
            Provider order id and approval URL

        Raises:
            ValidationError: Request fields missing or malformed
            NotFoundError: Tour or schedule does not exist (400)
            IdempotencyMismatchError: Key reused with a different body
            ProviderAuthError, ProviderAPIError, OrderCreationError: Provider failures
            PersistenceError: Provider order created but not stored locally
        """
        request = validate_checkout_payload(payload)
        request_hash = compute_request_hash(request)

        if idempotency_key:
            replay = await self._find_by_idempotency_key(idempotency_key, request_hash)
            if replay is not None:
                return replay

        tour = await self._get_visible_tour(request.tour_id)
        schedule = await self._get_schedule(tour.id, request.schedule_id)

        order_payload = build_order_payload(request, self.config)
        try:
            provider_order = await self.paypal.create_order(order_payload, request_id=idempotency_key)
        except UpstreamError as e:
            metrics_collector.record_provider_failure(e.problem_details.get("code", "UNKNOWN"))
            raise

        provider_order_id = provider_order["id"]
        approval_url = approval_link(provider_order)

        order = CheckoutOrder(
            provider_order_id=provider_order_id,
            status=CheckoutOrderStatus.CREATED if approval_url else CheckoutOrderStatus.FAILED,
            tour_id=tour.id,
            schedule_id=schedule.id,
            participants=request.participants,
            amount=request.total_price,
            currency=self.config.checkout_currency,
            contact_info=json.dumps(request.contact_info.to_json()),
            approval_url=approval_url,
            idempotency_key=idempotency_key,
            request_hash=request_hash,
        )

        replay = await self._persist(order)
        if replay is not None:
            return replay

        if not approval_url:
            logger.error(
                "Provider order has no approval link",
                extra={"provider_order_id": provider_order_id, "tour_id": tour.id}
            )
            metrics_collector.record_provider_failure("MISSING_APPROVAL_LINK")
            raise OrderCreationError(provider_order_id)

        metrics_collector.record_checkout_order_created()
        logger.info(
            "Checkout order created",
            extra={
                "provider_order_id": provider_order_id,
                "tour_id": tour.id,
                "schedule_id": schedule.id,
                "participants": request.participants,
            }
        )
        return CheckoutOrderCreated(order_id=provider_order_id, approval_url=approval_url)

    async def get_order(self, provider_order_id: str) -> CheckoutOrder:
        """
        Get a stored order by its provider order id.

        Raises:
            NotFoundError: If no such order was recorded
        """
        stmt = select(CheckoutOrder).where(CheckoutOrder.provider_order_id == provider_order_id)
        result = await self.db.execute(stmt)
        order = result.scalar_one_or_none()
        if order is None:
            raise NotFoundError(resource_type="checkout order", resource_id=provider_order_id)
        return order

    async def _find_by_idempotency_key(
        self,
        idempotency_key: str,
        request_hash: str,
    ) -> Optional[CheckoutOrderCreated]:
        stmt = select(CheckoutOrder).where(CheckoutOrder.idempotency_key == idempotency_key)
        result = await self.db.execute(stmt)
        existing = result.scalar_one_or_none()
        if existing is None:
            return None

        if existing.request_hash != request_hash:
            logger.warning(
                "Idempotency key mismatch",
                extra={
                    "idempotency_key": idempotency_key,
                    "existing_hash": (existing.request_hash or "")[:8],
                    "new_hash": request_hash[:8],
                }
            )
            raise IdempotencyMismatchError(idempotency_key, IDEMPOTENCY_METHOD)

        if not existing.approval_url:
            raise OrderCreationError(existing.provider_order_id)

        logger.info(
            "Returning stored checkout order for replayed request",
            extra={"idempotency_key": idempotency_key, "provider_order_id": existing.provider_order_id}
        )
        return CheckoutOrderCreated(order_id=existing.provider_order_id, approval_url=existing.approval_url)

    async def _get_visible_tour(self, tour_id: str) -> Tour:
        stmt = select(Tour).where(Tour.id == tour_id, Tour.is_visible)
        result = await self.db.execute(stmt)
        tour = result.scalar_one_or_none()
        if tour is None:
            logger.info("Checkout for unknown tour", extra={"tour_id": tour_id})
            raise NotFoundError(
                resource_type="tour",
                resource_id=tour_id,
                detail="Tour not found",
                status_code=400,
                missing="tourId",
            )
        return tour

    async def _get_schedule(self, tour_id: str, schedule_id: str) -> Schedule:
        stmt = select(Schedule).where(Schedule.id == schedule_id, Schedule.tour_id == tour_id)
        result = await self.db.execute(stmt)
        schedule = result.scalar_one_or_none()
        if schedule is None:
            logger.info(
                "Checkout for unknown schedule",
                extra={"tour_id": tour_id, "schedule_id": schedule_id}
            )
            raise NotFoundError(
                resource_type="schedule",
                resource_id=schedule_id,
                detail="Schedule not found",
                status_code=400,
                missing="scheduleId",
            )
        return schedule

    async def _persist(self, order: CheckoutOrder) -> Optional[CheckoutOrderCreated]:
        """
        Store the order; returns the earlier order when a concurrent request
        with the same idempotency key was stored first.
        """
        idempotency_key = order.idempotency_key
        request_hash = order.request_hash
        try:
            self.db.add(order)
            await self.db.commit()
            return None
        except IntegrityError as e:
            await self.db.rollback()
            if idempotency_key:
                replay = await self._find_by_idempotency_key(idempotency_key, request_hash)
                if replay is not None:
                    return replay
            self._report_orphan(order, e)
        except SQLAlchemyError as e:
            await self.db.rollback()
            self._report_orphan(order, e)

    @staticmethod
    def _report_orphan(order: CheckoutOrder, e: SQLAlchemyError) -> None:
        # The provider order exists but nothing local points at it
        logger.critical(
            "Provider order created without a local record",
            extra={
                "provider_order_id": order.provider_order_id,
                "tour_id": order.tour_id,
                "schedule_id": order.schedule_id,
                "amount": str(order.amount),
                "error": str(e),
            }
        )
        metrics_collector.record_orphaned_provider_order()
        raise PersistenceError(
            detail="Payment order was created but could not be recorded",
            store_message=str(e),
        ) from e
