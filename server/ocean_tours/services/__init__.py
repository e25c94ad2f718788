"""Service layer package."""

from .checkout_service import CheckoutService
from .paypal_client import PayPalClient
from .reference_service import ReferenceDataService
from .tour_service import TourService

__all__ = [
    "CheckoutService",
    "PayPalClient",
    "ReferenceDataService",
    "TourService",
]
