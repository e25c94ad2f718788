"""Models module exporting all database models."""

from .checkout import CheckoutOrder, CheckoutOrderStatus
from .reference import Category, Equipment, Guide, Location, MarineLife, Tag, TourType
from .schedule import Schedule, ScheduleStatus
from .tour import Accommodation, Difficulty, ItineraryDay, Tour, TourEquipment, tour_marine_life, tour_tags

__all__ = [
    # Catalog entities
    "Tour",
    "Difficulty",
    "Schedule",
    "ScheduleStatus",
    "ItineraryDay",
    "TourEquipment",
    "Accommodation",
    "tour_marine_life",
    "tour_tags",

    # Reference data
    "Location",
    "Category",
    "Guide",
    "TourType",
    "MarineLife",
    "Equipment",
    "Tag",

    # Checkout
    "CheckoutOrder",
    "CheckoutOrderStatus",
]
