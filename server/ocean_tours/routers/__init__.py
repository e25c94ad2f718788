"""FastAPI routers package."""

from .checkout import router as checkout_router
from .ops import router as ops_router
from .reference import locations_router, marine_life_router, tour_types_router
from .tour import router as tour_router

__all__ = [
    "checkout_router",
    "locations_router",
    "marine_life_router",
    "ops_router",
    "tour_router",
    "tour_types_router",
]
