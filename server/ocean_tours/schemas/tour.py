"""Tour-related Pydantic schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, model_validator

from ..models.schedule import ScheduleStatus
from ..models.tour import Difficulty
from .common import CamelModel
from .reference import LocationSummary, MarineLifeSummary, TourTypeOut

# Foreign keys a tour update may set, keep or clear
RELATION_FIELDS = (
    "category_id",
    "guide_id",
    "tour_type_id",
    "start_location_id",
    "end_location_id",
    "location_id",
)

DEFAULT_HIGHLIGHTS = ["Marine life observation", "Educational commentary"]
DEFAULT_INCLUSIONS = ["Safety equipment", "Expert guide"]
DEFAULT_EXCLUSIONS = ["Transportation to departure point"]


class TourCreate(CamelModel):
    """Request schema for creating (or fully replacing) a tour."""

    name: str = Field(..., min_length=1, max_length=255, description="Tour name")
    description: str = Field(..., min_length=1, description="Tour description")
    difficulty: Difficulty = Field(..., description="Tour difficulty")
    duration: int = Field(..., gt=0, description="Tour duration")
    max_participants: int = Field(..., gt=0, description="Maximum participants per schedule")
    base_price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2, description="Base price")
    published: bool = Field(False, description="Whether the tour is publicly listed")

    highlights: Optional[List[str]] = None
    inclusions: Optional[List[str]] = None
    exclusions: Optional[List[str]] = None
    images: List[str] = Field(default_factory=list)
    required_equipment: List[str] = Field(default_factory=list)
    seasons: List[str] = Field(default_factory=list)
    marine_life_ids: List[str] = Field(default_factory=list)

    expedition_type: Optional[str] = Field(None, max_length=100)
    marine_area: Optional[str] = Field(None, max_length=255)
    departure_port: Optional[str] = Field(None, max_length=255)
    conservation_info: Optional[str] = None
    tide_dependency: bool = False
    safety_briefing: Optional[str] = None

    category_id: Optional[str] = None
    guide_id: Optional[str] = None
    tour_type_id: Optional[str] = None
    start_location_id: Optional[str] = None
    end_location_id: Optional[str] = None
    location_id: Optional[str] = None


class TourUpdate(CamelModel):
    """
    Partial update schema.

    Which keys were sent matters: an absent relation key leaves the relation
    alone, ``null`` clears it and a string points it at another row.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    difficulty: Optional[Difficulty] = None
    duration: Optional[int] = Field(None, gt=0)
    max_participants: Optional[int] = Field(None, gt=0)
    base_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    published: Optional[bool] = None

    highlights: Optional[List[str]] = None
    inclusions: Optional[List[str]] = None
    exclusions: Optional[List[str]] = None
    images: Optional[List[str]] = None
    required_equipment: Optional[List[str]] = None
    seasons: Optional[List[str]] = None
    marine_life_ids: Optional[List[str]] = None

    expedition_type: Optional[str] = Field(None, max_length=100)
    marine_area: Optional[str] = Field(None, max_length=255)
    departure_port: Optional[str] = Field(None, max_length=255)
    conservation_info: Optional[str] = None
    tide_dependency: Optional[bool] = None
    safety_briefing: Optional[str] = None

    category_id: Optional[str] = None
    guide_id: Optional[str] = None
    tour_type_id: Optional[str] = None
    start_location_id: Optional[str] = None
    end_location_id: Optional[str] = None
    location_id: Optional[str] = None

    @model_validator(mode="after")
    def reject_null_required_fields(self) -> "TourUpdate":
        nullable = set(RELATION_FIELDS) | {
            "expedition_type",
            "marine_area",
            "departure_port",
            "conservation_info",
            "safety_briefing",
        }
        for field_name in self.model_fields_set:
            if field_name not in nullable and getattr(self, field_name) is None:
                raise ValueError(f"{field_name} cannot be null")
        return self


class GuideSummary(CamelModel):
    id: str
    name: str
    profile_image: Optional[str] = None


class CategoryOut(CamelModel):
    id: str
    name: str
    description: Optional[str] = None


class TagOut(CamelModel):
    id: str
    name: str


class ScheduleOut(CamelModel):
    id: str
    start_date: datetime
    end_date: datetime
    price: Optional[float] = None
    available_spots: int
    status: ScheduleStatus


class ItineraryDayOut(CamelModel):
    id: str
    day_number: int
    title: str
    description: Optional[str] = None


class AccommodationOut(CamelModel):
    id: str
    name: str
    description: Optional[str] = None


class EquipmentOut(CamelModel):
    id: str
    name: str
    description: Optional[str] = None


class TourEquipmentOut(CamelModel):
    required: bool
    equipment: EquipmentOut


class TourSummary(CamelModel):
    """Tour as listed on the public tours page."""

    id: str
    name: str
    description: str
    difficulty: Difficulty
    duration: int
    base_price: float
    max_participants: int
    published: bool
    highlights: List[str]
    images: List[str]
    seasons: List[str]
    marine_life_names: List[str]
    expedition_type: Optional[str] = None
    marine_area: Optional[str] = None
    departure_port: Optional[str] = None
    tour_type_id: Optional[str] = None

    start_location: Optional[LocationSummary] = None
    end_location: Optional[LocationSummary] = None
    guide: Optional[GuideSummary] = None
    schedules: List[ScheduleOut]
    itinerary: List[ItineraryDayOut]
    marine_life: List[MarineLifeSummary]

    created_at: datetime


class TourDetail(TourSummary):
    """Tour with every relation expanded."""

    inclusions: List[str]
    exclusions: List[str]
    required_equipment: List[str]
    conservation_info: Optional[str] = None
    tide_dependency: bool
    safety_briefing: Optional[str] = None

    category_id: Optional[str] = None
    guide_id: Optional[str] = None
    start_location_id: Optional[str] = None
    end_location_id: Optional[str] = None
    location_id: Optional[str] = None
    marine_life_ids: List[str]

    category: Optional[CategoryOut] = None
    tour_type: Optional[TourTypeOut] = None
    location_details: Optional[LocationSummary] = None
    equipment: List[TourEquipmentOut]
    accommodations: List[AccommodationOut]
    tags: List[TagOut]

    updated_at: datetime
