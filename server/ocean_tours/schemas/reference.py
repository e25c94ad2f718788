"""Reference data schemas: tour types, marine life and locations."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from .common import CamelModel


class TourTypeCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255, description="Tour type name")
    description: Optional[str] = Field(None, description="Tour type description")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be blank")
        return v


class TourTypeOut(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    created_at: datetime


class LocationCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class LocationSummary(CamelModel):
    id: str
    name: str


class LocationOut(LocationSummary):
    description: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class MarineLifeCreate(CamelModel):
    """Request schema for adding a species. The slug is derived from the name when omitted."""

    name: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = Field(None, min_length=1, max_length=255, pattern=r"^[a-z0-9-]+$")
    scientific_name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    long_description: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=1024)
    animal_type: Optional[str] = Field(None, max_length=100)
    seasons: List[str] = Field(default_factory=list)
    expeditions: List[str] = Field(default_factory=list)
    active_months: List[int] = Field(default_factory=list)

    @field_validator("active_months")
    @classmethod
    def validate_months(cls, v: List[int]) -> List[int]:
        for month in v:
            if not 1 <= month <= 12:
                raise ValueError(f"active month {month} is not between 1 and 12")
        return v


class MarineLifeSummary(CamelModel):
    id: str
    name: str
    slug: str
    image_url: Optional[str] = None


class MarineLifeOut(MarineLifeSummary):
    scientific_name: Optional[str] = None
    description: Optional[str] = None
    long_description: Optional[str] = None
    animal_type: Optional[str] = None
    seasons: List[str]
    expeditions: List[str]
    active_months: List[int]
