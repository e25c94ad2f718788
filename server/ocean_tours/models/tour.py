"""Tour model and the rows a tour owns."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
    false,
)
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base
from .mixins import StringIdMixin, TimestampMixin
from .reference import Category, Equipment, Guide, Location, MarineLife, Tag, TourType

if TYPE_CHECKING:
    from .schedule import Schedule


class Difficulty(str, Enum):
    """Tour difficulty enumeration."""
    EASY = "EASY"
    MODERATE = "MODERATE"
    CHALLENGING = "CHALLENGING"
    EXTREME = "EXTREME"


tour_marine_life = Table(
    "tour_marine_life",
    Base.metadata,
    Column("tour_id", String(64), ForeignKey("tours.id", ondelete="CASCADE"), primary_key=True),
    Column("marine_life_id", String(64), ForeignKey("marine_life.id", ondelete="RESTRICT"), primary_key=True),
)

tour_tags = Table(
    "tour_tags",
    Base.metadata,
    Column("tour_id", String(64), ForeignKey("tours.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", String(64), ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Tour(StringIdMixin, TimestampMixin, Base):
    """Tour entity representing a bookable marine expedition."""

    __tablename__ = "tours"

    # Core tour information
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    difficulty: Mapped[Difficulty] = mapped_column(String(20), nullable=False, default=Difficulty.MODERATE)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)

    # Pricing and capacity
    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    max_participants: Mapped[int] = mapped_column(Integer, nullable=False)

    # Visibility
    published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(nullable=True)

    # Owned ordered lists
    highlights: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    inclusions: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    exclusions: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    images: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    required_equipment: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    seasons: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    # Display names of the linked species, kept in marine_life order
    marine_life_names: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    # Marine-specific details
    expedition_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    marine_area: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    departure_port: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    conservation_info: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tide_dependency: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    safety_briefing: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Optional relations
    category_id: Mapped[Optional[str]] = mapped_column(
        String(64), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True
    )
    guide_id: Mapped[Optional[str]] = mapped_column(
        String(64), ForeignKey("guides.id", ondelete="SET NULL"), nullable=True, index=True
    )
    tour_type_id: Mapped[Optional[str]] = mapped_column(
        String(64), ForeignKey("tour_types.id", ondelete="SET NULL"), nullable=True, index=True
    )
    start_location_id: Mapped[Optional[str]] = mapped_column(
        String(64), ForeignKey("locations.id", ondelete="SET NULL"), nullable=True
    )
    end_location_id: Mapped[Optional[str]] = mapped_column(
        String(64), ForeignKey("locations.id", ondelete="SET NULL"), nullable=True
    )
    location_id: Mapped[Optional[str]] = mapped_column(
        String(64), ForeignKey("locations.id", ondelete="SET NULL"), nullable=True
    )

    # Constraints
    __table_args__ = (
        CheckConstraint("duration > 0", name="ck_tour_duration_positive"),
        CheckConstraint("max_participants > 0", name="ck_tour_max_participants_positive"),
        CheckConstraint("base_price >= 0", name="ck_tour_base_price_non_negative"),
        CheckConstraint("length(name) > 0", name="ck_tour_name_not_empty"),
    )

    # Relationships
    category: Mapped[Optional[Category]] = relationship(Category)
    guide: Mapped[Optional[Guide]] = relationship(Guide)
    tour_type: Mapped[Optional[TourType]] = relationship(TourType)
    start_location: Mapped[Optional[Location]] = relationship(Location, foreign_keys=[start_location_id])
    end_location: Mapped[Optional[Location]] = relationship(Location, foreign_keys=[end_location_id])
    location_details: Mapped[Optional[Location]] = relationship(Location, foreign_keys=[location_id])

    marine_life: Mapped[list[MarineLife]] = relationship(MarineLife, secondary=tour_marine_life)
    tags: Mapped[list[Tag]] = relationship(Tag, secondary=tour_tags)

    schedules: Mapped[list["Schedule"]] = relationship(
        "Schedule",
        back_populates="tour",
        cascade="all, delete-orphan",
        order_by="Schedule.start_date",
    )
    itinerary: Mapped[list["ItineraryDay"]] = relationship(
        "ItineraryDay",
        back_populates="tour",
        cascade="all, delete-orphan",
        order_by="ItineraryDay.day_number",
    )
    equipment: Mapped[list["TourEquipment"]] = relationship(
        "TourEquipment",
        back_populates="tour",
        cascade="all, delete-orphan",
    )
    accommodations: Mapped[list["Accommodation"]] = relationship(
        "Accommodation",
        back_populates="tour",
        cascade="all, delete-orphan",
    )

    @hybrid_property
    def is_visible(self) -> bool:
        """Soft-deleted tours are invisible to every read path."""
        return not self.deleted

    @is_visible.expression
    def is_visible(cls):
        return cls.deleted == false()

    @property
    def marine_life_ids(self) -> list[str]:
        return [item.id for item in self.marine_life]

    def __repr__(self) -> str:
        return (
            f"<Tour(id={self.id}, name='{self.name}', "
            f"published={self.published}, deleted={self.deleted})>"
        )


class ItineraryDay(StringIdMixin, Base):
    """One day of a multi-day tour."""

    __tablename__ = "itinerary_days"

    tour_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("tours.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day_number: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("day_number > 0", name="ck_itinerary_day_number_positive"),
        UniqueConstraint("tour_id", "day_number", name="uq_itinerary_tour_day"),
    )

    tour: Mapped[Tour] = relationship(Tour, back_populates="itinerary")


class TourEquipment(Base):
    """Association of a tour with an equipment item."""

    __tablename__ = "tour_equipment"

    tour_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("tours.id", ondelete="CASCADE"), primary_key=True
    )
    equipment_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("equipment.id", ondelete="RESTRICT"), primary_key=True
    )
    required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    tour: Mapped[Tour] = relationship(Tour, back_populates="equipment")
    equipment: Mapped[Equipment] = relationship(Equipment)


class Accommodation(StringIdMixin, Base):
    __tablename__ = "accommodations"

    tour_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("tours.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    tour: Mapped[Tour] = relationship(Tour, back_populates="accommodations")
