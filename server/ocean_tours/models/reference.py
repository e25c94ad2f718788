"""Reference data shared by tours: locations, species, types, guides, equipment."""

from typing import Optional

from sqlalchemy import JSON, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base
from .mixins import StringIdMixin, TimestampMixin


class Location(StringIdMixin, TimestampMixin, Base):
    """A departure point, landing or marine area."""

    __tablename__ = "locations"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    def __repr__(self) -> str:
        return f"<Location(id={self.id}, name='{self.name}')>"


class Category(StringIdMixin, TimestampMixin, Base):
    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name='{self.name}')>"


class Guide(StringIdMixin, TimestampMixin, Base):
    """Tour guide profile."""

    __tablename__ = "guides"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    profile_image: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Guide(id={self.id}, name='{self.name}')>"


class TourType(StringIdMixin, TimestampMixin, Base):
    """Admin-managed classification such as 'Ocean Safari' or 'Seal Kayaking'."""

    __tablename__ = "tour_types"

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<TourType(id={self.id}, name='{self.name}')>"


class MarineLife(StringIdMixin, TimestampMixin, Base):
    """Species reference data. Tours point at it; they never own it."""

    __tablename__ = "marine_life"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    scientific_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    long_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    animal_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    seasons: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    expeditions: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    active_months: Mapped[list[int]] = mapped_column(JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<MarineLife(id={self.id}, slug='{self.slug}')>"


class Equipment(StringIdMixin, TimestampMixin, Base):
    __tablename__ = "equipment"

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Equipment(id={self.id}, name='{self.name}')>"


class Tag(StringIdMixin, Base):
    __tablename__ = "tags"

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, name='{self.name}')>"
