"""Reference data service: tour types, marine life and locations."""

import logging
import re
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from ..core.security import AuthContext
from ..models.reference import Location, MarineLife, TourType
from ..schemas.reference import LocationCreate, MarineLifeCreate, TourTypeCreate

logger = logging.getLogger(__name__)

# Filter value meaning "do not filter"
ALL = "all"


def slugify(value: str) -> str:
    """Lowercase, hyphen-separated slug: 'Humpback Whale' -> 'humpback-whale'."""
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return slug


def _wanted(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip() or value.strip().lower() == ALL:
        return None
    return value.strip().lower()


class ReferenceDataService:
    """Service for the reference data tours point at."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # Tour types

    async def list_tour_types(self) -> list[TourType]:
        result = await self.db.execute(select(TourType).order_by(TourType.name.asc()))
        return list(result.scalars().all())

    async def create_tour_type(self, request: TourTypeCreate, auth: AuthContext) -> TourType:
        """
        Create a tour type.

        Raises:
            ConflictError: If a tour type with the same name exists
        """
        self._ensure_admin(auth)

        existing = await self.db.execute(
            select(TourType).where(func.lower(TourType.name) == request.name.lower())
        )
        existing_type = existing.scalar_one_or_none()
        if existing_type is not None:
            logger.warning(
                "Tour type creation failed - name already exists",
                extra={"tour_type_name": request.name, "existing_id": existing_type.id}
            )
            raise ConflictError(
                detail=f"Tour type '{request.name}' already exists",
                conflicting_resource={"id": existing_type.id, "name": existing_type.name},
            )

        tour_type = TourType(name=request.name, description=request.description)
        await self._add(tour_type, conflict_detail=f"Tour type '{request.name}' already exists")

        logger.info(
            "Tour type created",
            extra={"tour_type_id": tour_type.id, "tour_type_name": tour_type.name, "user_id": auth.user_id}
        )
        return tour_type

    # Marine life

    async def list_marine_life(
        self,
        animal_type: Optional[str] = None,
        season: Optional[str] = None,
        expedition: Optional[str] = None,
    ) -> list[MarineLife]:
        """
        List species ordered by name.

        Filters are case-insensitive and ``all`` disables a filter. Season and
        expedition live in JSON lists, so they are matched after loading.
        """
        stmt = select(MarineLife).order_by(MarineLife.name.asc())

        wanted_type = _wanted(animal_type)
        if wanted_type:
            stmt = stmt.where(func.lower(MarineLife.animal_type) == wanted_type)

        result = await self.db.execute(stmt)
        items = list(result.scalars().all())

        wanted_season = _wanted(season)
        if wanted_season:
            items = [item for item in items if wanted_season in (s.lower() for s in item.seasons)]

        wanted_expedition = _wanted(expedition)
        if wanted_expedition:
            items = [item for item in items if wanted_expedition in (e.lower() for e in item.expeditions)]

        return items

    async def get_marine_life(self, slug: str) -> MarineLife:
        """
        Get one species by slug.

        Raises:
            NotFoundError: If no species has this slug
        """
        result = await self.db.execute(select(MarineLife).where(MarineLife.slug == slug))
        item = result.scalar_one_or_none()
        if item is None:
            raise NotFoundError(resource_type="marine life", resource_id=slug)
        return item

    async def create_marine_life(self, request: MarineLifeCreate, auth: AuthContext) -> MarineLife:
        """
        Add a species.

        Raises:
            ValidationError: If no slug can be derived from the name
            ConflictError: If the slug is taken
        """
        self._ensure_admin(auth)

        slug = request.slug or slugify(request.name)
        if not slug:
            raise ValidationError(
                detail="A slug could not be derived from the name",
                code="INVALID_FIELDS",
                invalid=[{"field": "slug", "reason": "must contain letters or digits"}],
            )

        existing = await self.db.execute(select(MarineLife.id).where(MarineLife.slug == slug))
        if existing.scalar_one_or_none() is not None:
            raise ConflictError(detail=f"Marine life with slug '{slug}' already exists")

        item = MarineLife(
            name=request.name,
            slug=slug,
            scientific_name=request.scientific_name,
            description=request.description,
            long_description=request.long_description,
            image_url=request.image_url,
            animal_type=request.animal_type,
            seasons=list(request.seasons),
            expeditions=list(request.expeditions),
            active_months=list(request.active_months),
        )
        await self._add(item, conflict_detail=f"Marine life with slug '{slug}' already exists")

        logger.info(
            "Marine life created",
            extra={"marine_life_id": item.id, "slug": slug, "user_id": auth.user_id}
        )
        return item

    # Locations

    async def list_locations(self) -> list[Location]:
        result = await self.db.execute(select(Location).order_by(Location.name.asc()))
        return list(result.scalars().all())

    async def create_location(self, request: LocationCreate, auth: AuthContext) -> Location:
        self._ensure_admin(auth)

        location = Location(
            name=request.name,
            description=request.description,
            latitude=request.latitude,
            longitude=request.longitude,
        )
        await self._add(location, conflict_detail="Location conflicts with an existing record")

        logger.info(
            "Location created",
            extra={"location_id": location.id, "location_name": location.name, "user_id": auth.user_id}
        )
        return location

    @staticmethod
    def _ensure_admin(auth: AuthContext) -> None:
        if not auth.is_admin:
            raise AuthorizationError(required_role=settings.admin_role)

    async def _add(self, instance, conflict_detail: str) -> None:
        try:
            self.db.add(instance)
            await self.db.commit()
            await self.db.refresh(instance)
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(
                "Reference data write violated a constraint",
                extra={"entity": type(instance).__name__, "error": str(e.orig)}
            )
            raise ConflictError(detail=conflict_detail) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Reference data write failed",
                extra={"entity": type(instance).__name__, "error": str(e)},
                exc_info=True,
            )
            raise PersistenceError(store_message=str(e)) from e
