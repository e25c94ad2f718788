"""Tour service for business logic operations."""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from sqlalchemy import extract, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.config import settings
from ..core.exceptions import AuthorizationError, NotFoundError, PersistenceError, ValidationError
from ..core.observability import metrics_collector
from ..core.security import AuthContext
from ..models.mixins import new_id, utcnow
from ..models.reference import MarineLife
from ..models.schedule import Schedule
from ..models.tour import Difficulty, Tour, TourEquipment
from ..schemas.tour import (
    DEFAULT_EXCLUSIONS,
    DEFAULT_HIGHLIGHTS,
    DEFAULT_INCLUSIONS,
    RELATION_FIELDS,
    TourCreate,
    TourUpdate,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Unchanged:
    """Leave the relation as it is."""


@dataclass(frozen=True)
class SetTo:
    """Point the relation at another row."""

    id: str


@dataclass(frozen=True)
class Cleared:
    """Remove the relation."""


RelationUpdate = Union[Unchanged, SetTo, Cleared]


def relation_updates(changes: Union[TourCreate, TourUpdate], replace: bool = False) -> dict[str, RelationUpdate]:
    """
    Translate a request body into one tagged update per relation field.

    A partial body only touches keys the client sent: a string sets the
    relation and ``null`` clears it. A full replacement treats every
    omitted relation as cleared.
    """
    updates: dict[str, RelationUpdate] = {}
    for field_name in RELATION_FIELDS:
        if not replace and field_name not in changes.model_fields_set:
            updates[field_name] = Unchanged()
            continue
        value = getattr(changes, field_name)
        updates[field_name] = SetTo(value) if value else Cleared()
    return updates


@dataclass
class TourFilters:
    """Optional narrowing of the public tour listing."""

    difficulty: Optional[Difficulty] = None
    tour_type_id: Optional[str] = None
    search: Optional[str] = None
    max_duration: Optional[int] = None
    month: Optional[int] = None
    limit: Optional[int] = None


# Relations the public listing needs
LIST_LOAD_OPTIONS = (
    selectinload(Tour.schedules),
    selectinload(Tour.itinerary),
    selectinload(Tour.start_location),
    selectinload(Tour.end_location),
    selectinload(Tour.guide),
    selectinload(Tour.marine_life),
)

DETAIL_LOAD_OPTIONS = LIST_LOAD_OPTIONS + (
    selectinload(Tour.equipment).selectinload(TourEquipment.equipment),
    selectinload(Tour.accommodations),
    selectinload(Tour.category),
    selectinload(Tour.tags),
    selectinload(Tour.location_details),
    selectinload(Tour.tour_type),
)


def _ensure_admin(auth: AuthContext) -> None:
    if not auth.is_admin:
        raise AuthorizationError(required_role=settings.admin_role)


def _ensure_publishable(tour: Tour) -> None:
    """A published tour must name both its start and end location."""
    if not tour.published:
        return
    invalid = [
        {"field": alias, "reason": "required when the tour is published"}
        for alias, value in (
            ("startLocationId", tour.start_location_id),
            ("endLocationId", tour.end_location_id),
        )
        if not value
    ]
    if invalid:
        raise ValidationError(
            detail="Published tours need a start and end location",
            code="INVALID_FIELDS",
            invalid=invalid,
        )


def _scalar_values(request: TourCreate) -> dict:
    """Column values of a full tour body, with list defaults applied."""
    return {
        "name": request.name,
        "description": request.description,
        "difficulty": request.difficulty.value,
        "duration": request.duration,
        "max_participants": request.max_participants,
        "base_price": request.base_price,
        "published": request.published,
        "highlights": request.highlights if request.highlights is not None else list(DEFAULT_HIGHLIGHTS),
        "inclusions": request.inclusions if request.inclusions is not None else list(DEFAULT_INCLUSIONS),
        "exclusions": request.exclusions if request.exclusions is not None else list(DEFAULT_EXCLUSIONS),
        "images": list(request.images),
        "required_equipment": list(request.required_equipment),
        "seasons": list(request.seasons),
        "expedition_type": request.expedition_type,
        "marine_area": request.marine_area,
        "departure_port": request.departure_port,
        "conservation_info": request.conservation_info,
        "tide_dependency": request.tide_dependency,
        "safety_briefing": request.safety_briefing,
    }


class TourService:
    """Service for tour-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_published(self, filters: Optional[TourFilters] = None) -> list[Tour]:
        """
        List published, visible tours, newest first.

        Args:
            filters: Optional narrowing used by the public tours and home pages

        Returns:
            Tours with schedules, itinerary, locations, guide and marine life loaded
        """
        filters = filters or TourFilters()

        stmt = (
            select(Tour)
            .where(Tour.published.is_(True), Tour.is_visible)
            .options(*LIST_LOAD_OPTIONS)
            .order_by(Tour.created_at.desc())
        )

        if filters.difficulty:
            stmt = stmt.where(Tour.difficulty == filters.difficulty.value)
        if filters.tour_type_id:
            stmt = stmt.where(Tour.tour_type_id == filters.tour_type_id)
        if filters.search:
            stmt = stmt.where(Tour.name.ilike(f"%{filters.search.strip()}%"))
        if filters.max_duration:
            stmt = stmt.where(Tour.duration <= filters.max_duration)
        if filters.month:
            scheduled = select(Schedule.tour_id).where(
                extract("month", Schedule.start_date) == filters.month
            )
            stmt = stmt.where(Tour.id.in_(scheduled))
        if filters.limit:
            stmt = stmt.limit(filters.limit)

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_by_id(self, tour_id: str) -> Tour:
        """
        Get a visible tour with every relation expanded.

        Raises:
            NotFoundError: If the tour does not exist or was soft-deleted
        """
        tour = await self._load(tour_id, visible_only=True)
        if tour is None:
            logger.info("Tour not found", extra={"tour_id": tour_id})
            raise NotFoundError(resource_type="tour", resource_id=tour_id)
        return tour

    async def create(self, request: TourCreate, auth: AuthContext) -> Tour:
        """
        Create a new tour.

        Args:
            request: Validated tour body
            auth: Session of the administrator making the change

        Returns:
            Created tour with relations loaded

        Raises:
            ValidationError: Unknown marine life ids or an unpublishable tour
            PersistenceError: The store rejected the write
        """
        _ensure_admin(auth)

        marine_life = await self._resolve_marine_life(request.marine_life_ids)

        tour = Tour(id=new_id(), **_scalar_values(request))
        for field_name in RELATION_FIELDS:
            setattr(tour, field_name, getattr(request, field_name))
        tour.marine_life = marine_life
        tour.marine_life_names = [item.name for item in marine_life]

        _ensure_publishable(tour)

        self.db.add(tour)
        await self._commit("create", tour_id=tour.id)
        metrics_collector.record_tour_created()

        logger.info(
            "Tour created successfully",
            extra={"tour_id": tour.id, "tour_name": tour.name, "user_id": auth.user_id}
        )
        return await self._reload(tour.id)

    async def update(
        self,
        tour_id: str,
        changes: Union[TourCreate, TourUpdate],
        auth: AuthContext,
        replace: bool = False,
    ) -> Tour:
        """
        Update a tour.

        Args:
            tour_id: Tour to change
            changes: Partial body (PATCH) or full body (PUT)
            auth: Session of the administrator making the change
            replace: Treat ``changes`` as a full replacement

        Raises:
            NotFoundError: If the tour does not exist or was soft-deleted
            ValidationError: Unknown marine life ids or an unpublishable result
            PersistenceError: The store rejected the write
        """
        _ensure_admin(auth)

        tour = await self.get_by_id(tour_id)

        relink_marine_life = replace or "marine_life_ids" in changes.model_fields_set
        if relink_marine_life:
            marine_life = await self._resolve_marine_life(changes.marine_life_ids or [])

        if replace:
            values = _scalar_values(changes)
        else:
            values = {
                name: getattr(changes, name)
                for name in changes.model_fields_set
                if name not in RELATION_FIELDS and name != "marine_life_ids"
            }
            if values.get("difficulty") is not None:
                values["difficulty"] = values["difficulty"].value

        for name, value in values.items():
            setattr(tour, name, value)

        for field_name, update in relation_updates(changes, replace=replace).items():
            if isinstance(update, SetTo):
                setattr(tour, field_name, update.id)
            elif isinstance(update, Cleared):
                setattr(tour, field_name, None)

        if relink_marine_life:
            tour.marine_life = marine_life
            tour.marine_life_names = [item.name for item in marine_life]

        try:
            _ensure_publishable(tour)
        except ValidationError:
            await self.db.rollback()
            raise

        await self._commit("update", tour_id=tour_id)

        logger.info(
            "Tour updated successfully",
            extra={
                "tour_id": tour_id,
                "fields": sorted(changes.model_fields_set),
                "replace": replace,
                "user_id": auth.user_id,
            }
        )
        return await self._reload(tour_id)

    async def soft_delete(self, tour_id: str, auth: AuthContext) -> Tour:
        """
        Mark a tour deleted. Deleting an already deleted tour is a no-op.

        Raises:
            NotFoundError: If no tour has this id
        """
        _ensure_admin(auth)

        tour = await self._load(tour_id, visible_only=False)
        if tour is None:
            raise NotFoundError(resource_type="tour", resource_id=tour_id)

        if tour.deleted:
            logger.info("Tour already deleted", extra={"tour_id": tour_id})
            return tour

        tour.deleted = True
        tour.deleted_at = utcnow()
        await self._commit("soft_delete", tour_id=tour_id)
        metrics_collector.record_tour_soft_deleted()

        logger.info(
            "Tour soft-deleted",
            extra={"tour_id": tour_id, "user_id": auth.user_id}
        )
        return tour

    async def _load(self, tour_id: str, visible_only: bool) -> Optional[Tour]:
        stmt = select(Tour).where(Tour.id == tour_id).options(*DETAIL_LOAD_OPTIONS)
        if visible_only:
            stmt = stmt.where(Tour.is_visible)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def _reload(self, tour_id: str) -> Tour:
        """Re-read a tour after a write so relations reflect the new foreign keys."""
        stmt = (
            select(Tour)
            .where(Tour.id == tour_id)
            .options(*DETAIL_LOAD_OPTIONS)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one()

    async def _resolve_marine_life(self, marine_life_ids: list[str]) -> list[MarineLife]:
        """
        Look up marine life by id, keeping request order and dropping duplicates.

        Raises:
            ValidationError: Naming every id with no matching row
        """
        unique_ids = list(dict.fromkeys(marine_life_ids))
        if not unique_ids:
            return []

        result = await self.db.execute(select(MarineLife).where(MarineLife.id.in_(unique_ids)))
        found = {item.id: item for item in result.scalars().all()}

        unknown = [item_id for item_id in unique_ids if item_id not in found]
        if unknown:
            logger.info("Unknown marine life ids", extra={"marine_life_ids": unknown})
            raise ValidationError(
                detail=f"Invalid marine life IDs: {', '.join(unknown)}",
                code="INVALID_MARINE_LIFE",
                invalid=[
                    {"field": "marineLifeIds", "value": item_id, "reason": "unknown marine life id"}
                    for item_id in unknown
                ],
            )
        return [found[item_id] for item_id in unique_ids]

    async def _commit(self, operation: str, tour_id: Optional[str] = None) -> None:
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(
                "Tour write violated a store constraint",
                extra={"operation": operation, "tour_id": tour_id, "error": str(e.orig)}
            )
            raise ValidationError(
                detail="The tour references a record that does not exist or breaks a constraint",
                code="CONSTRAINT_VIOLATION",
                errors=None if settings.is_production else {"store_message": str(e.orig)},
            ) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Tour write failed",
                extra={"operation": operation, "tour_id": tour_id, "error": str(e)},
                exc_info=True,
            )
            raise PersistenceError(detail=f"Failed to {operation.replace('_', ' ')} tour", store_message=str(e)) from e
