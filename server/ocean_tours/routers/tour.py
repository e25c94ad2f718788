"""Tour router for the public catalog and admin tour management."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import AdminAuth
from ..core.exceptions import InternalServerError, ProblemDetailsException
from ..core.security import AuthContext
from ..models.tour import Difficulty
from ..schemas.common import SuccessResponse
from ..schemas.tour import TourCreate, TourDetail, TourSummary, TourUpdate
from ..services.tour_service import TourFilters, TourService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tours", tags=["tours"])

DB_DEPENDENCY = Depends(get_db)


def _detail(tour) -> dict:
    return TourDetail.model_validate(tour).to_json()


def _unexpected(operation: str, error: Exception, **context) -> InternalServerError:
    logger.error(
        f"Unexpected error in tour {operation}",
        extra={**context, "error": str(error)},
        exc_info=True
    )
    return InternalServerError()


@router.get("", response_model=List[TourSummary])
async def list_tours(
    difficulty: Optional[Difficulty] = Query(None),
    tour_type_id: Optional[str] = Query(None, alias="tourTypeId"),
    search: Optional[str] = Query(None, max_length=255),
    max_duration: Optional[int] = Query(None, alias="maxDuration", gt=0),
    month: Optional[int] = Query(None, ge=1, le=12),
    limit: Optional[int] = Query(None, ge=1, le=100),
    db: AsyncSession = DB_DEPENDENCY,
) -> JSONResponse:
    """List published tours, newest first."""
    filters = TourFilters(
        difficulty=difficulty,
        tour_type_id=tour_type_id,
        search=search,
        max_duration=max_duration,
        month=month,
        limit=limit,
    )
    try:
        tours = await TourService(db).list_published(filters)
    except ProblemDetailsException:
        raise
    except Exception as e:
        raise _unexpected("listing", e)

    return JSONResponse(
        status_code=200,
        content=[TourSummary.model_validate(tour).to_json() for tour in tours]
    )


@router.post("", response_model=TourDetail, status_code=201)
async def create_tour(
    request: TourCreate,
    auth: AuthContext = AdminAuth,
    db: AsyncSession = DB_DEPENDENCY,
) -> JSONResponse:
    """Create a tour. Unpublished unless the body says otherwise."""
    try:
        tour = await TourService(db).create(request, auth)
    except ProblemDetailsException:
        raise
    except Exception as e:
        raise _unexpected("creation", e, name=request.name)

    return JSONResponse(status_code=201, content=_detail(tour))


@router.get("/{tour_id}", response_model=TourDetail)
async def get_tour(
    tour_id: str,
    db: AsyncSession = DB_DEPENDENCY,
) -> JSONResponse:
    """Get one tour with all relations."""
    try:
        tour = await TourService(db).get_by_id(tour_id)
    except ProblemDetailsException:
        raise
    except Exception as e:
        raise _unexpected("lookup", e, tour_id=tour_id)

    return JSONResponse(status_code=200, content=_detail(tour))


@router.put("/{tour_id}", response_model=TourDetail)
async def replace_tour(
    tour_id: str,
    request: TourCreate,
    auth: AuthContext = AdminAuth,
    db: AsyncSession = DB_DEPENDENCY,
) -> JSONResponse:
    """Replace a tour. Relations left out of the body are cleared."""
    try:
        tour = await TourService(db).update(tour_id, request, auth, replace=True)
    except ProblemDetailsException:
        raise
    except Exception as e:
        raise _unexpected("replacement", e, tour_id=tour_id)

    return JSONResponse(status_code=200, content=_detail(tour))


@router.patch("/{tour_id}", response_model=TourDetail)
async def update_tour(
    tour_id: str,
    request: TourUpdate,
    auth: AuthContext = AdminAuth,
    db: AsyncSession = DB_DEPENDENCY,
) -> JSONResponse:
    """
    Partially update a tour.

    Relation keys left out are untouched; ``null`` clears a relation.
    """
    try:
        tour = await TourService(db).update(tour_id, request, auth)
    except ProblemDetailsException:
        raise
    except Exception as e:
        raise _unexpected("update", e, tour_id=tour_id)

    return JSONResponse(status_code=200, content=_detail(tour))


@router.delete("/{tour_id}", response_model=SuccessResponse)
async def delete_tour(
    tour_id: str,
    auth: AuthContext = AdminAuth,
    db: AsyncSession = DB_DEPENDENCY,
) -> JSONResponse:
    """Soft-delete a tour. Repeating the call succeeds."""
    try:
        await TourService(db).soft_delete(tour_id, auth)
    except ProblemDetailsException:
        raise
    except Exception as e:
        raise _unexpected("deletion", e, tour_id=tour_id)

    return JSONResponse(status_code=200, content=SuccessResponse().model_dump())
