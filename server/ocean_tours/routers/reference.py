"""Routers for reference data: tour types, marine life and locations."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import AdminAuth
from ..core.security import AuthContext
from ..schemas.reference import (
    LocationCreate,
    LocationOut,
    MarineLifeCreate,
    MarineLifeOut,
    TourTypeCreate,
    TourTypeOut,
)
from ..services.reference_service import ReferenceDataService

logger = logging.getLogger(__name__)

tour_types_router = APIRouter(prefix="/tour-types", tags=["tour-types"])
marine_life_router = APIRouter(prefix="/marine-life", tags=["marine-life"])
locations_router = APIRouter(prefix="/locations", tags=["locations"])

DB_DEPENDENCY = Depends(get_db)


@tour_types_router.get("", response_model=List[TourTypeOut])
async def list_tour_types(db: AsyncSession = DB_DEPENDENCY) -> JSONResponse:
    items = await ReferenceDataService(db).list_tour_types()
    return JSONResponse(content=[TourTypeOut.model_validate(item).to_json() for item in items])


@tour_types_router.post("", response_model=TourTypeOut, status_code=201)
async def create_tour_type(
    request: TourTypeCreate,
    auth: AuthContext = AdminAuth,
    db: AsyncSession = DB_DEPENDENCY,
) -> JSONResponse:
    """Create a tour type. Names are unique."""
    item = await ReferenceDataService(db).create_tour_type(request, auth)
    return JSONResponse(status_code=201, content=TourTypeOut.model_validate(item).to_json())


@marine_life_router.get("", response_model=List[MarineLifeOut])
async def list_marine_life(
    animal_type: Optional[str] = Query(None, alias="animalType"),
    season: Optional[str] = Query(None),
    expedition: Optional[str] = Query(None),
    db: AsyncSession = DB_DEPENDENCY,
) -> JSONResponse:
    """List species, optionally filtered. ``all`` means no filter."""
    items = await ReferenceDataService(db).list_marine_life(
        animal_type=animal_type,
        season=season,
        expedition=expedition,
    )
    return JSONResponse(content=[MarineLifeOut.model_validate(item).to_json() for item in items])


@marine_life_router.get("/{slug}", response_model=MarineLifeOut)
async def get_marine_life(slug: str, db: AsyncSession = DB_DEPENDENCY) -> JSONResponse:
    item = await ReferenceDataService(db).get_marine_life(slug)
    return JSONResponse(content=MarineLifeOut.model_validate(item).to_json())


@marine_life_router.post("", response_model=MarineLifeOut, status_code=201)
async def create_marine_life(
    request: MarineLifeCreate,
    auth: AuthContext = AdminAuth,
    db: AsyncSession = DB_DEPENDENCY,
) -> JSONResponse:
    item = await ReferenceDataService(db).create_marine_life(request, auth)
    return JSONResponse(status_code=201, content=MarineLifeOut.model_validate(item).to_json())


@locations_router.get("", response_model=List[LocationOut])
async def list_locations(db: AsyncSession = DB_DEPENDENCY) -> JSONResponse:
    items = await ReferenceDataService(db).list_locations()
    return JSONResponse(content=[LocationOut.model_validate(item).to_json() for item in items])


@locations_router.post("", response_model=LocationOut, status_code=201)
async def create_location(
    request: LocationCreate,
    auth: AuthContext = AdminAuth,
    db: AsyncSession = DB_DEPENDENCY,
) -> JSONResponse:
    item = await ReferenceDataService(db).create_location(request, auth)
    return JSONResponse(status_code=201, content=LocationOut.model_validate(item).to_json())
