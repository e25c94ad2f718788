"""Unit tests for reference data (tour types, marine life, locations)."""

import pytest

from ocean_tours.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from ocean_tours.schemas.reference import LocationCreate, MarineLifeCreate, TourTypeCreate
from ocean_tours.services.reference_service import ReferenceDataService, slugify


@pytest.mark.parametrize(
    "name,slug",
    [
        ("Humpback Whale", "humpback-whale"),
        ("NZ Fur Seal", "nz-fur-seal"),
        ("  Hector's Dolphin!  ", "hector-s-dolphin"),
        ("***", ""),
    ],
)
def test_slugify(name, slug):
    assert slugify(name) == slug


@pytest.mark.asyncio
async def test_tour_types_sorted_by_name(test_session, catalog, admin_auth):
    service = ReferenceDataService(test_session)
    await service.create_tour_type(TourTypeCreate(name="Coastal Walk"), admin_auth)

    names = [item.name for item in await service.list_tour_types()]

    assert names == ["Coastal Walk", "Ocean Safari"]


@pytest.mark.asyncio
async def test_duplicate_tour_type(test_session, catalog, admin_auth):
    """Test tour type names are unique regardless of case."""
    service = ReferenceDataService(test_session)

    with pytest.raises(ConflictError) as exc_info:
        await service.create_tour_type(TourTypeCreate(name="  ocean safari "), admin_auth)

    assert exc_info.value.status_code == 409
    assert exc_info.value.problem_details["conflicting_resource"]["id"] == "tt-safari"


@pytest.mark.asyncio
async def test_tour_type_requires_admin(test_session, user_auth):
    service = ReferenceDataService(test_session)

    with pytest.raises(AuthorizationError):
        await service.create_tour_type(TourTypeCreate(name="Coastal Walk"), user_auth)


@pytest.mark.asyncio
async def test_marine_life_filters(test_session, catalog):
    service = ReferenceDataService(test_session)

    everything = await service.list_marine_life()
    assert [item.slug for item in everything] == ["nz-fur-seal", "orca", "royal-albatross"]

    birds = await service.list_marine_life(animal_type="bird")
    assert [item.slug for item in birds] == ["royal-albatross"]

    winter = await service.list_marine_life(season="WINTER")
    assert [item.slug for item in winter] == ["orca", "royal-albatross"]

    kayaking = await service.list_marine_life(animal_type="all", expedition="seal kayaking")
    assert [item.slug for item in kayaking] == ["nz-fur-seal"]

    assert await service.list_marine_life(animal_type="Mammal", season="Winter", expedition="Pelagic Birding") == []


@pytest.mark.asyncio
async def test_get_marine_life(test_session, catalog):
    service = ReferenceDataService(test_session)

    item = await service.get_marine_life("orca")
    assert item.id == "ml-orca"

    with pytest.raises(NotFoundError):
        await service.get_marine_life("kraken")


@pytest.mark.asyncio
async def test_create_marine_life_derives_slug(test_session, catalog, admin_auth):
    service = ReferenceDataService(test_session)

    item = await service.create_marine_life(
        MarineLifeCreate(name="Hector's Dolphin", animal_type="Mammal", seasons=["Summer"], active_months=[12, 1, 2]),
        admin_auth,
    )

    assert item.slug == "hector-s-dolphin"
    assert item.active_months == [12, 1, 2]

    with pytest.raises(ConflictError):
        await service.create_marine_life(MarineLifeCreate(name="Hector's  Dolphin"), admin_auth)


def test_marine_life_months_validated():
    with pytest.raises(ValueError):
        MarineLifeCreate(name="Orca", active_months=[0, 13])


@pytest.mark.asyncio
async def test_locations(test_session, catalog, admin_auth):
    service = ReferenceDataService(test_session)

    created = await service.create_location(
        LocationCreate(name="Akaroa Harbour", latitude=-43.8, longitude=172.97),
        admin_auth,
    )

    assert created.id is not None
    assert [item.name for item in await service.list_locations()] == [
        "Akaroa Harbour",
        "Kaikoura Wharf",
        "South Bay",
    ]
