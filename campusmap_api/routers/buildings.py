"""
Buildings API router.

Endpoints:
- GET /api/map/buildings - All buildings as a GeoJSON FeatureCollection
- POST /api/map/new - Save a new building
"""

from fastapi import APIRouter, HTTPException, Depends
from loguru import logger

from ..store import BuildingStore, StoreError, get_store
from ..models.building import (
    BuildingCreate,
    BuildingCreateResponse,
    BuildingFeature,
    BuildingFeatureCollection
)

router = APIRouter()


@router.get("/buildings", response_model=BuildingFeatureCollection)
def list_buildings(store: BuildingStore = Depends(get_store)):
    """List every building with its footprint as geometry."""
    try:
        records = store.list_buildings()
    except StoreError:
        logger.exception("Error retrieving buildings")
        raise HTTPException(500, "Server error retrieving buildings")

    return BuildingFeatureCollection(
        features=[BuildingFeature.from_record(record) for record in records]
    )


@router.post("/new", response_model=BuildingCreateResponse, status_code=201)
def create_building(
    building: BuildingCreate,
    store: BuildingStore = Depends(get_store)
):
    """Validate and persist a new building."""
    try:
        building_id = store.save_building(building)
    except StoreError:
        logger.exception("Error saving building {}", building.name)
        raise HTTPException(400, "Invalid data format or server error.")

    return BuildingCreateResponse(
        message="Building data saved successfully!",
        id=building_id
    )
