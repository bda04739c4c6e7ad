"""Pydantic models for the API."""

from .category import Category, DEFAULT_CATEGORY, ALL, FILTER_OPTIONS
from .geometry import (
    Geometry,
    PointGeometry,
    PolygonGeometry,
    LineStringGeometry
)
from .building import (
    ExtrusionInfo,
    BuildingCreate,
    BuildingRecord,
    BuildingFeature,
    BuildingFeatureProperties,
    BuildingFeatureCollection,
    BuildingCreateResponse
)
from .route import RouteRequest, UploadResponse

__all__ = [
    "Category",
    "DEFAULT_CATEGORY",
    "ALL",
    "FILTER_OPTIONS",
    "Geometry",
    "PointGeometry",
    "PolygonGeometry",
    "LineStringGeometry",
    "ExtrusionInfo",
    "BuildingCreate",
    "BuildingRecord",
    "BuildingFeature",
    "BuildingFeatureProperties",
    "BuildingFeatureCollection",
    "BuildingCreateResponse",
    "RouteRequest",
    "UploadResponse"
]
