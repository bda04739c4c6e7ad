"""Pydantic models for building data."""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from .category import Category, DEFAULT_CATEGORY
from .geometry import PointGeometry, PolygonGeometry


class ExtrusionInfo(BaseModel):
    """Data used for 3D rendering and info pop-ups."""
    height: Optional[float] = Field(None, ge=0)
    capacity: Optional[int] = Field(None, ge=0)
    hours: Optional[str] = None


class BuildingCreate(BaseModel):
    """Payload for creating a building."""
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    category: Category = DEFAULT_CATEGORY
    extrusion_info: Optional[ExtrusionInfo] = Field(None, alias="extrusionInfo")
    footprint: PolygonGeometry
    viewpoint: Optional[PointGeometry] = None
    photo_url: Optional[str] = Field(None, alias="photoURL")

    class Config:
        populate_by_name = True


class BuildingRecord(BuildingCreate):
    """A stored building with its assigned identifier."""
    id: str

    @property
    def height(self) -> Optional[float]:
        return self.extrusion_info.height if self.extrusion_info else None


class BuildingFeatureProperties(BaseModel):
    """Properties attached to each building feature."""
    id: str
    name: str
    category: Category
    height: Optional[float] = None
    photo_url: Optional[str] = Field(None, alias="photoURL")
    viewpoint: Optional[PointGeometry] = None

    class Config:
        populate_by_name = True


class BuildingFeature(BaseModel):
    """GeoJSON feature for a building footprint."""
    type: Literal["Feature"] = "Feature"
    geometry: PolygonGeometry
    properties: BuildingFeatureProperties

    @classmethod
    def from_record(cls, record: BuildingRecord) -> "BuildingFeature":
        return cls(
            geometry=record.footprint,
            properties=BuildingFeatureProperties(
                id=record.id,
                name=record.name,
                category=record.category,
                height=record.height,
                photo_url=record.photo_url,
                viewpoint=record.viewpoint
            )
        )


class BuildingFeatureCollection(BaseModel):
    """All buildings as a GeoJSON feature collection."""
    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: list[BuildingFeature]


class BuildingCreateResponse(BaseModel):
    """Response after saving a building."""
    message: str
    id: str
