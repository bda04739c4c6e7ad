"""Pydantic models for routing and uploads."""

from pydantic import BaseModel, Field


class RouteRequest(BaseModel):
    """Start and end coordinates for a foot route."""
    start_lng: float = Field(..., alias="startLng", ge=-180, le=180)
    start_lat: float = Field(..., alias="startLat", ge=-90, le=90)
    end_lng: float = Field(..., alias="endLng", ge=-180, le=180)
    end_lat: float = Field(..., alias="endLat", ge=-90, le=90)

    class Config:
        populate_by_name = True


class UploadResponse(BaseModel):
    """Response after storing an uploaded image."""
    message: str
    file_path: str = Field(..., alias="filePath")

    class Config:
        populate_by_name = True
