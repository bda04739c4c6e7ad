"""GeoJSON geometry models.

Geometries are a tagged variant on ``type`` so mixed point/polygon payloads
are validated where they enter the system instead of travelling as loose
dictionaries.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, field_validator

Position = Annotated[list[float], Field(min_length=2, max_length=3)]


def _check_position(position: list[float]) -> list[float]:
    lng, lat = position[0], position[1]
    if not -180 <= lng <= 180:
        raise ValueError(f"longitude {lng} is outside [-180, 180]")
    if not -90 <= lat <= 90:
        raise ValueError(f"latitude {lat} is outside [-90, 90]")
    return position


class PointGeometry(BaseModel):
    """A single [lng, lat] position."""
    type: Literal["Point"] = "Point"
    coordinates: Position

    @field_validator("coordinates")
    @classmethod
    def validate_position(cls, value):
        return _check_position(value)


class PolygonGeometry(BaseModel):
    """A polygon made of closed linear rings, outer ring first."""
    type: Literal["Polygon"] = "Polygon"
    coordinates: list[list[Position]] = Field(..., min_length=1)

    @field_validator("coordinates")
    @classmethod
    def validate_rings(cls, rings):
        for index, ring in enumerate(rings):
            if len(ring) < 4:
                raise ValueError(
                    f"ring {index} has {len(ring)} points, a closed ring needs at least 4"
                )
            if ring[0] != ring[-1]:
                raise ValueError(f"ring {index} is not closed (first point must equal last point)")
            for position in ring:
                _check_position(position)
        return rings

    @property
    def outer_ring(self) -> list[list[float]]:
        return self.coordinates[0]


class LineStringGeometry(BaseModel):
    """An ordered path of positions."""
    type: Literal["LineString"] = "LineString"
    coordinates: list[Position] = Field(..., min_length=2)


Geometry = Annotated[
    Union[PointGeometry, PolygonGeometry, LineStringGeometry],
    Field(discriminator="type")
]
