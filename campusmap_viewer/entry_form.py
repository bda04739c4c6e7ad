"""
Data entry form for new buildings.

Coordinates are typed (or loaded from right-click collection) as a nested
ring array. Open rings are closed before the payload is validated against
the same ``BuildingCreate`` model the API uses.
"""

import json
from dataclasses import dataclass
from typing import Optional

from loguru import logger
from pydantic import ValidationError

from campusmap_api.models.building import BuildingCreate, ExtrusionInfo
from campusmap_api.models.category import Category, DEFAULT_CATEGORY
from campusmap_api.models.geometry import PolygonGeometry

from .client import ApiError, MapApiClient
from .geometry import close_ring
from .state import (
    SAVING_STATUS,
    ClearSubmitStatus,
    SetLoading,
    SetSubmitStatus,
    Store,
    save_new_building,
)

DEFAULT_NAME = "New Building"
DEFAULT_HEIGHT = 40.0
DEFAULT_COORDINATES = """[[
    [83.2839, 17.6829],
    [83.2841, 17.6829],
    [83.2841, 17.6831],
    [83.2839, 17.6831],
    [83.2839, 17.6829]
]]"""

CATEGORY_OPTIONS = [category.value for category in Category]

NO_PHOTO_MESSAGE = "Please upload the 360 image first."
BAD_COORDINATES_MESSAGE = "Invalid GeoJSON coordinates format."
UPLOADED_MESSAGE = "Image uploaded! Ready to save data."


class EntryFormError(ValueError):
    """Local validation failure; the message is shown to the user."""


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_coordinates(text: str) -> list[list[list[float]]]:
    """Parse ``[[[lng, lat], ...], ...]`` text into nested lists."""
    try:
        rings = json.loads(text)
    except (TypeError, ValueError):
        raise EntryFormError(BAD_COORDINATES_MESSAGE)

    if not isinstance(rings, list) or not rings:
        raise EntryFormError(BAD_COORDINATES_MESSAGE)
    for ring in rings:
        if not isinstance(ring, list) or not ring:
            raise EntryFormError(BAD_COORDINATES_MESSAGE)
        for position in ring:
            if (not isinstance(position, list) or len(position) < 2
                    or not all(_is_number(v) for v in position)):
                raise EntryFormError(BAD_COORDINATES_MESSAGE)
    return rings


def close_rings(rings: list[list[list[float]]]) -> list[list[list[float]]]:
    """Close every open ring by repeating its first point."""
    closed = []
    for ring in rings:
        closed_ring = close_ring(ring)
        if len(closed_ring) != len(ring):
            logger.debug("Polygon ring automatically closed")
        closed.append(closed_ring)
    return closed


def format_coordinates(ring: list[list[float]]) -> str:
    """Render a single ring as coordinates text for the form."""
    return json.dumps([ring])


@dataclass
class EntryFormData:
    name: str = DEFAULT_NAME
    category: Category = DEFAULT_CATEGORY
    height: float = DEFAULT_HEIGHT
    coordinates: str = DEFAULT_COORDINATES
    description: Optional[str] = None
    photo_path: Optional[str] = None


def build_payload(data: EntryFormData) -> dict:
    """Turn form fields into a creation payload.

    Raises EntryFormError when no photo was uploaded, the coordinates do not
    parse, or the result fails the building schema.
    """
    if not data.photo_path:
        raise EntryFormError(NO_PHOTO_MESSAGE)

    rings = close_rings(parse_coordinates(data.coordinates))

    try:
        building = BuildingCreate(
            name=data.name,
            description=data.description,
            category=data.category,
            extrusion_info=ExtrusionInfo(height=float(data.height)),
            footprint=PolygonGeometry(coordinates=rings),
            photo_url=data.photo_path,
        )
    except (ValidationError, TypeError, ValueError) as e:
        raise EntryFormError(f"Invalid building data: {e}")

    return building.model_dump(by_alias=True, exclude_none=True, mode="json")


class EntryForm:
    """Form state plus the upload and submit actions."""

    def __init__(self, store: Store, client: MapApiClient):
        self.store = store
        self.client = client
        self.data = EntryFormData()

    @property
    def can_submit(self) -> bool:
        return bool(self.data.photo_path) and self.store.state.submit_status != SAVING_STATUS

    def update(self, **fields):
        """Change form fields; any edit clears the last status message."""
        self.store.dispatch(ClearSubmitStatus())
        for key, value in fields.items():
            if not hasattr(self.data, key):
                raise AttributeError(f"Unknown form field: {key}")
            if key == "category":
                value = Category(value)
            setattr(self.data, key, value)

    def load_collected(self, ring: list[list[float]]):
        """Use coordinates gathered with right-clicks as the footprint."""
        if ring:
            self.update(coordinates=format_coordinates(ring))

    async def upload(self, filename: str, content: bytes,
                     content_type: str = "application/octet-stream") -> Optional[str]:
        self.store.dispatch(ClearSubmitStatus())
        self.store.dispatch(SetLoading(True))
        try:
            path = await self.client.upload_photo(filename, content, content_type)
        except ApiError as e:
            self.store.dispatch(SetLoading(False))
            self.store.dispatch(SetSubmitStatus(f"Error: Error uploading file: {e.message}"))
            return None

        self.data.photo_path = path
        self.store.dispatch(SetLoading(False))
        self.store.dispatch(SetSubmitStatus(UPLOADED_MESSAGE))
        return path

    async def submit(self) -> Optional[str]:
        """Validate and save. Returns the new building id, or None."""
        self.store.dispatch(ClearSubmitStatus())
        try:
            payload = build_payload(self.data)
        except EntryFormError as e:
            self.store.dispatch(SetSubmitStatus(f"Error: {e}"))
            return None

        building_id = await save_new_building(self.store, self.client, payload)
        if building_id is not None:
            self.reset()
        return building_id

    def reset(self):
        self.data = EntryFormData()
