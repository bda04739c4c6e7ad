"""Shared fixtures: in-memory store, API test client, fake map surface."""

from __future__ import annotations

import copy
import uuid

import pytest
from fastapi.testclient import TestClient

from campusmap_api.main import app
from campusmap_api.models.building import BuildingCreate, BuildingRecord
from campusmap_api.routers.uploads import get_upload_dir
from campusmap_api.store import StoreError, get_store
from campusmap_viewer.client import ApiError


SQUARE_FOOTPRINT = {
    "type": "Polygon",
    "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 1], [0, 0]]],
}


def building_payload(**overrides) -> dict:
    payload = {
        "name": "Library",
        "category": "Building",
        "extrusionInfo": {"height": 12.5, "capacity": 200, "hours": "08:00-20:00"},
        "footprint": copy.deepcopy(SQUARE_FOOTPRINT),
        "photoURL": "/uploads/360Image-abc.jpg",
    }
    payload.update(overrides)
    return payload


class InMemoryBuildingStore:
    """Stands in for the PostGIS store."""

    def __init__(self):
        self.records: list[BuildingRecord] = []
        self.fail = False

    def list_buildings(self) -> list[BuildingRecord]:
        if self.fail:
            raise StoreError("connection refused")
        return list(self.records)

    def save_building(self, building: BuildingCreate) -> str:
        if self.fail:
            raise StoreError("connection refused")
        building_id = str(uuid.uuid4())
        self.records.append(BuildingRecord(id=building_id, **building.model_dump()))
        return building_id

    def ping(self) -> None:
        if self.fail:
            raise StoreError("connection refused")


@pytest.fixture
def memory_store():
    return InMemoryBuildingStore()


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def client(memory_store, upload_dir):
    """API test client wired to the in-memory store and a temp upload dir."""
    app.dependency_overrides[get_store] = lambda: memory_store
    app.dependency_overrides[get_upload_dir] = lambda: upload_dir
    yield TestClient(app)
    app.dependency_overrides.clear()


class RecordingSurface:
    """Fake map surface that records calls and checks they are consistent."""

    def __init__(self, center=(83.23, 17.72)):
        self.calls: list[tuple] = []
        self.sources: dict[str, dict] = {}
        self.layers: dict[str, dict] = {}
        self.layer_order: list[str] = []
        self.camera: list[dict] = []
        self.center = list(center)

    def add_source(self, source_id, definition):
        assert source_id not in self.sources, f"duplicate source {source_id}"
        self.sources[source_id] = copy.deepcopy(definition["data"])
        self.calls.append(("add_source", source_id))

    def set_source_data(self, source_id, data):
        assert source_id in self.sources, f"unknown source {source_id}"
        self.sources[source_id] = copy.deepcopy(data)
        self.calls.append(("set_source_data", source_id))

    def remove_source(self, source_id):
        assert not any(l["source"] == source_id for l in self.layers.values())
        del self.sources[source_id]
        self.calls.append(("remove_source", source_id))

    def add_layer(self, definition):
        assert definition["id"] not in self.layers, f"duplicate layer {definition['id']}"
        assert definition["source"] in self.sources, f"layer before source {definition['source']}"
        self.layers[definition["id"]] = copy.deepcopy(definition)
        self.layer_order.append(definition["id"])
        self.calls.append(("add_layer", definition["id"]))

    def remove_layer(self, layer_id):
        del self.layers[layer_id]
        self.layer_order.remove(layer_id)
        self.calls.append(("remove_layer", layer_id))

    def set_filter(self, layer_id, filter):
        self.layers[layer_id]["filter"] = filter
        self.calls.append(("set_filter", layer_id))

    def set_paint_property(self, layer_id, name, value):
        self.layers[layer_id]["paint"][name] = value
        self.calls.append(("set_paint_property", layer_id, name))

    def set_layout_property(self, layer_id, name, value):
        self.layers[layer_id]["layout"][name] = value
        self.calls.append(("set_layout_property", layer_id, name))

    def fly_to(self, center, zoom=None, pitch=None, bearing=None):
        self.camera.append({"center": list(center), "zoom": zoom, "pitch": pitch, "bearing": bearing})
        self.center = list(center)

    def get_center(self):
        return list(self.center)

    def features(self, source_id):
        return self.sources[source_id]["features"]


@pytest.fixture
def surface():
    return RecordingSurface()


class FakeApiClient:
    """Scripted stand-in for MapApiClient."""

    origin = "http://localhost:5005"

    def __init__(self, buildings=None, route=None):
        self.buildings = buildings if buildings is not None else {"type": "FeatureCollection", "features": []}
        self.route = route
        self.error: ApiError | None = None
        self.saved: list[dict] = []
        self.uploads: list[str] = []
        self.route_calls: list[tuple] = []

    async def fetch_buildings(self):
        if self.error:
            raise self.error
        return self.buildings

    async def compute_route(self, start, end):
        self.route_calls.append((tuple(start), tuple(end)))
        if self.error:
            raise self.error
        return self.route

    async def upload_photo(self, filename, content, content_type="application/octet-stream"):
        if self.error:
            raise self.error
        self.uploads.append(filename)
        return f"/uploads/360Image-{len(self.uploads)}.jpg"

    async def save_building(self, payload):
        if self.error:
            raise self.error
        self.saved.append(payload)
        return {"message": "Building data saved successfully!", "id": f"b-{len(self.saved)}"}


@pytest.fixture
def fake_client():
    return FakeApiClient()
