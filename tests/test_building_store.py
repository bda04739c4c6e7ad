"""Tests for the PostGIS building store with the database connection mocked out."""

import json
from contextlib import contextmanager
from unittest.mock import MagicMock

import psycopg2
import pytest
from shapely import wkb

from campusmap_api import store
from campusmap_api.models.building import BuildingCreate
from campusmap_api.models.geometry import PointGeometry, PolygonGeometry
from campusmap_api.store import BuildingStore, StoreError

from conftest import building_payload

FOOTPRINT_3D = {
    "type": "Polygon",
    "coordinates": [[[0, 0, 5], [1, 0, 5], [1, 1, 5], [0, 1, 5], [0, 0, 5]]],
}


@pytest.fixture
def cursor(monkeypatch):
    """Cursor handed out by a fake connection context."""
    cur = MagicMock()
    cur.fetchone.return_value = {"id": "6f1c2a4e-0000-4000-8000-000000000001"}

    @contextmanager
    def fake_db():
        yield MagicMock()

    monkeypatch.setattr(store, "get_db", fake_db)
    monkeypatch.setattr(store, "get_cursor", lambda conn: cur)
    return cur


@pytest.mark.unit
class TestWkb:

    def test_altitude_dropped(self):
        geometry = wkb.loads(store._wkb_hex(PolygonGeometry(**FOOTPRINT_3D)), hex=True)
        assert not geometry.has_z
        assert geometry.geom_type == "Polygon"

    def test_point(self):
        geometry = wkb.loads(store._wkb_hex(PointGeometry(coordinates=[83.2, 17.7, 12])), hex=True)
        assert not geometry.has_z
        assert (geometry.x, geometry.y) == (83.2, 17.7)


@pytest.mark.unit
class TestSaveBuilding:

    def test_footprint_with_altitude(self, cursor):
        building = BuildingCreate(**building_payload(footprint=FOOTPRINT_3D))
        building_id = BuildingStore().save_building(building)
        assert building_id == "6f1c2a4e-0000-4000-8000-000000000001"

        params = cursor.execute.call_args.args[1]
        # Submitted GeoJSON is kept verbatim, the spatial column gets 2D
        assert json.loads(params[6])["coordinates"][0][0] == [0, 0, 5]
        assert not wkb.loads(params[7], hex=True).has_z

    def test_without_viewpoint(self, cursor):
        BuildingStore().save_building(BuildingCreate(**building_payload()))
        params = cursor.execute.call_args.args[1]
        assert params[8] is None
        assert params[9] is None

    def test_database_error(self, cursor):
        cursor.execute.side_effect = psycopg2.OperationalError("server closed the connection")
        with pytest.raises(StoreError):
            BuildingStore().save_building(BuildingCreate(**building_payload()))


@pytest.mark.unit
class TestListBuildings:

    def test_rows_become_records(self, cursor):
        cursor.fetchall.return_value = [{
            "id": "abc",
            "name": "Library",
            "description": None,
            "category": "Gate",
            "height": None,
            "capacity": None,
            "hours": None,
            "footprint_geojson": FOOTPRINT_3D,
            "viewpoint_geojson": None,
            "photo_url": None,
        }]
        records = BuildingStore().list_buildings()
        assert records[0].id == "abc"
        assert records[0].extrusion_info is None
        assert records[0].footprint.coordinates[0][0] == [0, 0, 5]
