"""
Building store backed by PostGIS.

Footprints and viewpoints are kept twice: the submitted GeoJSON verbatim
(returned by listings) and a PostGIS geometry carrying the spatial index.
"""

import json

import psycopg2
import shapely
from loguru import logger
from shapely.geometry import shape

from .db import get_db, get_cursor
from .models.building import BuildingCreate, BuildingRecord, ExtrusionInfo


class StoreError(RuntimeError):
    """Raised when the store cannot be reached or rejects a statement."""


def _wkb_hex(geometry) -> str:
    """Convert a geometry model into 2D hex WKB for ST_GeomFromWKB.

    Altitudes are dropped; the spatial columns are 2D.
    """
    return shapely.force_2d(shape(geometry.model_dump())).wkb_hex


def _row_to_record(row) -> BuildingRecord:
    extrusion = None
    if row['height'] is not None or row['capacity'] is not None or row['hours'] is not None:
        extrusion = ExtrusionInfo(
            height=row['height'],
            capacity=row['capacity'],
            hours=row['hours']
        )

    return BuildingRecord(
        id=str(row['id']),
        name=row['name'],
        description=row['description'],
        category=row['category'],
        extrusion_info=extrusion,
        footprint=row['footprint_geojson'],
        viewpoint=row['viewpoint_geojson'],
        photo_url=row['photo_url']
    )


class BuildingStore:
    """Find/save access to the buildings table."""

    def list_buildings(self) -> list[BuildingRecord]:
        """Return every stored building in insertion order."""
        try:
            with get_db() as conn:
                cur = get_cursor(conn)
                cur.execute("""
                    SELECT
                        id, name, description, category,
                        height, capacity, hours,
                        footprint_geojson, viewpoint_geojson,
                        photo_url
                    FROM buildings
                    ORDER BY created_at, id
                """)
                rows = cur.fetchall()
                cur.close()
        except psycopg2.Error as e:
            raise StoreError(f"Could not read buildings: {e}") from e

        return [_row_to_record(row) for row in rows]

    def save_building(self, building: BuildingCreate) -> str:
        """Insert a building and return its identifier."""
        extrusion = building.extrusion_info or ExtrusionInfo()
        viewpoint_json = None
        viewpoint_wkb = None
        if building.viewpoint is not None:
            viewpoint_json = json.dumps(building.viewpoint.model_dump())
            viewpoint_wkb = _wkb_hex(building.viewpoint)

        try:
            with get_db() as conn:
                cur = get_cursor(conn)
                cur.execute("""
                    INSERT INTO buildings (
                        name, description, category,
                        height, capacity, hours,
                        footprint_geojson, footprint,
                        viewpoint_geojson, viewpoint,
                        photo_url
                    )
                    VALUES (
                        %s, %s, %s,
                        %s, %s, %s,
                        %s::jsonb, ST_SetSRID(ST_GeomFromWKB(decode(%s, 'hex')), 4326),
                        %s::jsonb,
                        ST_SetSRID(ST_GeomFromWKB(decode(%s, 'hex')), 4326),
                        %s
                    )
                    RETURNING id
                """, (
                    building.name,
                    building.description,
                    building.category.value,
                    extrusion.height,
                    extrusion.capacity,
                    extrusion.hours,
                    json.dumps(building.footprint.model_dump()),
                    _wkb_hex(building.footprint),
                    viewpoint_json,
                    viewpoint_wkb,
                    building.photo_url
                ))
                result = cur.fetchone()
                cur.close()
        except psycopg2.Error as e:
            raise StoreError(f"Could not save building: {e}") from e

        building_id = str(result['id'])
        logger.info("Saved building {} ({})", building_id, building.name)
        return building_id

    def ping(self) -> None:
        """Check that the store answers."""
        try:
            with get_db() as conn:
                cur = conn.cursor()
                cur.execute("SELECT 1")
                cur.close()
        except psycopg2.Error as e:
            raise StoreError(str(e)) from e


def get_store() -> BuildingStore:
    """FastAPI dependency returning the building store."""
    return BuildingStore()
