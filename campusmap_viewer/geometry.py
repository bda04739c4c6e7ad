"""Coordinate helpers for footprints and marker placement."""

from typing import Optional, Sequence

Position = list[float]

ORIGIN: Position = [0.0, 0.0]


def ring_centroid(ring: Sequence[Sequence[float]]) -> Optional[Position]:
    """Arithmetic mean of the ring's positions, or None for an empty ring.

    Every stored position counts, so the closing point of a closed ring
    weighs in twice.
    """
    vertices = list(ring)
    if not vertices:
        return None
    lng = sum(p[0] for p in vertices) / len(vertices)
    lat = sum(p[1] for p in vertices) / len(vertices)
    return [lng, lat]


def polygon_centroid(geometry: Optional[dict]) -> Optional[Position]:
    """Centroid of a GeoJSON Polygon's outer ring."""
    if not geometry or geometry.get("type") != "Polygon":
        return None
    rings = geometry.get("coordinates") or []
    if not rings:
        return None
    return ring_centroid(rings[0])


def representative_point(feature: dict) -> Position:
    """Anchor point for a building's photo marker.

    The stored viewpoint wins, then the footprint centroid, then the origin.
    """
    properties = feature.get("properties") or {}
    viewpoint = properties.get("viewpoint")
    if isinstance(viewpoint, dict) and viewpoint.get("coordinates"):
        return list(viewpoint["coordinates"][:2])

    centroid = polygon_centroid(feature.get("geometry"))
    if centroid is not None:
        return centroid

    return list(ORIGIN)


def close_ring(ring: list[Position]) -> list[Position]:
    """Return the ring with its first point repeated at the end if open."""
    if not ring:
        return []
    closed = [list(p) for p in ring]
    if closed[0] != closed[-1]:
        closed.append(list(closed[0]))
    return closed


def feature_collection(features: Optional[list] = None) -> dict:
    """A GeoJSON FeatureCollection."""
    return {"type": "FeatureCollection", "features": list(features or [])}


def point_feature(coordinates: Sequence[float], properties: Optional[dict] = None) -> dict:
    """A GeoJSON Point feature."""
    return {
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": list(coordinates)},
        "properties": dict(properties or {}),
    }
