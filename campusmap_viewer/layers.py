"""
Declarative map layer state.

A ``Scene`` lists the sources and layers the map should have. ``diff_scenes``
turns two scenes into the minimal list of surface operations, and
``LayerReconciler`` applies them to a ``MapSurface`` while remembering what
is already on it. Reconciling the same scene twice issues no operations.

The second half of the module builds the campus scene: building
extrusions, photo markers, the route overlay and the interaction markers.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Sequence

from campusmap_api.models.category import ALL

from .geometry import feature_collection, point_feature, representative_point


class MapSurface(Protocol):
    """Public configuration API of the rendering library."""

    def add_source(self, source_id: str, definition: dict) -> None: ...

    def set_source_data(self, source_id: str, data: dict) -> None: ...

    def remove_source(self, source_id: str) -> None: ...

    def add_layer(self, definition: dict) -> None: ...

    def remove_layer(self, layer_id: str) -> None: ...

    def set_filter(self, layer_id: str, filter: Optional[list]) -> None: ...

    def set_paint_property(self, layer_id: str, name: str, value: Any) -> None: ...

    def set_layout_property(self, layer_id: str, name: str, value: Any) -> None: ...

    def fly_to(self, center: Sequence[float], zoom: Optional[float] = None,
               pitch: Optional[float] = None, bearing: Optional[float] = None) -> None: ...

    def get_center(self) -> Sequence[float]: ...


@dataclass(frozen=True)
class SourceSpec:
    """A GeoJSON source."""
    id: str
    data: dict

    def definition(self) -> dict:
        return {"type": "geojson", "data": self.data}


@dataclass(frozen=True)
class LayerSpec:
    """A style layer drawing one source."""
    id: str
    type: str
    source: str
    paint: dict = field(default_factory=dict)
    layout: dict = field(default_factory=dict)
    filter: Optional[list] = None

    def definition(self) -> dict:
        definition = {
            "id": self.id,
            "type": self.type,
            "source": self.source,
            "paint": dict(self.paint),
            "layout": dict(self.layout),
        }
        if self.filter is not None:
            definition["filter"] = self.filter
        return definition


@dataclass(frozen=True)
class Scene:
    """Desired sources and layers, layers in drawing order."""
    sources: tuple[SourceSpec, ...] = ()
    layers: tuple[LayerSpec, ...] = ()

    def source(self, source_id: str) -> Optional[SourceSpec]:
        return next((s for s in self.sources if s.id == source_id), None)

    def layer(self, layer_id: str) -> Optional[LayerSpec]:
        return next((l for l in self.layers if l.id == layer_id), None)


# --- Surface operations ---

@dataclass(frozen=True)
class AddSource:
    source: SourceSpec

    def apply(self, surface: MapSurface):
        surface.add_source(self.source.id, self.source.definition())


@dataclass(frozen=True)
class SetSourceData:
    source_id: str
    data: dict

    def apply(self, surface: MapSurface):
        surface.set_source_data(self.source_id, self.data)


@dataclass(frozen=True)
class RemoveSource:
    source_id: str

    def apply(self, surface: MapSurface):
        surface.remove_source(self.source_id)


@dataclass(frozen=True)
class AddLayer:
    layer: LayerSpec

    def apply(self, surface: MapSurface):
        surface.add_layer(self.layer.definition())


@dataclass(frozen=True)
class RemoveLayer:
    layer_id: str

    def apply(self, surface: MapSurface):
        surface.remove_layer(self.layer_id)


@dataclass(frozen=True)
class SetFilter:
    layer_id: str
    filter: Optional[list]

    def apply(self, surface: MapSurface):
        surface.set_filter(self.layer_id, self.filter)


@dataclass(frozen=True)
class SetPaintProperty:
    layer_id: str
    name: str
    value: Any

    def apply(self, surface: MapSurface):
        surface.set_paint_property(self.layer_id, self.name, self.value)


@dataclass(frozen=True)
class SetLayoutProperty:
    layer_id: str
    name: str
    value: Any

    def apply(self, surface: MapSurface):
        surface.set_layout_property(self.layer_id, self.name, self.value)


def _property_ops(op_type, layer_id: str, current: dict, desired: dict) -> list:
    ops = []
    for name in desired:
        if current.get(name) != desired[name] or name not in current:
            ops.append(op_type(layer_id, name, desired[name]))
    for name in current:
        if name not in desired:
            ops.append(op_type(layer_id, name, None))
    return ops


def diff_scenes(current: Scene, desired: Scene) -> list:
    """Operations that turn the current scene into the desired one.

    Layers are removed before their sources and sources are added before
    the layers that draw them. A layer whose type or source changed is
    recreated; otherwise only its filter and properties are updated.
    """
    ops: list = []
    current_layers = {layer.id: layer for layer in current.layers}
    desired_layers = {layer.id: layer for layer in desired.layers}
    current_sources = {source.id: source for source in current.sources}
    desired_sources = {source.id: source for source in desired.sources}

    recreate = set()
    for layer in current.layers:
        target = desired_layers.get(layer.id)
        if target is None:
            ops.append(RemoveLayer(layer.id))
        elif (target.type, target.source) != (layer.type, layer.source):
            ops.append(RemoveLayer(layer.id))
            recreate.add(layer.id)

    for source in current.sources:
        if source.id not in desired_sources:
            ops.append(RemoveSource(source.id))

    for source in desired.sources:
        existing = current_sources.get(source.id)
        if existing is None:
            ops.append(AddSource(source))
        elif existing.data != source.data:
            ops.append(SetSourceData(source.id, source.data))

    for layer in desired.layers:
        existing = current_layers.get(layer.id)
        if existing is None or layer.id in recreate:
            ops.append(AddLayer(layer))
            continue
        if existing.filter != layer.filter:
            ops.append(SetFilter(layer.id, layer.filter))
        ops.extend(_property_ops(SetPaintProperty, layer.id, existing.paint, layer.paint))
        ops.extend(_property_ops(SetLayoutProperty, layer.id, existing.layout, layer.layout))

    return ops


class LayerReconciler:
    """Applies scenes to a surface, tracking what is already there."""

    def __init__(self):
        self.applied = Scene()

    def reconcile(self, surface: MapSurface, desired: Scene) -> list:
        """Bring the surface to the desired scene. Returns the operations applied."""
        ops = diff_scenes(self.applied, desired)
        for op in ops:
            op.apply(surface)
        self.applied = desired
        return ops

    def reset(self):
        """Forget the applied scene (e.g. after the surface was destroyed)."""
        self.applied = Scene()


# --- Campus scene ---

BUILDING_SOURCE_ID = "buildings"
BUILDING_LAYER_ID = "buildings-3d"
VIEWPOINT_SOURCE_ID = "viewpoint-source"
PHOTO_MARKER_LAYER_ID = "building-photo-markers"
ROUTE_SOURCE_ID = "route-source"
ROUTE_LAYER_ID = "route-line"
ROUTE_POINT_SOURCE_ID = "route-point-source"
ROUTE_POINT_LAYER_ID = "route-point-layer"
CLICKED_POINTS_SOURCE_ID = "clicked-points-source"
CLICKED_POINTS_LAYER_ID = "clicked-points-layer"
COLLECTED_COORDS_SOURCE_ID = "collected-coords-source"
COLLECTED_COORDS_LAYER_ID = "collected-coords-layer"

FEATURE_LAYERS = (BUILDING_LAYER_ID, PHOTO_MARKER_LAYER_ID)

COLOR_GOLD = "#d4af37"
COLOR_PURPLE = "#9400d3"
COLOR_ROUTE_GREEN = "#047857"
COLOR_ROUTE_END = "#b91c1c"
COLOR_CLICK_GRAY = "#6b7280"

PHOTO_ICON = "camera-icon"


def extrusion_color(category: str) -> str:
    """Gold when showing everything, purple while a filter is active."""
    return COLOR_GOLD if category == ALL else COLOR_PURPLE


def extrusion_filter(category: str) -> Optional[list]:
    if category == ALL:
        return None
    return ["==", ["get", "category"], category]


def photo_marker_filter(category: str) -> list:
    """Markers always need a photo; filtering also requires a category match."""
    has_photo = ["has", "photoURL"]
    if category == ALL:
        return has_photo
    return ["all", has_photo, ["==", ["get", "category"], category]]


def viewpoint_markers(buildings: Optional[dict]) -> dict:
    """One point feature per building at its representative point."""
    features = []
    for feature in (buildings or {}).get("features", []):
        properties = {
            key: value
            for key, value in (feature.get("properties") or {}).items()
            if value is not None
        }
        # An empty photo reference must not match the "has" filter
        if not properties.get("photoURL"):
            properties.pop("photoURL", None)
        features.append(point_feature(representative_point(feature), properties))
    return feature_collection(features)


def route_data(route: Optional[dict]) -> dict:
    """Route overlay data; empty collection when there is no route."""
    if not route:
        return feature_collection()
    if route.get("type") in ("Feature", "FeatureCollection"):
        return route
    return feature_collection([{"type": "Feature", "geometry": route, "properties": {}}])


def route_point_data(points: Sequence[Sequence[float]]) -> dict:
    return feature_collection([
        point_feature(point, {"id": f"route-point-{index}", "index": index})
        for index, point in enumerate(points)
    ])


def point_data(points: Sequence[Sequence[float]]) -> dict:
    return feature_collection([point_feature(point) for point in points])


def campus_scene(
    buildings: Optional[dict],
    route: Optional[dict] = None,
    category: str = ALL,
    route_points: Sequence[Sequence[float]] = (),
    clicked_points: Sequence[Sequence[float]] = (),
    collected_points: Sequence[Sequence[float]] = ()
) -> Scene:
    """The full desired scene for the current data and UI state."""
    sources = (
        SourceSpec(BUILDING_SOURCE_ID, buildings or feature_collection()),
        SourceSpec(VIEWPOINT_SOURCE_ID, viewpoint_markers(buildings)),
        SourceSpec(ROUTE_SOURCE_ID, route_data(route)),
        SourceSpec(ROUTE_POINT_SOURCE_ID, route_point_data(route_points)),
        SourceSpec(CLICKED_POINTS_SOURCE_ID, point_data(clicked_points)),
        SourceSpec(COLLECTED_COORDS_SOURCE_ID, point_data(collected_points)),
    )
    layers = (
        LayerSpec(
            BUILDING_LAYER_ID, "fill-extrusion", BUILDING_SOURCE_ID,
            paint={
                "fill-extrusion-color": extrusion_color(category),
                "fill-extrusion-height": ["coalesce", ["get", "height"], 0],
                "fill-extrusion-base": 0,
                "fill-extrusion-opacity": 1,
            },
            filter=extrusion_filter(category),
        ),
        LayerSpec(
            ROUTE_LAYER_ID, "line", ROUTE_SOURCE_ID,
            paint={"line-color": COLOR_ROUTE_GREEN, "line-width": 6, "line-dasharray": [2, 1]},
            layout={"line-join": "round", "line-cap": "round"},
        ),
        LayerSpec(
            ROUTE_POINT_LAYER_ID, "circle", ROUTE_POINT_SOURCE_ID,
            paint={
                "circle-color": ["match", ["get", "index"], 0, COLOR_ROUTE_GREEN, 1, COLOR_ROUTE_END, "#333"],
                "circle-radius": 10,
                "circle-stroke-width": 2,
                "circle-stroke-color": "#ffffff",
            },
        ),
        LayerSpec(
            CLICKED_POINTS_LAYER_ID, "circle", CLICKED_POINTS_SOURCE_ID,
            paint={
                "circle-color": COLOR_CLICK_GRAY,
                "circle-radius": 4,
                "circle-stroke-width": 1,
                "circle-stroke-color": "#ffffff",
            },
        ),
        LayerSpec(
            COLLECTED_COORDS_LAYER_ID, "circle", COLLECTED_COORDS_SOURCE_ID,
            paint={
                "circle-color": COLOR_GOLD,
                "circle-radius": 7,
                "circle-stroke-width": 2,
                "circle-stroke-color": "#ffffff",
            },
        ),
        LayerSpec(
            PHOTO_MARKER_LAYER_ID, "symbol", VIEWPOINT_SOURCE_ID,
            layout={"icon-image": PHOTO_ICON, "icon-size": 0.12},
            filter=photo_marker_filter(category),
        ),
    )
    return Scene(sources=sources, layers=layers)
