"""
Map interaction layer.

``MapInteraction`` owns the map surface, keeps its sources and layers in
step with the state store and the transient UI state, and turns pointer
input into state transitions:

- primary press on a building or photo marker selects it and moves the camera
- primary press on empty space clears the selection and any route
- secondary press on a photo marker opens the 360 viewer
- secondary press anywhere else collects a coordinate for polygon authoring

Layer changes are only applied after the surface reports it is ready.
Anything that changes before then is applied in one pass on ``on_ready``.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Optional, Sequence

from loguru import logger

from campusmap_api.models.category import ALL, FILTER_OPTIONS, Category

from .client import MapApiClient
from .geometry import polygon_centroid
from .layers import (
    BUILDING_LAYER_ID,
    FEATURE_LAYERS,
    PHOTO_MARKER_LAYER_ID,
    LayerReconciler,
    MapSurface,
    Scene,
    campus_scene,
)
from .state import MapState, Store, cancel_route, request_route

MAX_LOGGED_CLICKS = 1
MAX_COLLECTED_POINTS = 155

FOCUS_ZOOM = 16
FOCUS_PITCH = 60
ROUTE_ZOOM = 16


class PointerButton(IntEnum):
    PRIMARY = 0
    AUXILIARY = 1
    SECONDARY = 2


BUTTON_LABELS = {PointerButton.PRIMARY: "LEFT", PointerButton.SECONDARY: "RIGHT"}


@dataclass(frozen=True)
class CameraPose:
    lng: float
    lat: float
    zoom: float
    pitch: float
    bearing: float = 0.0


DEFAULT_POSE = CameraPose(lng=83.23, lat=17.72, zoom=14, pitch=65, bearing=0.0)


@dataclass(frozen=True)
class RenderedFeature:
    """A feature under the pointer, as reported by the rendering surface."""
    layer_id: str
    geometry: dict
    properties: dict


@dataclass(frozen=True)
class PointerEvent:
    """A pointer press at a map position."""
    lng: float
    lat: float
    button: int = PointerButton.PRIMARY
    features: tuple[RenderedFeature, ...] = ()

    def features_in(self, layer_ids: Iterable[str]) -> list[RenderedFeature]:
        wanted = set(layer_ids)
        return [f for f in self.features if f.layer_id in wanted]


@dataclass(frozen=True)
class ClickRecord:
    lng: float
    lat: float
    button: str


@dataclass(frozen=True)
class SelectedFeature:
    """A building picked on the map plus the point the panel is anchored to."""
    id: Optional[str]
    name: Optional[str]
    category: Optional[str]
    photo_url: Optional[str]
    center: tuple[float, float]

    @classmethod
    def from_feature(cls, feature: RenderedFeature, center: Sequence[float]) -> "SelectedFeature":
        properties = feature.properties or {}
        return cls(
            id=properties.get("id"),
            name=properties.get("name"),
            category=properties.get("category"),
            photo_url=properties.get("photoURL") or None,
            center=(center[0], center[1]),
        )


class MapInteraction:
    """Binds building data to a map surface and handles pointer input."""

    def __init__(self, store: Store, client: Optional[MapApiClient] = None):
        self.store = store
        self.client = client
        self.surface: Optional[MapSurface] = None
        self.ready = False
        self._reconciler = LayerReconciler()
        self._pending = False
        self._batch_depth = 0

        self.selected: Optional[SelectedFeature] = None
        self.photo_url: Optional[str] = None
        self.category: str = ALL
        self.route_points: tuple[tuple[float, float], ...] = ()
        self.clicks: tuple[ClickRecord, ...] = ()
        self.collected: tuple[tuple[float, float], ...] = ()
        self.collection_open = False
        self.map_center = (DEFAULT_POSE.lng, DEFAULT_POSE.lat)

        self._unsubscribe = store.subscribe(self._on_state_change)

    # --- Lifecycle ---

    def attach(self, surface: MapSurface) -> bool:
        """Bind a surface once building data is available.

        A live surface is never replaced; returns False if one is attached
        already or there is nothing to draw yet.
        """
        if self.surface is not None:
            logger.debug("Map surface already attached, ignoring")
            return False
        if self.store.state.buildings is None:
            return False
        self.surface = surface
        self.ready = False
        self._reconciler.reset()
        self._pending = True
        return True

    def on_ready(self) -> list:
        """Surface finished loading its style: apply everything deferred."""
        if self.surface is None:
            return []
        self.ready = True
        return self._sync()

    def detach(self):
        self.surface = None
        self.ready = False
        self._reconciler.reset()

    def close(self):
        self.detach()
        self._unsubscribe()

    # --- Rendering ---

    def desired_scene(self) -> Scene:
        state = self.store.state
        return campus_scene(
            state.buildings,
            route=state.route,
            category=self.category,
            route_points=self.route_points,
            clicked_points=[(c.lng, c.lat) for c in self.clicks],
            collected_points=self.collected,
        )

    @contextmanager
    def _batch(self):
        """Group several changes into a single reconciliation."""
        self._batch_depth += 1
        try:
            yield
        finally:
            self._batch_depth -= 1
        if self._batch_depth == 0:
            self._sync()

    def _sync(self) -> list:
        if self._batch_depth:
            return []
        if self.surface is None or not self.ready:
            self._pending = True
            return []
        ops = self._reconciler.reconcile(self.surface, self.desired_scene())
        self._pending = False
        return ops

    @property
    def has_pending_changes(self) -> bool:
        return self._pending

    def _on_state_change(self, state: MapState, previous: MapState):
        if state.buildings != previous.buildings or state.route != previous.route:
            self._sync()

    def _fly_to(self, center: Sequence[float], zoom: Optional[float] = None,
                pitch: Optional[float] = None, bearing: Optional[float] = None):
        if self.surface is not None:
            self.surface.fly_to([center[0], center[1]], zoom=zoom, pitch=pitch, bearing=bearing)

    # --- Pointer input ---

    def handle_press(self, event: PointerEvent):
        """Dispatch a pointer press to the selection or collection logic."""
        with self._batch():
            self._log_click(event)
            if event.button == PointerButton.PRIMARY:
                self._primary_press(event)
            elif event.button == PointerButton.SECONDARY:
                self._secondary_press(event)

    def handle_move(self, center: Sequence[float]):
        self.map_center = (round(center[0], 4), round(center[1], 4))

    def _log_click(self, event: PointerEvent):
        label = BUTTON_LABELS.get(event.button, "OTHER")
        record = ClickRecord(round(event.lng, 4), round(event.lat, 4), label)
        self.clicks = ((record,) + self.clicks)[:MAX_LOGGED_CLICKS]

    def _primary_press(self, event: PointerEvent):
        features = event.features_in(FEATURE_LAYERS)
        if not features:
            self.selected = None
            self.photo_url = None
            self.route_points = ()
            cancel_route(self.store)
            return

        feature = features[0]
        if feature.layer_id == BUILDING_LAYER_ID:
            center = polygon_centroid(feature.geometry) or [event.lng, event.lat]
        else:
            center = _marker_position(feature) or [event.lng, event.lat]

        self.selected = SelectedFeature.from_feature(feature, center)
        if feature.layer_id == PHOTO_MARKER_LAYER_ID and self.selected.photo_url:
            self.photo_url = self.selected.photo_url
        self._fly_to(center, zoom=FOCUS_ZOOM, pitch=FOCUS_PITCH)

    def _secondary_press(self, event: PointerEvent):
        markers = [
            f for f in event.features_in([PHOTO_MARKER_LAYER_ID])
            if (f.properties or {}).get("photoURL")
        ]
        if markers:
            marker = markers[0]
            center = _marker_position(marker) or [event.lng, event.lat]
            self.selected = SelectedFeature.from_feature(marker, [event.lng, event.lat])
            self.photo_url = self.selected.photo_url
            self.collected = ()
            self.collection_open = False
            self._fly_to(center, zoom=FOCUS_ZOOM, pitch=FOCUS_PITCH)
            return

        if len(self.collected) >= MAX_COLLECTED_POINTS:
            logger.debug(f"Max {MAX_COLLECTED_POINTS} coordinates collected")
        else:
            self.collected = self.collected + ((round(event.lng, 6), round(event.lat, 6)),)

        self.route_points = ()
        cancel_route(self.store)

    # --- Commands ---

    def set_category(self, category):
        """Filter extrusions and photo markers to one category, or 'All'."""
        value = category.value if isinstance(category, Category) else category
        if value not in FILTER_OPTIONS:
            raise ValueError(f"Unknown category filter: {value!r}")
        self.category = value
        self._sync()

    def reset_view(self):
        """Return to the default camera pose and clear all transient state."""
        with self._batch():
            self._fly_to(
                [DEFAULT_POSE.lng, DEFAULT_POSE.lat],
                zoom=DEFAULT_POSE.zoom,
                pitch=DEFAULT_POSE.pitch,
                bearing=DEFAULT_POSE.bearing,
            )
            self.route_points = ()
            self.collected = ()
            self.clicks = ()
            self.selected = None
            self.photo_url = None
            self.collection_open = False
            self.category = ALL
            cancel_route(self.store)

    def clear_route(self):
        """Remove route markers and the route overlay."""
        with self._batch():
            self.route_points = ()
            cancel_route(self.store)

    def clear_selection(self):
        """Close the info panel and any open photo."""
        self.selected = None
        self.photo_url = None

    def open_photo_viewer(self, photo_url: Optional[str] = None) -> bool:
        """Open the 360 viewer for the given photo or the selected building's."""
        url = photo_url or (self.selected.photo_url if self.selected else None)
        if not url:
            return False
        self.photo_url = url
        return True

    def close_photo_viewer(self):
        self.photo_url = None

    def toggle_collection_panel(self) -> bool:
        self.collection_open = not self.collection_open
        return self.collection_open

    def clear_collected_coordinates(self):
        with self._batch():
            if not self.collected:
                self.collection_open = False
            self.collected = ()

    def collected_ring(self) -> list[list[float]]:
        """Collected coordinates as an (open) ring for the entry form."""
        return [[lng, lat] for lng, lat in self.collected]

    async def navigate_to(self, end: Sequence[float]) -> bool:
        """Route from the current map center to ``end``."""
        if self.surface is None or self.client is None:
            return False
        center = self.surface.get_center()
        start = (center[0], center[1])
        with self._batch():
            self.route_points = (start, (end[0], end[1]))
        ok = await request_route(self.store, self.client, start, end)
        if ok:
            self._fly_to(start, zoom=ROUTE_ZOOM)
        return ok


def _marker_position(feature: RenderedFeature) -> Optional[list[float]]:
    geometry = feature.geometry or {}
    coordinates = geometry.get("coordinates")
    if geometry.get("type") == "Point" and coordinates:
        return [coordinates[0], coordinates[1]]
    return None
