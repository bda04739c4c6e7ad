"""
Campus map viewer application.

``CampusMapApp`` wires the client pieces together: it loads buildings and
binds the map surface once they arrive, keeps the photo viewer in step with
the interaction layer's open photo, and toggles the data entry form, which
picks up coordinates collected with right-clicks.
"""

from typing import Optional

from loguru import logger

from .client import MapApiClient
from .entry_form import EntryForm
from .info_panel import InfoPanel
from .interaction import MapInteraction, PointerEvent
from .layers import MapSurface
from .photo_viewer import PanoramaConfig, PhotoViewer, resolve_image_url
from .state import Store, fetch_buildings


class CampusMapApp:
    """Owns the store, API client, map interaction, entry form and photo viewer."""

    def __init__(self, client: Optional[MapApiClient] = None, store: Optional[Store] = None):
        self.client = client or MapApiClient()
        self.store = store or Store()
        self.interaction = MapInteraction(self.store, self.client)
        self.entry_form = EntryForm(self.store, self.client)
        self.photo_viewer = PhotoViewer(self.client.origin)
        self.form_open = False

    # --- Lifecycle ---

    async def start(self, surface: MapSurface) -> bool:
        """Load buildings, then bind the surface. Returns True once bound."""
        if not await fetch_buildings(self.store, self.client):
            return False
        return self.interaction.attach(surface)

    def on_map_ready(self) -> list:
        """The surface finished loading; apply the scene."""
        return self.interaction.on_ready()

    def close(self):
        self.photo_viewer.close()
        self.interaction.close()

    # --- Map and panels ---

    @property
    def info_panel(self) -> Optional[InfoPanel]:
        return InfoPanel.for_selection(self.interaction.selected)

    def handle_press(self, event: PointerEvent) -> Optional[PanoramaConfig]:
        """Forward a pointer press; returns the panorama config if a photo is open."""
        self.interaction.handle_press(event)
        return self._sync_photo_viewer()

    def view_360(self) -> Optional[PanoramaConfig]:
        panel = self.info_panel
        if panel is not None:
            panel.view_360(self.interaction)
        return self._sync_photo_viewer()

    def close_info_panel(self):
        panel = self.info_panel
        if panel is not None:
            panel.cancel(self.interaction)
        self._sync_photo_viewer()

    def close_photo_viewer(self):
        self.interaction.close_photo_viewer()
        self._sync_photo_viewer()

    def reset_view(self):
        self.interaction.reset_view()
        self._sync_photo_viewer()

    def _sync_photo_viewer(self) -> Optional[PanoramaConfig]:
        url = self.interaction.photo_url
        if not url:
            self.photo_viewer.close()
            return None
        current = self.photo_viewer.config
        if current is not None and current.panorama == resolve_image_url(url, self.photo_viewer.api_origin):
            return current
        return self.photo_viewer.open(url)

    # --- Data entry ---

    def toggle_entry_form(self) -> bool:
        """Open or close the data entry form.

        Opening loads any collected coordinates as the footprint.
        """
        self.form_open = not self.form_open
        if self.form_open:
            self.entry_form.load_collected(self.interaction.collected_ring())
        return self.form_open

    async def submit_entry(self) -> Optional[str]:
        """Save the form; collected coordinates are discarded once used."""
        building_id = await self.entry_form.submit()
        if building_id is not None:
            logger.info(f"Building {building_id} saved from the entry form")
            self.interaction.clear_collected_coordinates()
        return building_id
