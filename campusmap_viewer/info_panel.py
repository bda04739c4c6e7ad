"""Info panel contents for the selected building."""

from dataclasses import dataclass
from typing import Optional

from .interaction import MapInteraction, SelectedFeature

DEFAULT_TITLE = "Selected Building"


@dataclass(frozen=True)
class InfoPanel:
    title: str
    category: Optional[str]
    building_id: Optional[str]
    photo_url: Optional[str]

    @classmethod
    def for_selection(cls, selected: Optional[SelectedFeature]) -> Optional["InfoPanel"]:
        if selected is None:
            return None
        return cls(
            title=selected.name or DEFAULT_TITLE,
            category=selected.category,
            building_id=selected.id,
            photo_url=selected.photo_url,
        )

    @property
    def can_view_360(self) -> bool:
        return bool(self.photo_url)

    def view_360(self, interaction: MapInteraction) -> bool:
        """Open the photo viewer; a building without a photo cannot."""
        if not self.can_view_360:
            return False
        return interaction.open_photo_viewer(self.photo_url)

    def cancel(self, interaction: MapInteraction):
        interaction.clear_selection()
