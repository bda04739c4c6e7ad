"""Tests for the info panel and the 360 photo viewer."""

import pytest

from campusmap_viewer.info_panel import InfoPanel
from campusmap_viewer.interaction import MapInteraction, SelectedFeature
from campusmap_viewer.photo_viewer import PanoramaConfig, PhotoViewer, resolve_image_url
from campusmap_viewer.state import Store

ORIGIN = "http://localhost:5005"


@pytest.mark.unit
class TestResolveImageUrl:

    def test_relative_path(self):
        assert resolve_image_url("/uploads/a.jpg", ORIGIN) == "http://localhost:5005/uploads/a.jpg"

    def test_absolute_url_unchanged(self):
        url = "https://cdn.example.org/pano.jpg"
        assert resolve_image_url(url, ORIGIN) == url


@pytest.mark.unit
class TestPhotoViewer:

    def test_open_and_close(self):
        viewer = PhotoViewer(ORIGIN + "/")
        config = viewer.open("uploads/a.jpg")
        assert viewer.is_open
        assert config.panorama == "http://localhost:5005/uploads/a.jpg"
        viewer.close()
        assert not viewer.is_open

    def test_open_without_photo(self):
        with pytest.raises(ValueError):
            PhotoViewer(ORIGIN).open(None)

    def test_renderer_options(self):
        options = PanoramaConfig(panorama="http://x/p.jpg").to_options()
        assert options["type"] == "equirectangular"
        assert options["autoRotate"] == -2
        assert options["pitch"] == -10
        assert options["hfov"] == 100
        assert options["autoLoad"] is True
        assert options["mouseZoom"] is False


@pytest.mark.unit
class TestInfoPanel:

    def _selected(self, **overrides):
        fields = dict(id="a", name="Library", category="Building",
                      photo_url="/uploads/a.jpg", center=(0.5, 0.5))
        fields.update(overrides)
        return SelectedFeature(**fields)

    def test_nothing_selected(self):
        assert InfoPanel.for_selection(None) is None

    def test_default_title(self):
        panel = InfoPanel.for_selection(self._selected(name=None))
        assert panel.title == "Selected Building"

    def test_view_360(self):
        interaction = MapInteraction(Store())
        panel = InfoPanel.for_selection(self._selected())
        assert panel.view_360(interaction) is True
        assert interaction.photo_url == "/uploads/a.jpg"

    def test_view_360_without_photo(self):
        interaction = MapInteraction(Store())
        panel = InfoPanel.for_selection(self._selected(photo_url=None))
        assert panel.can_view_360 is False
        assert panel.view_360(interaction) is False
        assert interaction.photo_url is None

    def test_cancel_clears_selection(self):
        interaction = MapInteraction(Store())
        interaction.selected = self._selected()
        interaction.photo_url = "/uploads/a.jpg"
        InfoPanel.for_selection(interaction.selected).cancel(interaction)
        assert interaction.selected is None
        assert interaction.photo_url is None
