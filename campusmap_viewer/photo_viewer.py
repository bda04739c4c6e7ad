"""
360 degree photo viewer.

Resolves a stored image reference to an absolute URL and builds the
configuration handed to the panorama renderer.
"""

from dataclasses import dataclass
from typing import Optional

from loguru import logger


def resolve_image_url(reference: str, api_origin: str) -> str:
    """Absolute references pass through; relative ones get the API origin."""
    if reference.startswith(("http://", "https://")):
        return reference
    return f"{api_origin.rstrip('/')}/{reference.lstrip('/')}"


@dataclass(frozen=True)
class PanoramaConfig:
    panorama: str
    type: str = "equirectangular"
    auto_load: bool = True
    auto_rotate: float = -2
    show_fullscreen_ctrl: bool = False
    pitch: float = -10
    hfov: float = 100
    keyboard_zoom: bool = False
    mouse_zoom: bool = False

    def to_options(self) -> dict:
        """Options in the renderer's own key names."""
        return {
            "type": self.type,
            "panorama": self.panorama,
            "autoLoad": self.auto_load,
            "autoRotate": self.auto_rotate,
            "showFullscreenCtrl": self.show_fullscreen_ctrl,
            "pitch": self.pitch,
            "hfov": self.hfov,
            "keyboardZoom": self.keyboard_zoom,
            "mouseZoom": self.mouse_zoom,
        }


class PhotoViewer:
    """Tracks the open panorama."""

    def __init__(self, api_origin: str):
        self.api_origin = api_origin
        self.config: Optional[PanoramaConfig] = None

    @property
    def is_open(self) -> bool:
        return self.config is not None

    def open(self, reference: Optional[str]) -> PanoramaConfig:
        if not reference:
            raise ValueError("No photo available for this building")
        url = resolve_image_url(reference, self.api_origin)
        logger.debug(f"Opening panorama {url}")
        self.config = PanoramaConfig(panorama=url)
        return self.config

    def close(self):
        self.config = None
