"""
Async REST client for the campus map API.

Every failure is turned into an ApiError carrying a human readable message
so callers can put it straight into UI state.
"""

from typing import Optional, Sequence
from urllib.parse import urlsplit

import httpx
from loguru import logger
from pydantic import TypeAdapter, ValidationError

from campusmap_api.models.geometry import Geometry

DEFAULT_API_BASE_URL = "http://localhost:5005/api/map"

_geometry_adapter = TypeAdapter(Geometry)


class ApiError(Exception):
    """A request to the API failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    if isinstance(body, dict):
        detail = body.get("detail") or body.get("msg")
        if isinstance(detail, str):
            return detail
    return f"HTTP {resp.status_code}"


class MapApiClient:
    """Client for the /api/map endpoints."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @property
    def origin(self) -> str:
        """Scheme and host of the API, used to resolve relative file paths."""
        parts = urlsplit(self.base_url)
        return f"{parts.scheme}://{parts.netloc}"

    async def _request(self, method: str, path: str, **kwargs):
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                resp = await client.request(method, f"{self.base_url}{path}", **kwargs)
            except httpx.HTTPError as e:
                logger.warning(f"{method} {path} failed: {e}")
                raise ApiError(f"Network error: {e}") from e

        if resp.status_code >= 400:
            message = _error_message(resp)
            logger.warning(f"{method} {path} returned {resp.status_code}: {message}")
            raise ApiError(message, resp.status_code)

        try:
            return resp.json()
        except ValueError as e:
            raise ApiError(f"Malformed response from {path}", resp.status_code) from e

    async def fetch_buildings(self) -> dict:
        """All buildings as a FeatureCollection."""
        data = await self._request("GET", "/buildings")
        if not isinstance(data, dict) or data.get("type") != "FeatureCollection":
            raise ApiError("Malformed building data")
        return data

    async def compute_route(self, start: Sequence[float], end: Sequence[float]) -> dict:
        """Foot route geometry between two [lng, lat] points."""
        data = await self._request("POST", "/route", json={
            "startLng": start[0], "startLat": start[1],
            "endLng": end[0], "endLat": end[1],
        })
        try:
            geometry = _geometry_adapter.validate_python(data)
        except ValidationError as e:
            raise ApiError("Malformed route geometry") from e
        return geometry.model_dump()

    async def upload_photo(
        self,
        filename: str,
        content: bytes,
        content_type: str = "application/octet-stream"
    ) -> str:
        """Upload a 360 image and return its server relative path."""
        data = await self._request(
            "POST", "/upload",
            files={"360Image": (filename, content, content_type)}
        )
        file_path = data.get("filePath") if isinstance(data, dict) else None
        if not file_path:
            raise ApiError("Upload response did not include a file path")
        return file_path

    async def save_building(self, payload: dict) -> dict:
        """Create a building. Returns the server's {message, id} response."""
        return await self._request("POST", "/new", json=payload)
