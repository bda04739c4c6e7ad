"""
Foot routing through the public OSRM service.

The gateway is a stateless passthrough: it forwards start/end coordinates
and hands back the first candidate path geometry.
"""

import httpx
from loguru import logger

from .config import get_settings
from .models.route import RouteRequest


class RouteNotFoundError(LookupError):
    """The routing service found no path between the points."""


class RoutingServiceError(RuntimeError):
    """The routing service could not be reached or answered garbage."""


class RoutingGateway:
    """Client for the OSRM foot profile."""

    def __init__(self, base_url: str, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def route_url(self, request: RouteRequest) -> str:
        return (
            f"{self.base_url}/route/v1/foot/"
            f"{request.start_lng},{request.start_lat};{request.end_lng},{request.end_lat}"
        )

    async def route(self, request: RouteRequest) -> dict:
        """Return the first candidate route geometry (GeoJSON LineString)."""
        url = self.route_url(request)
        params = {"geometries": "geojson", "overview": "full"}

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                resp = await client.get(url, params=params)
            except httpx.HTTPError as e:
                logger.warning(f"Routing request failed: {e}")
                raise RoutingServiceError(str(e)) from e

        try:
            data = resp.json()
        except ValueError as e:
            logger.warning(f"Routing service returned non-JSON body (status {resp.status_code})")
            raise RoutingServiceError("Malformed routing response") from e

        if not isinstance(data, dict):
            raise RoutingServiceError("Malformed routing response")

        # OSRM reports unreachable destinations with a NoRoute code
        if data.get("code") == "NoRoute":
            raise RouteNotFoundError("No route between the points")

        if resp.status_code >= 400:
            logger.warning(
                f"Routing service error {resp.status_code}: {data.get('code')} {data.get('message')}"
            )
            raise RoutingServiceError(f"Routing service returned {resp.status_code}")

        routes = data.get("routes") or []
        if not routes:
            raise RouteNotFoundError("No route between the points")

        geometry = routes[0].get("geometry")
        if not isinstance(geometry, dict) or "coordinates" not in geometry:
            raise RoutingServiceError("Route candidate has no geometry")

        return geometry


def get_routing_gateway() -> RoutingGateway:
    """FastAPI dependency returning a gateway built from settings."""
    settings = get_settings()
    return RoutingGateway(settings.routing_base_url, timeout=settings.routing_timeout)
