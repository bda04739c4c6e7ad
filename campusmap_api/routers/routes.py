"""
Routing API router.

Endpoints:
- POST /api/map/route - Foot route between two points
"""

from fastapi import APIRouter, HTTPException, Depends

from ..models.geometry import LineStringGeometry
from ..models.route import RouteRequest
from ..routing import (
    RoutingGateway,
    RouteNotFoundError,
    RoutingServiceError,
    get_routing_gateway
)

router = APIRouter()

ROUTE_NOT_FOUND = "Route could not be found between the points."
ROUTING_SERVICE_ERROR = "Routing service error - check coordinates or network."


@router.post("/route", response_model=LineStringGeometry)
async def compute_route(
    request: RouteRequest,
    gateway: RoutingGateway = Depends(get_routing_gateway)
):
    """Return the first route candidate between start and end."""
    try:
        geometry = await gateway.route(request)
    except RouteNotFoundError:
        raise HTTPException(404, ROUTE_NOT_FOUND)
    except RoutingServiceError:
        raise HTTPException(500, ROUTING_SERVICE_ERROR)

    return geometry
