"""
Client state store.

``MapState`` is an immutable snapshot. Actions are small frozen dataclasses
and ``reduce`` is a pure function from (snapshot, action) to a new snapshot.
``Store`` holds the current snapshot, applies actions and notifies
subscribers.

Async operations (fetching buildings, saving a building, requesting a route)
take a request token per kind. A response that arrives after a newer
request of the same kind was started is dropped, so a slow response never
overwrites fresher state.
"""

from dataclasses import dataclass, replace
from typing import Callable, Optional, Sequence

from loguru import logger

from .client import ApiError, MapApiClient

FETCH_ERROR = "Failed to load map data. Check the API server and database connection."
ROUTE_ERROR = "Routing failed. Check routing service connection."
SAVING_STATUS = "Saving..."
SAVED_STATUS = "Data saved and map refreshing!"


@dataclass(frozen=True)
class MapState:
    """Snapshot of server-derived client state."""
    buildings: Optional[dict] = None
    route: Optional[dict] = None
    loading: bool = False
    error: Optional[str] = None
    submit_status: Optional[str] = None


# --- Actions ---

@dataclass(frozen=True)
class SetRoute:
    route: Optional[dict]


@dataclass(frozen=True)
class ClearRoute:
    pass


@dataclass(frozen=True)
class SetError:
    message: str


@dataclass(frozen=True)
class SetLoading:
    loading: bool


@dataclass(frozen=True)
class SetSubmitStatus:
    status: Optional[str]


@dataclass(frozen=True)
class ClearSubmitStatus:
    pass


@dataclass(frozen=True)
class BuildingsRequested:
    pass


@dataclass(frozen=True)
class BuildingsLoaded:
    buildings: dict


@dataclass(frozen=True)
class BuildingsFailed:
    message: str


@dataclass(frozen=True)
class SaveRequested:
    pass


@dataclass(frozen=True)
class SaveSucceeded:
    message: Optional[str] = None


@dataclass(frozen=True)
class SaveFailed:
    message: str


# --- Reducer ---

_REDUCERS: dict[type, Callable] = {
    SetRoute: lambda s, a: replace(s, route=a.route),
    ClearRoute: lambda s, a: replace(s, route=None),
    SetError: lambda s, a: replace(s, error=a.message, loading=False),
    SetLoading: lambda s, a: replace(s, loading=a.loading),
    SetSubmitStatus: lambda s, a: replace(s, submit_status=a.status),
    ClearSubmitStatus: lambda s, a: replace(s, submit_status=None),
    BuildingsRequested: lambda s, a: replace(s, loading=True, error=None),
    BuildingsLoaded: lambda s, a: replace(s, loading=False, buildings=a.buildings),
    BuildingsFailed: lambda s, a: replace(s, loading=False, error=a.message),
    SaveRequested: lambda s, a: replace(s, submit_status=SAVING_STATUS),
    SaveSucceeded: lambda s, a: replace(s, submit_status=a.message or SAVED_STATUS),
    SaveFailed: lambda s, a: replace(s, submit_status=f"Error: {a.message}"),
}


def reduce(state: MapState, action) -> MapState:
    """Apply an action to a snapshot and return the next snapshot."""
    try:
        handler = _REDUCERS[type(action)]
    except KeyError:
        raise TypeError(f"Unknown action: {action!r}")
    return handler(state, action)


Listener = Callable[[MapState, MapState], None]


class Store:
    """Holds the current MapState and notifies subscribers on change."""

    def __init__(self, state: Optional[MapState] = None):
        self._state = state or MapState()
        self._listeners: list[Listener] = []
        self._tokens: dict[str, int] = {}

    @property
    def state(self) -> MapState:
        return self._state

    def dispatch(self, action) -> MapState:
        previous = self._state
        self._state = reduce(previous, action)
        if self._state != previous:
            for listener in list(self._listeners):
                listener(self._state, previous)
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def begin_request(self, kind: str) -> int:
        """Start a request of the given kind and return its token."""
        token = self._tokens.get(kind, 0) + 1
        self._tokens[kind] = token
        return token

    def is_latest(self, kind: str, token: int) -> bool:
        """True when no newer request of this kind has started."""
        return self._tokens.get(kind) == token


# --- Async operations ---

async def fetch_buildings(store: Store, client: MapApiClient) -> bool:
    """Load all buildings into the store. Returns True on success."""
    token = store.begin_request("buildings")
    store.dispatch(BuildingsRequested())
    try:
        buildings = await client.fetch_buildings()
    except ApiError as e:
        logger.warning(f"Fetching buildings failed: {e.message}")
        if store.is_latest("buildings", token):
            store.dispatch(BuildingsFailed(FETCH_ERROR))
        return False

    if not store.is_latest("buildings", token):
        logger.debug("Dropping stale building response")
        return False
    store.dispatch(BuildingsLoaded(buildings))
    return True


async def save_new_building(store: Store, client: MapApiClient, payload: dict) -> Optional[str]:
    """Save a building, then refresh the building list.

    Returns the new building id, or None when saving failed.
    """
    token = store.begin_request("save")
    store.dispatch(SaveRequested())
    try:
        response = await client.save_building(payload)
    except ApiError as e:
        logger.warning(f"Saving building failed: {e.message}")
        if store.is_latest("save", token):
            store.dispatch(SaveFailed(e.message or "Failed to save building data."))
        return None

    if store.is_latest("save", token):
        store.dispatch(SaveSucceeded(response.get("message")))
    await fetch_buildings(store, client)
    return response.get("id")


async def request_route(
    store: Store,
    client: MapApiClient,
    start: Sequence[float],
    end: Sequence[float]
) -> bool:
    """Replace the current route with a new one between start and end."""
    token = store.begin_request("route")
    store.dispatch(ClearRoute())
    try:
        route = await client.compute_route(start, end)
    except ApiError as e:
        logger.warning(f"Routing failed: {e.message}")
        if store.is_latest("route", token):
            store.dispatch(SetError(ROUTE_ERROR))
        return False

    if not store.is_latest("route", token):
        logger.debug("Dropping stale route response")
        return False
    store.dispatch(SetRoute(route))
    return True


def cancel_route(store: Store) -> None:
    """Clear the route and invalidate any in-flight route request."""
    store.begin_request("route")
    store.dispatch(ClearRoute())
