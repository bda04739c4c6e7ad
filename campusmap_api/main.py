"""
Campus Map API

FastAPI backend for the campus map viewer.
Provides endpoints for building data, foot routing and 360 image uploads.

Run with:
    campusmap-api
or
    uvicorn campusmap_api.main:app --reload --host 0.0.0.0 --port 5005
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger

from .config import get_settings
from .db import init_db, init_schema, close_db
from .routers import buildings, routes, uploads
from .routers.routes import ROUTING_SERVICE_ERROR
from .routers.uploads import UPLOAD_URL_PREFIX
from .store import BuildingStore, StoreError, get_store

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    # Startup fails here when DATABASE_URL is missing
    init_db(settings)
    init_schema()
    settings.upload_dir.mkdir(parents=True, exist_ok=True)
    yield
    # Shutdown
    close_db()


app = FastAPI(
    title="Campus Map API",
    description="API for campus buildings, foot routing and 360 photos",
    version="1.0.0",
    lifespan=lifespan
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _field_name(loc) -> str:
    parts = [str(part) for part in loc]
    if parts and parts[0] in ("body", "query", "path"):
        parts = parts[1:]
    return ".".join(parts)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Report schema violations as 400 with field level messages.

    Bad coordinates on the route endpoint are reported as a routing
    failure, the way the routing service itself rejects them.
    """
    errors = [
        {"field": _field_name(error.get("loc", ())), "message": error.get("msg", "")}
        for error in exc.errors()
    ]
    summary = "; ".join(
        f"{error['field']}: {error['message']}" if error["field"] else error["message"]
        for error in errors
    )
    logger.info("Rejected {} {}: {}", request.method, request.url.path, summary)
    if request.url.path == app.url_path_for("compute_route"):
        return JSONResponse(status_code=500, content={"detail": ROUTING_SERVICE_ERROR})
    return JSONResponse(
        status_code=400,
        content={"detail": f"Validation Error: {summary}", "errors": errors}
    )


# Include routers
app.include_router(buildings.router, prefix="/api/map", tags=["buildings"])
app.include_router(routes.router, prefix="/api/map", tags=["routing"])
app.include_router(uploads.router, prefix="/api/map", tags=["uploads"])

# Serve uploaded images as static files
app.mount(
    UPLOAD_URL_PREFIX,
    StaticFiles(directory=str(settings.upload_dir), check_dir=False),
    name="uploads"
)


@app.get("/")
async def root():
    """API root endpoint."""
    return {
        "name": "Campus Map API",
        "version": "1.0.0",
        "docs": "/docs",
        "endpoints": {
            "buildings": "/api/map/buildings",
            "route": "/api/map/route",
            "upload": "/api/map/upload",
            "new": "/api/map/new"
        }
    }


@app.get("/health")
def health(store: BuildingStore = Depends(get_store)):
    """Health check endpoint."""
    try:
        store.ping()
        return {"status": "healthy", "database": "connected"}
    except StoreError as e:
        return {"status": "unhealthy", "database": str(e)}


def run():
    """Console entry point: serve the API on the configured port."""
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
