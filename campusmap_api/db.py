"""
Database connection management for the API.
"""

from contextlib import contextmanager
from typing import Generator

from loguru import logger
from psycopg2.extras import RealDictCursor
from psycopg2.pool import ThreadedConnectionPool

from .config import Settings, get_settings

# Connection pool
_pool: ThreadedConnectionPool | None = None

SCHEMA_SQL = """
CREATE EXTENSION IF NOT EXISTS postgis;
CREATE EXTENSION IF NOT EXISTS pgcrypto;

CREATE TABLE IF NOT EXISTS buildings (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    name TEXT NOT NULL,
    description TEXT,
    category TEXT NOT NULL DEFAULT 'Building',
    height DOUBLE PRECISION,
    capacity INTEGER,
    hours TEXT,
    footprint_geojson JSONB NOT NULL,
    footprint GEOMETRY(Polygon, 4326) NOT NULL,
    viewpoint_geojson JSONB,
    viewpoint GEOMETRY(Point, 4326),
    photo_url TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS buildings_footprint_gist ON buildings USING GIST (footprint);
CREATE INDEX IF NOT EXISTS buildings_viewpoint_gist ON buildings USING GIST (viewpoint);
"""


def init_db(settings: Settings | None = None):
    """Initialize the connection pool.

    Raises ConfigError when no connection string is configured.
    """
    global _pool
    if _pool is None:
        settings = settings or get_settings()
        dsn = settings.require_database_url()
        _pool = ThreadedConnectionPool(
            minconn=settings.db_pool_min,
            maxconn=settings.db_pool_max,
            dsn=dsn
        )
        logger.info(
            "Database pool initialized ({}-{} connections)",
            settings.db_pool_min, settings.db_pool_max
        )


def close_db():
    """Close the connection pool."""
    global _pool
    if _pool is not None:
        _pool.closeall()
        _pool = None
        logger.info("Database pool closed")


def init_schema():
    """Create the buildings table and its spatial indexes if missing."""
    with get_db() as conn:
        cur = conn.cursor()
        cur.execute(SCHEMA_SQL)
        cur.close()
    logger.info("Database schema ready")


def get_connection():
    """Borrow a connection, creating the pool on first use."""
    if _pool is None:
        init_db()
    return _pool.getconn()


def release_connection(conn):
    """Hand a borrowed connection back to the pool."""
    if _pool is not None:
        _pool.putconn(conn)


@contextmanager
def get_db() -> Generator:
    """Context manager for database connections."""
    conn = get_connection()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        release_connection(conn)


def get_cursor(conn):
    """Cursor returning rows as dictionaries keyed by column name."""
    return conn.cursor(cursor_factory=RealDictCursor)

