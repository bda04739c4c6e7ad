"""Tests for environment configuration and fatal startup checks."""

from pathlib import Path

import pytest

from campusmap_api import db
from campusmap_api.config import (
    DEFAULT_CORS_ORIGINS,
    ConfigError,
    Settings,
    load_settings,
    parse_origins,
)


@pytest.mark.unit
class TestParseOrigins:

    def test_default_when_unset(self):
        assert parse_origins(None) == DEFAULT_CORS_ORIGINS

    def test_wildcard(self):
        assert parse_origins(" * ") == ["*"]

    def test_comma_list(self):
        assert parse_origins("http://a.test, http://b.test,") == ["http://a.test", "http://b.test"]


@pytest.mark.unit
class TestLoadSettings:

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://map@localhost/campus")
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("CORS_ORIGINS", "*")
        monkeypatch.setenv("UPLOAD_DIR", "/tmp/campus-uploads")
        monkeypatch.setenv("ROUTING_BASE_URL", "http://osrm.local/")
        settings = load_settings()
        assert settings.database_url == "postgresql://map@localhost/campus"
        assert settings.port == 8080
        assert settings.cors_origins == ["*"]
        assert settings.upload_dir == Path("/tmp/campus-uploads")
        assert settings.routing_base_url == "http://osrm.local"

    def test_defaults(self, monkeypatch):
        for name in ("DATABASE_URL", "PORT", "CORS_ORIGINS", "UPLOAD_DIR", "ROUTING_BASE_URL"):
            monkeypatch.delenv(name, raising=False)
        settings = load_settings()
        assert settings.database_url is None
        assert settings.port == 5005

    def test_bad_port(self, monkeypatch):
        monkeypatch.setenv("PORT", "eighty")
        with pytest.raises(ConfigError, match="PORT"):
            load_settings()


@pytest.mark.unit
class TestStartupRequiresStore:

    def test_missing_database_url_is_fatal(self):
        with pytest.raises(ConfigError, match="DATABASE_URL"):
            Settings().require_database_url()

    def test_init_db_refuses_to_start(self, monkeypatch):
        monkeypatch.setattr(db, "_pool", None)
        with pytest.raises(ConfigError):
            db.init_db(Settings(database_url=None))
