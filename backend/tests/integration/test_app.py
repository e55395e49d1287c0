"""Tests for the application factory and the CLI."""

from __future__ import annotations

import pytest
from sqlalchemy import inspect

from travel_api.core.config import ConfigError, TestingConfig
from travel_api.core.extensions import db
from travel_api.factory import create_app


def test_factory_refuses_invalid_configuration():
    bad = type("BadConfig", (TestingConfig,), {"ACCESS_TOKEN_TTL_SECONDS": 0})

    with pytest.raises(ConfigError):
        create_app(bad, instance_relative_config=False)


def test_routes_are_mounted_under_version_prefix(app):
    rules = {rule.rule for rule in app.url_map.iter_rules()}

    assert {
        "/api/v1/health",
        "/api/v1/auth/register",
        "/api/v1/auth/login",
        "/api/v1/auth/refresh",
        "/api/v1/auth/logout",
        "/api/v1/auth/me",
    } <= rules


def test_init_db_creates_schema(app):
    result = app.test_cli_runner().invoke(args=["init-db"])

    assert result.exit_code == 0
    assert "refresh_tokens" in result.output
    with app.app_context():
        tables = set(inspect(db.engine).get_table_names())
    assert {"users", "refresh_tokens", "revoked_tokens"} <= tables


def test_init_db_drop_is_blocked_in_production(app):
    app.config["APP_ENV"] = "production"

    result = app.test_cli_runner().invoke(args=["init-db", "--drop"])

    assert result.exit_code != 0
    assert "non-production" in result.output
