"""Pytest fixtures configuring an isolated database and application.

Each test that needs persistence gets a fresh application bound to a private
in-memory SQLite database; the schema is created before the test and dropped
afterwards so data never leaks between cases.
"""

from __future__ import annotations

import os

import pytest
from sqlalchemy.pool import StaticPool

from travel_api.core.config import TestingConfig
from travel_api.core.extensions import db as _db
from travel_api.factory import create_app
from travel_api.services._shared.ports.clock import FrozenClock


class TestConfig(TestingConfig):
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - One in-memory SQLite database shared by every connection of the pool,
      so worker threads and the test body see the same data.
    - Proxy middleware disabled; the test client sends no forwarded headers.
    """

    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {
        **TestingConfig.SQLALCHEMY_ENGINE_OPTIONS,
        "poolclass": StaticPool,
        "connect_args": {"check_same_thread": False},
    }
    USE_PROXYFIX = False
    LOG_LEVEL = "WARNING"


@pytest.fixture()
def app():
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application with :class:`TestConfig` applied (no context pushed).
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestConfig, instance_relative_config=False)
    return app


@pytest.fixture()
def db(app):
    """Create database tables for one test.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.
    """
    with app.app_context():
        _db.create_all()
    yield _db
    with app.app_context():
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def session(app, db):
    """Push an app context and return its scoped session.

    Repositories and units of work built without an explicit session use the
    same one. HTTP tests avoid this fixture so every request gets its own
    application context (and its own ``g``).
    """
    with app.app_context():
        yield db.session
        db.session.rollback()


@pytest.fixture()
def client(app, db):
    """Flask test client with the schema in place."""
    return app.test_client()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


@pytest.fixture()
def clock():
    """Manually driven UTC clock."""
    return FrozenClock()


# -- Hook up Factory Boy to the SQLAlchemy session ----------------------------
@pytest.fixture(autouse=True)
def _factories_session(request):
    """Wire Factory Boy's session helper when the test uses the database."""
    from tests.factories import SQLAlchemySession

    if "session" in request.fixturenames:
        SQLAlchemySession.set(request.getfixturevalue("session"))
    yield
    SQLAlchemySession.set(None)
