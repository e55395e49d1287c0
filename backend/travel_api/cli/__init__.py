"""Command-line interface registration for the Flask application."""

from __future__ import annotations

import logging

import click
from flask import Flask, current_app
from flask.cli import with_appcontext

from travel_api.core.extensions import db

LOGGER = logging.getLogger(__name__)


def _ensure_non_production() -> None:
    """Abort destructive commands when running in production."""
    if str(current_app.config.get("APP_ENV", "")).lower() == "production":
        raise click.UsageError("'--drop' is restricted to non-production environments.")


@click.command("init-db")
@click.option("--drop", is_flag=True, help="Drop every table before creating the schema.")
@with_appcontext
def init_db_command(drop: bool) -> None:
    """Create the database schema for users and refresh tokens."""
    if drop:
        _ensure_non_production()
        db.drop_all()
        LOGGER.warning("cli.init_db.dropped")
    db.create_all()
    tables = sorted(db.metadata.tables)
    LOGGER.info("cli.init_db.created", extra={"outcome": ",".join(tables)})
    click.echo(f"Created tables: {', '.join(tables)}")


def init_app(app: Flask) -> None:
    """Register application-specific CLI commands.

    Parameters
    ----------
    app:
        Flask application instance whose CLI registry receives ``init-db``.
    """
    app.cli.add_command(init_db_command)
