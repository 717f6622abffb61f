# buddylifts/db.py
from __future__ import annotations

import sqlite3
from pathlib import Path

from flask import Flask, current_app
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine

db = SQLAlchemy()


@event.listens_for(Engine, "connect")
def _sqlite_foreign_keys(dbapi_connection, _record) -> None:
    """SQLite ignores ON DELETE CASCADE unless FK support is switched on per connection."""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cur = dbapi_connection.cursor()
        cur.execute("PRAGMA foreign_keys = ON;")
        cur.close()


def database_uri(app: Flask) -> str:
    """
    Liefert die SQLAlchemy-URL.
    Explizite SQLALCHEMY_DATABASE_URI gewinnt, sonst SQLite-Datei im instance-Ordner.
    """
    uri = app.config.get("SQLALCHEMY_DATABASE_URI")
    if uri:
        return uri
    db_path = Path(app.config.get("DATABASE") or "buddylifts.db")
    if not db_path.is_absolute():
        db_path = Path(app.instance_path) / db_path
    return "sqlite:///" + str(db_path).replace("\\", "/")


def init_db(app: Flask) -> None:
    app.config["SQLALCHEMY_DATABASE_URI"] = database_uri(app)
    app.config.setdefault("SQLALCHEMY_TRACK_MODIFICATIONS", False)
    db.init_app(app)


def create_tables() -> None:
    """Creates all tables (idempotent)."""
    # Modelle importieren, damit sie in der Metadata registriert sind
    from . import models  # noqa: F401

    db.create_all()
    current_app.logger.info("Database ready at %s", current_app.config["SQLALCHEMY_DATABASE_URI"])
