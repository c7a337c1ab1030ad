"""Flask extension singletons for the accounts service."""

from __future__ import annotations

from flask import Flask
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData

# Deterministic constraint names so Alembic batch migrations on SQLite can
# find them again (e.g. ``uq_accounts_email``)
NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

db: SQLAlchemy = SQLAlchemy(
    session_options={"autoflush": False},
    metadata=MetaData(naming_convention=NAMING_CONVENTION),
)
migrate = Migrate(render_as_batch=True)


def init_app(app: Flask) -> None:
    """Bind the database and Alembic to ``app``.

    :mod:`accounts.models` is imported first so ``db.metadata`` already
    holds the ``accounts`` table when migrations are autogenerated.
    """
    db.init_app(app)

    from accounts import models as _models  # noqa: F401

    migrate.init_app(app, db)
