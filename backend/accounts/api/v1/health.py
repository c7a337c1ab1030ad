"""Liveness and database health probe."""

from __future__ import annotations

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from accounts.api.deps import json_response, timing
from accounts.core.extensions import db

bp = Blueprint("health", __name__)


@bp.get("/health")
@timing
def healthcheck():
    """Report process liveness and whether the database answers ``SELECT 1``."""

    try:
        db.session.execute(text("SELECT 1"))
        db_status = "ok"
    except SQLAlchemyError:
        current_app.logger.exception("healthcheck.db_error")
        db.session.rollback()
        db_status = "fail"
    return json_response({"status": "ok", "db": db_status})
