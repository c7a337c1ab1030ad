"""WSGI entry point: ``gunicorn -c gunicorn.conf.py wsgi:app``."""

from __future__ import annotations

from accounts import create_app

app = create_app()
