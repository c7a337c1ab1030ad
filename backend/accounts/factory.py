"""Application factory wiring Flask extensions and blueprints."""

from __future__ import annotations

from flask import Flask

from accounts.core.config import BaseConfig, check_secrets, get_config
from accounts.core.logger import configure_logging
from accounts.core.logger import init_app as init_logging


def create_app(config: str | type[BaseConfig] | object | None = None) -> Flask:
    """Build and configure the Flask application.

    :param config: Config object/class, an import path string, or ``None``
        to select one from ``APP_ENV``.
    """

    app = Flask(__name__)
    app.config.from_object(get_config() if config is None else config)
    check_secrets(app.config)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from accounts.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from accounts.core import cors

    cors.init_app(app)

    from accounts.api import init_app as init_api

    init_api(app)

    from accounts.core import errors

    errors.init_app(app)

    return app
