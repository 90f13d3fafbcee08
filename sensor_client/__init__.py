from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from flask import Flask

from sensor_client.blueprints.api.sensors import sensors_api
from sensor_client.config import AppConfig, load_config, setup_logging

if TYPE_CHECKING:
    from sensor_client.services.container import ServiceContainer

__version__ = "1.0.0"


def create_app(
    config: AppConfig | None = None,
    *,
    container: "ServiceContainer | None" = None,
    config_overrides: dict[str, Any] | None = None,
) -> Flask:
    """Build the JSON API around a service container.

    When no container is given one is built from ``config`` (or the
    environment); the caller owns its shutdown either way.
    """
    if config is None:
        config = container.config if container is not None else load_config()
    if config_overrides:
        for key, value in config_overrides.items():
            setattr(config, key, value)

    if container is None:
        setup_logging(debug=config.DEBUG, log_path=config.log_path)
        from sensor_client.services.container import ServiceContainer

        container = ServiceContainer.build(config)

    flask_app = Flask(__name__)
    flask_app.config.update(config.as_flask_config())
    flask_app.config["CONTAINER"] = container
    # Request threads open their own connections; close them on teardown.
    container.database.init_app(flask_app)
    flask_app.register_blueprint(sensors_api, url_prefix="/api/sensors")

    logging.getLogger(__name__).info("API ready on /api/sensors")
    return flask_app
