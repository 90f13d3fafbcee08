"""
Configuration for the Artie sensor client
=========================================
Runtime settings for the sensor lifecycle controller, the data poller and
the optional JSON API. Every value is read from ``ARTIE_CLIENT_*``
environment variables with a sensible default.
Setups the logging configuration as well.
"""

import os
from contextlib import suppress
from dataclasses import dataclass, field
from typing import Any

from sensor_client.domain.exceptions import ConfigurationError


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer.") from None


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be a number.") from None


@dataclass
class AppConfig:
    """Runtime configuration loaded from environment variables."""

    environment: str = field(default_factory=lambda: os.getenv("ARTIE_CLIENT_ENV", "development"))
    database_path: str = field(
        default_factory=lambda: os.getenv("ARTIE_CLIENT_DATABASE_PATH", "database/sensor_client.db")
    )

    # Port allocation: every sensor takes a (service, management) pair,
    # consecutive sensors are spaced ``port_step`` apart.
    min_sensor_port: int = field(default_factory=lambda: _env_int("ARTIE_CLIENT_MIN_SENSOR_PORT", 9000))
    port_step: int = field(default_factory=lambda: _env_int("ARTIE_CLIENT_PORT_STEP", 10))

    # Lifecycle timing
    getdata_rate_ms: int = field(default_factory=lambda: _env_int("ARTIE_CLIENT_GETDATA_RATE_MS", 5000))
    sensor_settle_seconds: float = field(
        default_factory=lambda: _env_float("ARTIE_CLIENT_SENSOR_SETTLE_SECONDS", 5.0)
    )
    shutdown_timeout_seconds: float = field(
        default_factory=lambda: _env_float("ARTIE_CLIENT_SHUTDOWN_TIMEOUT_SECONDS", 30.0)
    )

    # Sensor control surface
    sensor_host: str = field(default_factory=lambda: os.getenv("ARTIE_CLIENT_SENSOR_HOST", "localhost"))
    sensor_context_path: str = field(
        default_factory=lambda: os.getenv("ARTIE_CLIENT_SENSOR_CONTEXT_PATH", "/artie")
    )
    http_timeout_seconds: float = field(
        default_factory=lambda: _env_float("ARTIE_CLIENT_HTTP_TIMEOUT_SECONDS", 10.0)
    )
    http_retries: int = field(default_factory=lambda: _env_int("ARTIE_CLIENT_HTTP_RETRIES", 0))

    # Datasource pushed into every sensor configuration
    datasource_url: str = field(default_factory=lambda: os.getenv("ARTIE_CLIENT_DATASOURCE_URL", ""))
    datasource_driver_class: str = field(
        default_factory=lambda: os.getenv("ARTIE_CLIENT_DATASOURCE_DRIVER_CLASS", "")
    )
    datasource_username: str = field(default_factory=lambda: os.getenv("ARTIE_CLIENT_DATASOURCE_USERNAME", ""))
    datasource_password: str = field(
        default_factory=lambda: os.getenv("ARTIE_CLIENT_DATASOURCE_PASSWORD", ""), repr=False
    )

    eventbus_queue_size: int = field(default_factory=lambda: _env_int("ARTIE_CLIENT_EVENTBUS_QUEUE_SIZE", 1024))
    eventbus_worker_count: int = field(default_factory=lambda: _env_int("ARTIE_CLIENT_EVENTBUS_WORKER_COUNT", 2))

    api_host: str = field(default_factory=lambda: os.getenv("ARTIE_CLIENT_API_HOST", "127.0.0.1"))
    api_port: int = field(default_factory=lambda: _env_int("ARTIE_CLIENT_API_PORT", 8080))

    DEBUG: bool = field(default_factory=lambda: _env_bool("ARTIE_CLIENT_DEBUG", False))
    log_path: str = field(default_factory=lambda: os.getenv("ARTIE_CLIENT_LOG_PATH", "logs/sensor_client.log"))

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not 0 < self.min_sensor_port < 65535:
            raise ConfigurationError(f"min_sensor_port out of range: {self.min_sensor_port}")
        if self.port_step < 2:
            # Each sensor needs two adjacent ports.
            raise ConfigurationError(f"port_step must be at least 2, got {self.port_step}")
        if self.getdata_rate_ms <= 0:
            raise ConfigurationError("getdata_rate_ms must be positive")
        if self.sensor_settle_seconds < 0:
            raise ConfigurationError("sensor_settle_seconds cannot be negative")
        if self.http_timeout_seconds <= 0:
            raise ConfigurationError("http_timeout_seconds must be positive")
        if self.http_retries < 0:
            raise ConfigurationError("http_retries cannot be negative")
        if self.shutdown_timeout_seconds <= 0:
            raise ConfigurationError("shutdown_timeout_seconds must be positive")

    @property
    def poll_interval_seconds(self) -> float:
        return self.getdata_rate_ms / 1000.0

    def datasource_parameters(self) -> dict[str, str]:
        """Configuration keys overwritten in every sensor before it starts."""
        return {
            "DB_URL": self.datasource_url,
            "DB_DRIVER_CLASS": self.datasource_driver_class,
            "DB_USER": self.datasource_username,
            "DB_PASSWD": self.datasource_password,
        }

    def as_flask_config(self) -> dict[str, Any]:
        """Render configuration values for Flask application."""
        return {
            "ENV": self.environment,
            "DATABASE_PATH": self.database_path,
            "DEBUG": self.DEBUG,
            "JSON_SORT_KEYS": False,
        }


def setup_logging(debug: bool = False, log_path: str | None = None) -> None:
    """Setup logging configuration."""
    import logging
    import sys
    from logging.handlers import RotatingFileHandler

    log_level = logging.DEBUG if debug else logging.INFO

    # Root logger
    root = logging.getLogger()
    root.setLevel(log_level)

    # Avoid adding duplicates when called more than once (CLI + API startup)
    has_console = any(getattr(h, "name", "") == "sensor_client_console" for h in root.handlers)
    has_file = any(getattr(h, "name", "") == "sensor_client_file" for h in root.handlers)
    added_handler = False

    stream = sys.stdout
    with suppress(AttributeError, ValueError):
        stream.reconfigure(encoding="utf-8", errors="replace")
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    if not has_console:
        console_handler = logging.StreamHandler(stream=stream)
        console_handler.name = "sensor_client_console"
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)
        added_handler = True

    if not has_file:
        log_path = log_path or "logs/sensor_client.log"
        log_dir = os.path.dirname(log_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.name = "sensor_client_file"
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        added_handler = True

    for handler in root.handlers:
        if getattr(handler, "name", "") in {"sensor_client_console", "sensor_client_file"}:
            handler.setLevel(log_level)

    if added_handler:
        root.info(f"Logging initialized at level: {logging.getLevelName(log_level)}")

    if _env_bool("ARTIE_CLIENT_SILENCE_WERKZEUG", True):
        logging.getLogger("werkzeug").setLevel(logging.WARNING)
    # Every poll tick opens connections; urllib3 debug output drowns the log.
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def load_config() -> AppConfig:
    """Helper for callers to load and validate configuration."""
    return AppConfig()
