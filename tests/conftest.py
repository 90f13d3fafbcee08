"""
Shared test fixtures for the sensor client test suite.

Provides:
- In-memory SQLite database with the Sensors table created
- Sensor repository wired to the test database
- Mock control client / notifier for the lifecycle service and poller
- A factory building a SensorLifecycleService with sensible test defaults

Usage:
    def test_example(sensor_repo, make_lifecycle):
        service = make_lifecycle()
        service.add("/opt/sensors/temperature-1.0.jar")
"""

from __future__ import annotations

import logging
from unittest.mock import MagicMock, Mock

import pytest

from infrastructure.database.repositories.sensors import SensorRepository
from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler
from sensor_client.domain.sensors.descriptor import SensorDescriptor
from sensor_client.hardware.control_surface import SensorControlClient
from sensor_client.services.port_allocator import PortAllocator
from sensor_client.services.sensor_lifecycle_service import SensorLifecycleService

# ---------------------------------------------------------------------------
# Logging: keep test output quiet
# ---------------------------------------------------------------------------
logging.getLogger("infrastructure").setLevel(logging.WARNING)
logging.getLogger("sensor_client").setLevel(logging.WARNING)

DATASOURCE = {
    "DB_URL": "jdbc:postgresql://db:5432/artie",
    "DB_DRIVER_CLASS": "org.postgresql.Driver",
    "DB_USER": "artie",
    "DB_PASSWD": "secret",
}


# ========================== Database Fixtures ==============================


@pytest.fixture()
def db_handler():
    """In-memory SQLite database with all tables created.

    Each test gets a fresh database.
    """
    handler = SQLiteDatabaseHandler(":memory:")
    handler.create_tables()
    yield handler
    handler.close()


@pytest.fixture()
def sensor_repo(db_handler):
    """SensorRepository backed by the in-memory DB."""
    return SensorRepository(db_handler)


# ========================== Mock Service Fixtures ==========================


@pytest.fixture()
def mock_notifier():
    """Mock EventNotifier that records publish calls."""
    notifier = MagicMock()
    notifier.publish = MagicMock()
    return notifier


@pytest.fixture()
def control_client():
    """Control client double whose sensors all accept every call."""
    client = Mock(spec=SensorControlClient)
    client.get_configuration.return_value = {
        "DB_URL": "jdbc:h2:mem:sensor",
        "DB_DRIVER_CLASS": "org.h2.Driver",
        "DB_USER": "sa",
        "DB_PASSWD": "",
        "SENSOR_RATE": "1000",
    }
    client.send_sensor_data.return_value = "ok"
    return client


@pytest.fixture()
def make_lifecycle(sensor_repo, control_client, mock_notifier):
    """Factory for a SensorLifecycleService wired to the test doubles."""

    def _make(**overrides) -> SensorLifecycleService:
        kwargs = {
            "registry": sensor_repo,
            "control_client": control_client,
            "notifier": mock_notifier,
            "allocator": PortAllocator(sensor_repo, min_port=9000, step=10),
            "datasource": dict(DATASOURCE),
            "settle_seconds": 0,
            "shutdown_timeout_s": 2.0,
        }
        kwargs.update(overrides)
        return SensorLifecycleService(**kwargs)

    return _make


# ========================== Helpers ========================================


def make_descriptor(name: str = "temperature", port: int = 9000, sensor_id: int | None = 1) -> SensorDescriptor:
    return SensorDescriptor(
        executable_path=f"/opt/sensors/{name}-1.0.0.jar",
        sensor_port=port,
        management_port=port + 1,
        sensor_name=name,
        sensor_id=sensor_id,
    )


def published(notifier) -> list[tuple[str, str, bool]]:
    """(action, sensor_name, success) for every publish call, in order."""
    return [(c.args[0].value, c.args[1], c.args[2]) for c in notifier.publish.call_args_list]
