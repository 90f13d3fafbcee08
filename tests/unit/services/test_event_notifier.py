import logging
from unittest.mock import MagicMock

import pytest

from infrastructure.logging.event_logger import EventLogger
from sensor_client.enums.events import SensorLifecycleAction, SensorLifecycleTopic
from sensor_client.services.event_notifier import EventNotifier
from sensor_client.utils.event_bus import EventBus


@pytest.fixture()
def event_bus():
    bus = EventBus(queue_size=32, worker_count=1)
    yield bus
    bus.shutdown(timeout=1.0)


def test_publish_delivers_lifecycle_payload(event_bus):
    received = []
    event_bus.subscribe(SensorLifecycleTopic.SENSOR_LIFECYCLE, received.append)
    notifier = EventNotifier(event_bus)

    notifier.publish(SensorLifecycleAction.STOP, "temperature", False, error="timeout")
    event_bus.join(timeout=1.0)

    assert len(received) == 1
    payload = received[0]
    assert payload["action"] == "stop"
    assert payload["sensor_name"] == "temperature"
    assert payload["success"] is False
    assert payload["details"] == {"error": "timeout"}
    assert payload["schema_version"] == 1
    assert payload["timestamp"]


def test_publish_never_raises():
    bus = MagicMock()
    bus.publish.side_effect = RuntimeError("bus closed")
    notifier = EventNotifier(bus)

    notifier.publish(SensorLifecycleAction.ADD, "temperature", True)

    bus.publish.assert_called_once()


def test_event_logger_logs_success_at_info(event_bus, caplog):
    logger_ = EventLogger(event_bus)
    notifier = EventNotifier(event_bus)

    with caplog.at_level(logging.INFO, logger="infrastructure.logging.event_logger"):
        notifier.publish(SensorLifecycleAction.START, "temperature", True)
        event_bus.join(timeout=1.0)

    assert "Sensor - Start - temperature - OK" in caplog.text
    logger_.close()


def test_event_logger_logs_failure_at_warning(event_bus, caplog):
    logger_ = EventLogger(event_bus)
    notifier = EventNotifier(event_bus)

    with caplog.at_level(logging.INFO, logger="infrastructure.logging.event_logger"):
        notifier.publish(SensorLifecycleAction.SEND, "humidity", False, error="refused")
        event_bus.join(timeout=1.0)

    records = [r for r in caplog.records if r.name == "infrastructure.logging.event_logger"]
    assert records[0].levelno == logging.WARNING
    assert "Sensor - Send - humidity - FAILED" in records[0].getMessage()
    logger_.close()


def test_event_logger_stops_listening_after_close(event_bus, caplog):
    EventLogger(event_bus).close()
    notifier = EventNotifier(event_bus)

    with caplog.at_level(logging.INFO, logger="infrastructure.logging.event_logger"):
        notifier.publish(SensorLifecycleAction.ADD, "temperature", True)
        event_bus.join(timeout=1.0)

    assert "Sensor - Add" not in caplog.text
