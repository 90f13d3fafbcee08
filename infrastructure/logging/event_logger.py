# infrastructure/logging/event_logger.py
import logging

from sensor_client.enums.events import SensorLifecycleAction, SensorLifecycleTopic
from sensor_client.utils.event_bus import EventBus

logger = logging.getLogger(__name__)


class EventLogger:
    """Listens for sensor lifecycle events and logs them."""

    def __init__(self, event_bus: EventBus):
        self.event_bus = event_bus
        self._unsubscribe = self.event_bus.subscribe(SensorLifecycleTopic.SENSOR_LIFECYCLE, self.log_lifecycle_event)

    def close(self) -> None:
        self._unsubscribe()

    def log_lifecycle_event(self, data):
        try:
            action = SensorLifecycleAction(data["action"])
            name = data.get("sensor_name")
            if data.get("success"):
                logger.info("Sensor - %s - %s - OK", action.label, name)
            else:
                logger.warning("Sensor - %s - %s - FAILED %s", action.label, name, data.get("details") or "")
        except (KeyError, TypeError, ValueError):
            logger.info("Sensor lifecycle event: %s", data)
