"""
Event Notifier
==============
Fire-and-forget sink for sensor lifecycle transitions.

Publishing only enqueues onto the EventBus; delivery happens on the bus
worker threads, so a slow listener never delays the lifecycle service.
"""

from __future__ import annotations

import logging
from typing import Any

from sensor_client.enums.events import SensorLifecycleAction, SensorLifecycleTopic
from sensor_client.schemas.events import SensorLifecyclePayload
from sensor_client.utils.event_bus import EventBus
from sensor_client.utils.time import iso_now

logger = logging.getLogger(__name__)


class EventNotifier:
    """Publishes :class:`SensorLifecyclePayload` events on the bus."""

    def __init__(self, event_bus: EventBus, topic: SensorLifecycleTopic = SensorLifecycleTopic.SENSOR_LIFECYCLE):
        self.event_bus = event_bus
        self.topic = topic

    def publish(self, action: SensorLifecycleAction, subject_name: str, success: bool, **details: Any) -> None:
        """Queue a lifecycle notification. Never raises."""
        try:
            payload = SensorLifecyclePayload(
                action=action,
                sensor_name=subject_name,
                success=success,
                timestamp=iso_now(),
                details=details,
            )
            self.event_bus.publish(self.topic, payload)
        except Exception as exc:
            logger.warning("Failed to publish %s event for %s: %s", action, subject_name, exc)
