from enum import Enum


class SensorLifecycleAction(str, Enum):
    """Lifecycle transitions published by the sensor lifecycle service."""

    ADD = "add"
    RUN = "run"
    START = "start"
    STOP = "stop"
    SEND = "send"

    def __str__(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        """Human-readable label used in log lines, e.g. ``Run``."""
        return self.value.capitalize()


class SensorLifecycleTopic(str, Enum):
    """Event bus topics."""

    SENSOR_LIFECYCLE = "sensor_lifecycle"
