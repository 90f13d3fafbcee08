from enum import Enum


class SensorState(str, Enum):
    """
    Per-sensor lifecycle states.
    Used by: sensor_lifecycle_service, fleet state
    """

    REGISTERED = "registered"
    STARTED = "started"
    CONFIGURED = "configured"
    RUNNING = "running"
    STOPPED = "stopped"

    def __str__(self) -> str:
        return self.value


class PollHealth(str, Enum):
    """
    Data poll health states.
    Used by: sensor_data_poller
    """

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value
