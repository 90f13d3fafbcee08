from typing import Any

from pydantic import BaseModel, Field

from sensor_client.enums.events import SensorLifecycleAction


class SensorLifecyclePayload(BaseModel):
    """Payload for sensor lifecycle notifications."""

    schema_version: int = Field(default=1)

    action: SensorLifecycleAction
    sensor_name: str
    success: bool
    timestamp: str
    details: dict[str, Any] = Field(default_factory=dict)
