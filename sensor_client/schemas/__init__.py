from sensor_client.schemas.events import SensorLifecyclePayload

__all__ = ["SensorLifecyclePayload"]
