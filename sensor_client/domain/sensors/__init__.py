"""
Domain Layer for Sensor Lifecycle
=================================
Contains sensor descriptors, the registry contract and the in-memory
fleet state shared by the lifecycle service and the data poller.
"""

from sensor_client.domain.sensors.descriptor import SensorDescriptor, derive_sensor_name
from sensor_client.domain.sensors.fleet import FleetState, SensorOperationResult
from sensor_client.domain.sensors.repository import SensorRegistry

__all__ = [
    "FleetState",
    "SensorDescriptor",
    "SensorOperationResult",
    "SensorRegistry",
    "derive_sensor_name",
]
