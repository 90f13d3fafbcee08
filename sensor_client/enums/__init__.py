"""
Enums Module
============

This module provides enumeration types for the sensor client.
Enums ensure type safety and consistency across the codebase.
"""

from sensor_client.enums.common import PollHealth, SensorState
from sensor_client.enums.events import SensorLifecycleAction, SensorLifecycleTopic

__all__ = [
    # Event enums
    "SensorLifecycleAction",
    "SensorLifecycleTopic",
    # Common enums
    "PollHealth",
    "SensorState",
]
