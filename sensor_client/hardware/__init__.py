"""
Sensor worker HTTP surfaces (control + management).
"""

from sensor_client.hardware.control_surface import SensorControlClient

__all__ = ["SensorControlClient"]
