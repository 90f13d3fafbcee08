from sensor_client.blueprints.api.sensors import sensors_api

__all__ = ["sensors_api"]
