"""Repository facades exposing typed accessors over low-level mixins."""

from infrastructure.database.repositories.sensors import SensorRepository

__all__ = ["SensorRepository"]
