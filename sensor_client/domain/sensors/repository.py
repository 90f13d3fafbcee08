"""
Sensor Registry Protocol
========================

Defines the interface for sensor descriptor persistence.
Implementations can use SQLite, PostgreSQL, or other storage.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol, runtime_checkable

from sensor_client.domain.sensors.descriptor import SensorDescriptor


@runtime_checkable
class SensorRegistry(Protocol):
    """Protocol for sensor descriptor persistence operations."""

    @abstractmethod
    def save(self, descriptor: SensorDescriptor) -> SensorDescriptor:
        """
        Persist a new sensor descriptor.

        Args:
            descriptor: Descriptor to store (sensor_id should be None)

        Returns:
            Stored descriptor with assigned sensor_id
        """
        ...

    @abstractmethod
    def find_all(self) -> list[SensorDescriptor]:
        """Return every registered descriptor."""
        ...

    @abstractmethod
    def find_highest_port(self) -> SensorDescriptor | None:
        """Return the descriptor holding the highest sensor port, if any."""
        ...
