from __future__ import annotations

import sqlite3

from infrastructure.database.ops.sensors import SensorOperations
from sensor_client.domain.exceptions import RepositoryError
from sensor_client.domain.sensors.descriptor import SensorDescriptor
from sensor_client.utils.time import iso_now


class SensorRepository:
    """Facade over sensor descriptor persistence.

    Implements :class:`sensor_client.domain.sensors.SensorRegistry`.
    """

    def __init__(self, backend: SensorOperations) -> None:
        self._backend = backend

    def save(self, descriptor: SensorDescriptor) -> SensorDescriptor:
        created_at = descriptor.created_at or iso_now()
        try:
            sensor_id = self._backend.insert_sensor(
                executable_path=descriptor.executable_path,
                sensor_port=descriptor.sensor_port,
                management_port=descriptor.management_port,
                sensor_name=descriptor.sensor_name,
                created_at=created_at,
            )
        except sqlite3.Error as exc:
            raise RepositoryError(
                f"Failed to save sensor {descriptor.sensor_name}",
                detail={"sensor_port": descriptor.sensor_port},
            ) from exc
        return descriptor.with_id(sensor_id, created_at)

    def find_all(self) -> list[SensorDescriptor]:
        try:
            rows = self._backend.get_all_sensors()
        except sqlite3.Error as exc:
            raise RepositoryError("Failed to list sensors") from exc
        return [SensorDescriptor.from_row(row) for row in rows]

    def find_highest_port(self) -> SensorDescriptor | None:
        try:
            row = self._backend.get_sensor_with_highest_port()
        except sqlite3.Error as exc:
            raise RepositoryError("Failed to read highest sensor port") from exc
        return SensorDescriptor.from_row(row) if row else None

    def get(self, sensor_id: int) -> SensorDescriptor | None:
        try:
            row = self._backend.get_sensor(sensor_id)
        except sqlite3.Error as exc:
            raise RepositoryError(f"Failed to load sensor {sensor_id}") from exc
        return SensorDescriptor.from_row(row) if row else None

    def find_by_name(self, sensor_name: str) -> list[SensorDescriptor]:
        try:
            rows = self._backend.get_sensors_by_name(sensor_name)
        except sqlite3.Error as exc:
            raise RepositoryError(f"Failed to look up sensor {sensor_name}") from exc
        return [SensorDescriptor.from_row(row) for row in rows]
