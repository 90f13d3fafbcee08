"""
Sensor Descriptor
=================
Persisted description of one sensor worker: where its executable lives,
which ports it listens on and the name its control surface is mounted
under.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from sensor_client.domain.exceptions import InvalidPathError


def derive_sensor_name(path_to_jar: str) -> str:
    """Derive the sensor name from an executable path.

    The name is the last path segment up to the first ``-``, so
    ``/opt/sensors/temperature-1.2.3.jar`` becomes ``temperature``.

    Raises:
        InvalidPathError: when the path is blank, ends with ``/`` or the
            segment starts with ``-``.
    """
    if path_to_jar is None or not str(path_to_jar).strip():
        raise InvalidPathError("Sensor path is empty")

    segment = str(path_to_jar).strip().split("/")[-1]
    if not segment:
        raise InvalidPathError(f"Sensor path has no file segment: {path_to_jar!r}")

    name = segment.split("-")[0]
    if not name:
        raise InvalidPathError(f"Sensor path does not yield a sensor name: {path_to_jar!r}")
    return name


@dataclass(frozen=True)
class SensorDescriptor:
    """
    Immutable sensor record as stored by the registry.

    ``sensor_id`` stays ``None`` until the registry assigns one.
    """

    executable_path: str
    sensor_port: int
    management_port: int
    sensor_name: str
    sensor_id: int | None = None
    created_at: str | None = field(default=None, compare=False)

    @classmethod
    def for_path(cls, path_to_jar: str, sensor_port: int) -> "SensorDescriptor":
        """Build an unsaved descriptor with the management port next to the service port."""
        return cls(
            executable_path=path_to_jar,
            sensor_port=int(sensor_port),
            management_port=int(sensor_port) + 1,
            sensor_name=derive_sensor_name(path_to_jar),
        )

    @classmethod
    def from_row(cls, row: Any) -> "SensorDescriptor":
        """Build a descriptor from a ``sqlite3.Row`` or mapping."""
        data = dict(row)
        return cls(
            sensor_id=data.get("sensor_id"),
            executable_path=data["executable_path"],
            sensor_port=int(data["sensor_port"]),
            management_port=int(data["management_port"]),
            sensor_name=data["sensor_name"],
            created_at=data.get("created_at"),
        )

    def with_id(self, sensor_id: int, created_at: str | None = None) -> "SensorDescriptor":
        return replace(self, sensor_id=sensor_id, created_at=created_at or self.created_at)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary"""
        return {
            "sensor_id": self.sensor_id,
            "executable_path": self.executable_path,
            "sensor_port": self.sensor_port,
            "management_port": self.management_port,
            "sensor_name": self.sensor_name,
            "created_at": self.created_at,
        }
