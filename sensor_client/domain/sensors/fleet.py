"""
Fleet State
===========
In-memory state of the sensor fleet owned by the lifecycle service: the
ordered list of active sensors, each sensor's lifecycle state and the
readiness flag that gates data polling.

The data poller receives the same instance and only reads from it.
Readers always get snapshots, so iterating never races with ``run``
appending or ``stop_sensors`` removing.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any

from sensor_client.domain.sensors.descriptor import SensorDescriptor
from sensor_client.enums import SensorLifecycleAction, SensorState


@dataclass(frozen=True)
class SensorOperationResult:
    """Outcome of one per-sensor step of a fleet-wide operation."""

    sensor_name: str
    action: SensorLifecycleAction
    success: bool
    state: SensorState | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "sensor_name": self.sensor_name,
            "action": self.action.value,
            "success": self.success,
            "state": self.state.value if self.state else None,
            "error": self.error,
        }


class FleetState:
    """Thread-safe active-sensor list plus the readiness flag."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._active: list[SensorDescriptor] = []
        self._states: dict[int, SensorState] = {}
        self._ready = threading.Event()

    # -- readiness ---------------------------------------------------------
    @property
    def ready(self) -> bool:
        return self._ready.is_set()

    def mark_ready(self) -> None:
        self._ready.set()

    def wait_ready(self, timeout: float | None = None) -> bool:
        return self._ready.wait(timeout)

    # -- active list -------------------------------------------------------
    def activate(self, descriptor: SensorDescriptor) -> None:
        with self._lock:
            self._active.append(descriptor)
            self._states[descriptor.sensor_port] = SensorState.STARTED

    def deactivate(self, descriptor: SensorDescriptor) -> None:
        with self._lock:
            try:
                self._active.remove(descriptor)
            except ValueError:
                return
            self._states[descriptor.sensor_port] = SensorState.STOPPED

    def active_sensors(self) -> list[SensorDescriptor]:
        with self._lock:
            return list(self._active)

    # -- per-sensor state --------------------------------------------------
    def set_state(self, descriptor: SensorDescriptor, state: SensorState) -> None:
        with self._lock:
            self._states[descriptor.sensor_port] = state

    def state_of(self, descriptor: SensorDescriptor) -> SensorState:
        with self._lock:
            return self._states.get(descriptor.sensor_port, SensorState.REGISTERED)
