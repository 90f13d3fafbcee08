# sensor_client/services/sensor_data_poller.py
"""
Sensor Data Poller
==================
Periodically asks every active sensor to send its collected data.

Features:
- Single polling thread for the whole fleet, fixed period
- Gated on fleet readiness: nothing is polled until ``run`` has finished
- Failure isolation: a failing sensor never stops the rest of the tick or
  future ticks
- Health tracking per sensor (last success, consecutive failures)
"""

import logging
import threading
import time
from datetime import datetime
from typing import Any

from sensor_client.domain.sensors.descriptor import SensorDescriptor
from sensor_client.domain.sensors.fleet import FleetState, SensorOperationResult
from sensor_client.enums import PollHealth, SensorLifecycleAction
from sensor_client.hardware.control_surface import SensorControlClient
from sensor_client.services.event_notifier import EventNotifier
from sensor_client.utils.time import utc_now

logger = logging.getLogger(__name__)


class PollStatus:
    """Tracks the data-poll outcome of one sensor."""

    def __init__(self, sensor_name: str):
        self.sensor_name = sensor_name
        self.status = PollHealth.UNKNOWN
        self.last_seen: datetime | None = None
        self.failure_count = 0
        self.poll_count = 0
        self.last_error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "sensor_name": self.sensor_name,
            "status": self.status.value,
            "last_seen": self.last_seen.isoformat() if self.last_seen else None,
            "failure_count": self.failure_count,
            "poll_count": self.poll_count,
            "last_error": self.last_error,
        }


class SensorDataPoller:
    """
    Background task fetching data from the active sensors.

    Reads the fleet state shared with the lifecycle service; it never
    mutates the active list.
    """

    def __init__(
        self,
        fleet: FleetState,
        control_client: SensorControlClient,
        notifier: EventNotifier | None = None,
        poll_interval_s: float = 5.0,
    ):
        self.fleet = fleet
        self.control_client = control_client
        self.notifier = notifier
        self.poll_interval_s = max(0.01, float(poll_interval_s))

        self._health: dict[int, PollStatus] = {}
        self._health_lock = threading.Lock()

        self._stop_event = threading.Event()
        self._worker_thread: threading.Thread | None = None
        self._is_running = False

        logger.info("SensorDataPoller initialized (interval=%ss)", self.poll_interval_s)

    # -------------------------------------------------------------------------
    # Lifecycle Management
    # -------------------------------------------------------------------------

    def start(self) -> bool:
        """Starts the polling thread."""
        if self._is_running:
            return True

        self._stop_event.clear()
        self._worker_thread = threading.Thread(target=self._polling_loop, name="SensorDataPoller", daemon=True)
        self._worker_thread.start()
        self._is_running = True
        logger.info("Started sensor data polling")
        return True

    def stop(self, timeout: float = 5.0) -> None:
        """Stops the polling thread gracefully."""
        if not self._is_running:
            return

        self._stop_event.set()
        if self._worker_thread:
            self._worker_thread.join(timeout=timeout)

        self._is_running = False
        logger.info("Sensor data polling stopped")

    @property
    def is_running(self) -> bool:
        return self._is_running

    # -------------------------------------------------------------------------
    # Core Logic
    # -------------------------------------------------------------------------

    def _polling_loop(self) -> None:
        """Fixed-period loop; the first tick fires one interval after start."""
        while not self._stop_event.wait(self._next_sleep()):
            try:
                self.poll_once()
            except Exception as exc:
                logger.exception("Sensor polling loop encountered critical error: %s", exc)

    def _next_sleep(self) -> float:
        # Align ticks on the interval so a slow tick does not shift the schedule.
        now = time.monotonic()
        return self.poll_interval_s - (now % self.poll_interval_s)

    def poll_once(self) -> list[SensorOperationResult]:
        """Poll every active sensor once. No-op until the fleet is ready."""
        if not self.fleet.ready:
            return []

        results = []
        for sensor in self.fleet.active_sensors():
            if self._stop_event.is_set():
                break
            results.append(self._poll_sensor(sensor))
        return results

    def _poll_sensor(self, sensor: SensorDescriptor) -> SensorOperationResult:
        health = self._health_for(sensor)
        health.poll_count += 1
        try:
            self.control_client.send_sensor_data(sensor)
        except Exception as exc:
            health.failure_count += 1
            health.last_error = str(exc)
            health.status = PollHealth.DEGRADED
            logger.error("Sensor - Send - %s - FAILED: %s", sensor.sensor_name, exc)
            self._publish(sensor, False, error=str(exc))
            return SensorOperationResult(sensor.sensor_name, SensorLifecycleAction.SEND, False, error=str(exc))

        health.failure_count = 0
        health.last_error = None
        health.last_seen = utc_now()
        health.status = PollHealth.HEALTHY
        logger.debug("Sensor - Send - %s - OK", sensor.sensor_name)
        self._publish(sensor, True)
        return SensorOperationResult(sensor.sensor_name, SensorLifecycleAction.SEND, True)

    def _publish(self, sensor: SensorDescriptor, success: bool, **details: Any) -> None:
        if self.notifier is not None:
            self.notifier.publish(SensorLifecycleAction.SEND, sensor.sensor_name, success, **details)

    def _health_for(self, sensor: SensorDescriptor) -> PollStatus:
        with self._health_lock:
            health = self._health.get(sensor.sensor_port)
            if health is None:
                health = PollStatus(sensor.sensor_name)
                self._health[sensor.sensor_port] = health
            return health

    def get_health(self) -> dict[int, dict[str, Any]]:
        """Poll health keyed by sensor port."""
        with self._health_lock:
            return {port: health.to_dict() for port, health in self._health.items()}
