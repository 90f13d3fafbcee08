# sensor_client/services/sensor_lifecycle_service.py
"""
Sensor Lifecycle Service
========================
Registers sensor workers and drives them through their lifecycle:

    registered -> started -> configured -> running -> stopped

Features:
- ``add``: allocate a port pair and persist a new sensor descriptor
- ``run``: for every registered sensor, push the datasource configuration
  and start it, one sensor at a time
- ``stop_sensors`` / ``destroy``: stop every active sensor on shutdown
- Per-sensor failure isolation: one misbehaving sensor never blocks
  fleet-wide readiness or shutdown

Process spawning is not handled here; sensors are expected to be running
(externally supervised) by the time ``run`` is called.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from sensor_client.domain.exceptions import RepositoryError, SensorClientError, ShutdownInProgressError
from sensor_client.domain.sensors.descriptor import SensorDescriptor, derive_sensor_name
from sensor_client.domain.sensors.fleet import FleetState, SensorOperationResult
from sensor_client.domain.sensors.repository import SensorRegistry
from sensor_client.enums import SensorLifecycleAction, SensorState
from sensor_client.hardware.control_surface import SensorControlClient
from sensor_client.services.event_notifier import EventNotifier
from sensor_client.services.port_allocator import PortAllocator
from sensor_client.utils.concurrency import synchronized

logger = logging.getLogger(__name__)

DATASOURCE_KEYS = ("DB_URL", "DB_DRIVER_CLASS", "DB_USER", "DB_PASSWD")


def overwrite_datasource(configuration: dict[str, str], datasource: dict[str, str]) -> dict[str, str]:
    """Return a copy of ``configuration`` with the datasource values replaced.

    Only keys the sensor already declares are replaced; absent keys stay
    absent so the sensor keeps its own defaults.
    """
    updated = dict(configuration)
    for key, value in datasource.items():
        if key in updated:
            updated[key] = value
    return updated


class SensorLifecycleService:
    """Owns the fleet state and sequences every sensor through its lifecycle."""

    def __init__(
        self,
        registry: SensorRegistry,
        control_client: SensorControlClient,
        notifier: EventNotifier,
        allocator: PortAllocator,
        datasource: dict[str, str],
        *,
        settle_seconds: float = 5.0,
        shutdown_timeout_s: float = 30.0,
        fleet: FleetState | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.registry = registry
        self.control_client = control_client
        self.notifier = notifier
        self.allocator = allocator
        self.datasource = dict(datasource)
        self.settle_seconds = max(0.0, float(settle_seconds))
        self.shutdown_timeout_s = float(shutdown_timeout_s)
        self.fleet = fleet or FleetState()
        self._sleep = sleep

        # Serializes port allocation with the insert that consumes the port.
        self._lock = threading.Lock()
        self._destroy_lock = threading.Lock()
        self._destroyed = False
        # Set by destroy(); an in-flight run() stops touching sensors once it is set.
        self._stopping = threading.Event()

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    @synchronized
    def add(self, path_to_jar: str) -> SensorDescriptor:
        """
        Register a new sensor executable.

        Args:
            path_to_jar: Path of the sensor executable; its file name up to
                the first ``-`` becomes the sensor name.

        Returns:
            The persisted descriptor.

        Raises:
            InvalidPathError: The path does not yield a sensor name.
            RepositoryError: The registry could not be read or written.
        """
        sensor_name = derive_sensor_name(path_to_jar)

        sensor_port = self.allocator.next_port()
        descriptor = self.registry.save(SensorDescriptor.for_path(path_to_jar, sensor_port))

        self.notifier.publish(SensorLifecycleAction.ADD, sensor_name, True)
        logger.debug("Sensor - Add - %s - OK", sensor_name)
        return descriptor

    def list_sensors(self) -> list[SensorDescriptor]:
        return self.registry.find_all()

    # -------------------------------------------------------------------------
    # Startup
    # -------------------------------------------------------------------------

    def run(self) -> list[SensorOperationResult]:
        """Configure and start every registered sensor, then mark the fleet ready.

        Sensors are processed sequentially. A failing sensor is logged,
        reported in the returned results and skipped; readiness is set
        regardless. Once ``destroy`` has begun, no further control call is
        made and the remaining sensors are left unstarted.
        """
        if self.fleet.ready:
            logger.warning("Sensor fleet already running; ignoring run()")
            return []

        try:
            descriptors = self.registry.find_all()
        except RepositoryError as exc:
            logger.error("Could not load registered sensors: %s", exc)
            descriptors = []

        results = []
        for descriptor in descriptors:
            if self._stopping.is_set():
                logger.info("Shutdown requested; %d sensor(s) left unstarted", len(descriptors) - len(results))
                break
            results.append(self._run_sensor(descriptor))

        self.fleet.mark_ready()
        started = sum(1 for result in results if result.success)
        logger.info("Sensor loading finished: %d/%d sensors running", started, len(results))
        return results

    def _run_sensor(self, sensor: SensorDescriptor) -> SensorOperationResult:
        name = sensor.sensor_name
        self.fleet.activate(sensor)
        try:
            # Give the worker time to open its control surface.
            if self.settle_seconds:
                self._sleep(self.settle_seconds)
            self._ensure_not_stopping(name)

            self.notifier.publish(SensorLifecycleAction.RUN, name, True)
            logger.debug("Sensor - Run - %s - OK", name)

            configuration = self.control_client.get_configuration(sensor)
            missing = [key for key in DATASOURCE_KEYS if key in self.datasource and key not in configuration]
            if missing:
                logger.warning("Sensor %s does not declare datasource keys %s; left unset", name, missing)
            self._ensure_not_stopping(name)
            self.control_client.push_configuration(sensor, overwrite_datasource(configuration, self.datasource))
            self.fleet.set_state(sensor, SensorState.CONFIGURED)

            self._ensure_not_stopping(name)
            self.control_client.start(sensor)
            self.fleet.set_state(sensor, SensorState.RUNNING)

            self.notifier.publish(SensorLifecycleAction.START, name, True)
            logger.debug("Sensor - Start - %s - OK", name)
            return SensorOperationResult(name, SensorLifecycleAction.START, True, SensorState.RUNNING)
        except ShutdownInProgressError as exc:
            logger.info("Sensor - Start - %s - skipped: %s", name, exc)
            self.fleet.deactivate(sensor)
            return SensorOperationResult(
                name, SensorLifecycleAction.START, False, self.fleet.state_of(sensor), str(exc)
            )
        except SensorClientError as exc:
            logger.error("Sensor - Start - %s - FAILED: %s", name, exc)
            return self._start_failed(sensor, exc)
        except Exception as exc:
            logger.exception("Unexpected error starting sensor %s", name)
            return self._start_failed(sensor, exc)

    def _ensure_not_stopping(self, name: str) -> None:
        if self._stopping.is_set():
            raise ShutdownInProgressError(f"shutdown in progress, not starting {name}")

    def _start_failed(self, sensor: SensorDescriptor, exc: Exception) -> SensorOperationResult:
        self.notifier.publish(SensorLifecycleAction.START, sensor.sensor_name, False, error=str(exc))
        return SensorOperationResult(
            sensor.sensor_name,
            SensorLifecycleAction.START,
            False,
            self.fleet.state_of(sensor),
            str(exc),
        )

    # -------------------------------------------------------------------------
    # Shutdown
    # -------------------------------------------------------------------------

    def stop_sensors(self) -> list[SensorOperationResult]:
        """Stop every active sensor in the order it was started.

        Each sensor gets its control ``stop`` followed by a management
        ``shutdown``; the shutdown is attempted even if the stop failed.
        Registry entries are kept.
        """
        results: list[SensorOperationResult] = []
        for sensor in self.fleet.active_sensors():
            errors: list[str] = []
            for step, call in (("stop", self.control_client.stop), ("shutdown", self.control_client.shutdown)):
                try:
                    call(sensor)
                except Exception as exc:
                    logger.error("Sensor - Stop - %s - %s failed: %s", sensor.sensor_name, step, exc)
                    errors.append(f"{step}: {exc}")

            self.fleet.deactivate(sensor)
            success = not errors
            error = "; ".join(errors) or None
            if success:
                self.notifier.publish(SensorLifecycleAction.STOP, sensor.sensor_name, True)
                logger.debug("Sensor - Stop - %s - OK", sensor.sensor_name)
            else:
                self.notifier.publish(SensorLifecycleAction.STOP, sensor.sensor_name, False, error=error)
            results.append(
                SensorOperationResult(
                    sensor.sensor_name, SensorLifecycleAction.STOP, success, SensorState.STOPPED, error
                )
            )
        return results

    def destroy(self, timeout: float | None = None) -> bool:
        """Stop all sensors once, blocking until done or ``timeout`` elapses.

        Returns:
            True if ``stop_sensors`` finished in time.
        """
        with self._destroy_lock:
            if self._destroyed:
                return True
            self._destroyed = True
        self._stopping.set()

        timeout = self.shutdown_timeout_s if timeout is None else timeout
        worker = threading.Thread(target=self._stop_sensors_logged, name="SensorShutdown", daemon=True)
        worker.start()
        worker.join(timeout=timeout)

        if worker.is_alive():
            logger.warning("Sensor shutdown did not finish within %.1fs", timeout)
            return False
        logger.info("All sensors stopped")
        return True

    def _stop_sensors_logged(self) -> None:
        try:
            self.stop_sensors()
        except Exception:
            logger.exception("Sensor shutdown failed")

    # -------------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------------

    @property
    def is_ready(self) -> bool:
        return self.fleet.ready

    def active_sensors(self) -> list[SensorDescriptor]:
        return self.fleet.active_sensors()

    def sensor_status(self) -> list[dict]:
        """Active sensors with their lifecycle state, in start order."""
        return [
            {**sensor.to_dict(), "state": self.fleet.state_of(sensor).value} for sensor in self.fleet.active_sensors()
        ]
