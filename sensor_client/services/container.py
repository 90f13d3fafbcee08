from __future__ import annotations

import logging
import sqlite3
import threading
from dataclasses import dataclass, field

from infrastructure.database.repositories.sensors import SensorRepository
from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler
from infrastructure.logging.event_logger import EventLogger
from sensor_client.config import AppConfig
from sensor_client.domain.exceptions import RepositoryError
from sensor_client.domain.sensors.fleet import FleetState, SensorOperationResult
from sensor_client.hardware.control_surface import SensorControlClient
from sensor_client.services.event_notifier import EventNotifier
from sensor_client.services.port_allocator import PortAllocator
from sensor_client.services.sensor_data_poller import SensorDataPoller
from sensor_client.services.sensor_lifecycle_service import SensorLifecycleService
from sensor_client.utils.event_bus import EventBus

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Aggregate and manage the sensor client services."""

    config: AppConfig
    database: SQLiteDatabaseHandler
    sensor_repo: SensorRepository
    event_bus: EventBus
    event_logger: EventLogger
    notifier: EventNotifier
    control_client: SensorControlClient
    port_allocator: PortAllocator
    fleet: FleetState
    lifecycle: SensorLifecycleService
    poller: SensorDataPoller
    _shutdown_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _shutdown_complete: bool = field(default=False, repr=False)

    @classmethod
    def build(cls, config: AppConfig) -> "ServiceContainer":
        """Construct the service container with all dependencies."""
        logger.info("Building ServiceContainer...")
        try:
            database = SQLiteDatabaseHandler(config.database_path)
            database.create_tables()
        except (sqlite3.Error, OSError) as exc:
            raise RepositoryError(
                f"Cannot open sensor database {config.database_path}", detail={"path": config.database_path}
            ) from exc
        sensor_repo = SensorRepository(database)

        event_bus = EventBus(
            queue_size=config.eventbus_queue_size,
            worker_count=config.eventbus_worker_count,
        )
        event_logger = EventLogger(event_bus)
        notifier = EventNotifier(event_bus)

        control_client = SensorControlClient(
            host=config.sensor_host,
            context_path=config.sensor_context_path,
            timeout=config.http_timeout_seconds,
            retries=config.http_retries,
        )
        port_allocator = PortAllocator(sensor_repo, config.min_sensor_port, config.port_step)
        fleet = FleetState()
        lifecycle = SensorLifecycleService(
            sensor_repo,
            control_client,
            notifier,
            port_allocator,
            config.datasource_parameters(),
            settle_seconds=config.sensor_settle_seconds,
            shutdown_timeout_s=config.shutdown_timeout_seconds,
            fleet=fleet,
        )
        poller = SensorDataPoller(
            fleet,
            control_client,
            notifier,
            poll_interval_s=config.poll_interval_seconds,
        )

        container = cls(
            config=config,
            database=database,
            sensor_repo=sensor_repo,
            event_bus=event_bus,
            event_logger=event_logger,
            notifier=notifier,
            control_client=control_client,
            port_allocator=port_allocator,
            fleet=fleet,
            lifecycle=lifecycle,
            poller=poller,
        )
        logger.info("ServiceContainer built successfully.")
        return container

    def start_fleet(self) -> list[SensorOperationResult]:
        """Start the poller, then configure and start every registered sensor."""
        # The poller idles until run() marks the fleet ready.
        self.poller.start()
        return self.lifecycle.run()

    def shutdown(self) -> None:
        """Release external resources before process exit."""
        with self._shutdown_lock:
            if self._shutdown_complete:
                return
            self._shutdown_complete = True

        # Stop polling first so no data request races the stop calls.
        self.poller.stop()

        if not self.lifecycle.destroy():
            logger.warning("Some sensors may still be running")

        self.event_logger.close()
        self.event_bus.shutdown()
        self.control_client.close()
        self.database.close()
        logger.info("ServiceContainer shutdown complete.")
