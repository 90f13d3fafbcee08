from __future__ import annotations

import argparse
import contextlib
import logging
import signal
import threading
import time

from sensor_client.config import load_config, setup_logging
from sensor_client.domain.exceptions import ConfigurationError, SensorClientError, ValidationError
from sensor_client.services.container import ServiceContainer

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="artie-sensor-client", description="Manage Artie sensor workers")
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Register a sensor executable")
    add.add_argument("path", help="Path of the sensor executable, e.g. /opt/sensors/temperature-1.2.3.jar")

    sub.add_parser("list", help="List registered sensors")
    sub.add_parser("run", help="Start every registered sensor and poll it until stopped")

    serve = sub.add_parser("serve", help="Like 'run', plus the JSON API")
    serve.add_argument("--host", default=None, help="API bind address (default: ARTIE_CLIENT_API_HOST)")
    serve.add_argument("--port", type=int, default=None, help="API port (default: ARTIE_CLIENT_API_PORT)")
    return parser


def _install_signal_handlers() -> None:
    def _signal_handler(signum: int, _frame: object) -> None:
        logger.info("Received %s, shutting down", signal.Signals(signum).name)
        raise SystemExit(0)

    # SIGTERM comes from systemd/container stops; Ctrl+C stays a KeyboardInterrupt.
    with contextlib.suppress(OSError, ValueError):
        signal.signal(signal.SIGTERM, _signal_handler)


def main(argv: list[str] | None = None) -> int:
    """Entry point of the ``artie-sensor-client`` command."""
    args = _build_parser().parse_args(argv)

    try:
        config = load_config()
        setup_logging(debug=config.DEBUG, log_path=config.log_path)
    except (ConfigurationError, ValueError, OSError) as exc:
        print(f"Configuration error: {exc}")
        return 1

    container: ServiceContainer | None = None
    try:
        container = ServiceContainer.build(config)
        if args.command == "add":
            descriptor = container.lifecycle.add(args.path)
            print(
                f"Added sensor {descriptor.sensor_name} "
                f"(port {descriptor.sensor_port}, management port {descriptor.management_port})"
            )
            return 0

        if args.command == "list":
            for descriptor in container.lifecycle.list_sensors():
                print(
                    f"{descriptor.sensor_id}\t{descriptor.sensor_name}\t"
                    f"{descriptor.sensor_port}/{descriptor.management_port}\t{descriptor.executable_path}"
                )
            return 0

        _install_signal_handlers()
        if args.command == "run":
            return _run_forever(container)
        return _serve(container, args.host or config.api_host, args.port or config.api_port)
    except ValidationError as exc:
        print(f"Error: {exc}")
        return 2
    except SensorClientError as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 1
    finally:
        if container is not None:
            container.shutdown()


def _run_forever(container: ServiceContainer) -> int:
    try:
        results = container.start_fleet()
        failed = [result.sensor_name for result in results if not result.success]
        if failed:
            logger.warning("Sensors that failed to start: %s", ", ".join(failed))
        logger.info("Sensor client running (press Ctrl+C to stop)")
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Stopping sensor client...")
    return 0


def _serve(container: ServiceContainer, host: str, port: int) -> int:
    from sensor_client import create_app

    app = create_app(container=container)
    # Startup blocks on settle delays; keep the API reachable meanwhile.
    threading.Thread(target=container.start_fleet, name="SensorFleetStartup", daemon=True).start()
    try:
        app.run(host=host, port=port, debug=False, use_reloader=False)
    except KeyboardInterrupt:
        logger.info("Stopping sensor client...")
    return 0


if __name__ == "__main__":
    import sys

    raise SystemExit(main(sys.argv[1:]))
