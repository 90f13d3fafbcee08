import json
import logging
from typing import Any

import requests

from sensor_client.domain.exceptions import SerializationError, TransportError
from sensor_client.domain.sensors.descriptor import SensorDescriptor

logger = logging.getLogger(__name__)


class SensorControlClient:
    """
    Talks to the HTTP surfaces exposed by every sensor worker.

    The control surface lives on ``sensor_port`` under
    ``{context_path}/sensor/{sensor_name}``; the management surface lives on
    ``management_port``.

    Every call carries ``timeout`` and raises :class:`TransportError` on a
    timeout, refused connection or non-2xx status. Connection errors and
    timeouts are retried ``retries`` extra times.
    """

    def __init__(
        self,
        host: str = "localhost",
        context_path: str = "/artie",
        timeout: float = 10.0,
        retries: int = 0,
        session: requests.Session | None = None,
    ):
        self.host = host
        self.context_path = "/" + context_path.strip("/") if context_path.strip("/") else ""
        self.timeout = float(timeout)
        self.retries = max(0, int(retries))
        self.session = session or requests.Session()

    # -- addressing --------------------------------------------------------
    def control_url(self, sensor: SensorDescriptor, endpoint: str) -> str:
        return f"http://{self.host}:{sensor.sensor_port}{self.context_path}/sensor/{sensor.sensor_name}/{endpoint}"

    def management_url(self, sensor: SensorDescriptor, path: str) -> str:
        return f"http://{self.host}:{sensor.management_port}/{path.lstrip('/')}"

    # -- control surface ---------------------------------------------------
    def get_configuration(self, sensor: SensorDescriptor) -> dict[str, str]:
        """Fetch the sensor's configuration map."""
        response = self._request("GET", self.control_url(sensor, "getConfiguration"))
        try:
            body = response.json()
        except ValueError as exc:
            raise SerializationError(
                f"Sensor {sensor.sensor_name} returned invalid configuration JSON",
                detail={"url": response.url},
            ) from exc
        if not isinstance(body, dict):
            raise SerializationError(
                f"Sensor {sensor.sensor_name} configuration is not a JSON object",
                detail={"type": type(body).__name__},
            )
        return {str(key): "" if value is None else str(value) for key, value in body.items()}

    def push_configuration(self, sensor: SensorDescriptor, configuration: dict[str, str]) -> None:
        """Send the (updated) configuration map back to the sensor."""
        try:
            body = json.dumps(configuration)
        except (TypeError, ValueError) as exc:
            raise SerializationError(f"Cannot encode configuration for sensor {sensor.sensor_name}") from exc
        self._request(
            "POST",
            self.control_url(sensor, "configuration"),
            data=body,
            headers={"Content-Type": "application/json"},
        )

    def start(self, sensor: SensorDescriptor) -> None:
        self._request("GET", self.control_url(sensor, "start"))

    def stop(self, sensor: SensorDescriptor) -> None:
        self._request("GET", self.control_url(sensor, "stop"))

    def send_sensor_data(self, sensor: SensorDescriptor) -> str:
        """Ask the sensor to send its collected data; returns the raw body."""
        return self._request("GET", self.control_url(sensor, "sendSensorData")).text

    # -- management surface ------------------------------------------------
    def shutdown(self, sensor: SensorDescriptor) -> None:
        self._request("POST", self.management_url(sensor, "actuator/shutdown"))

    def close(self) -> None:
        self.session.close()

    # -- transport ---------------------------------------------------------
    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        attempt = 0
        while True:
            attempt += 1
            try:
                response = self.session.request(method, url, timeout=self.timeout, **kwargs)
                response.raise_for_status()
                return response
            except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
                if attempt <= self.retries:
                    logger.debug("%s %s failed (attempt %d/%d): %s", method, url, attempt, self.retries + 1, e)
                    continue
                raise TransportError(f"Error calling {method} {url}: {e}", detail={"url": url}) from e
            except requests.exceptions.RequestException as e:
                # Non-2xx statuses and malformed requests are not retried.
                status = getattr(getattr(e, "response", None), "status_code", None)
                raise TransportError(f"Error calling {method} {url}: {e}", detail={"url": url, "status": status}) from e
