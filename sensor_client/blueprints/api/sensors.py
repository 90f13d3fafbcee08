"""Sensor Registry API
======================

JSON endpoints over the sensor lifecycle service.

Routes:
    GET  /api/sensors/              List registered sensors
    POST /api/sensors/              Register a sensor executable ({"path": "..."})
    GET  /api/sensors/<sensor_id>   One registered sensor
    GET  /api/sensors/status        Readiness, active sensors and poll health
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, current_app, request

from sensor_client.domain.exceptions import NotFoundError, ValidationError
from sensor_client.utils.http import safe_route, success_response

logger = logging.getLogger(__name__)

sensors_api = Blueprint("sensors_api", __name__)


def _get_container():
    container = current_app.config.get("CONTAINER")
    if not container:
        raise RuntimeError("ServiceContainer not found in app config")
    return container


@sensors_api.get("/")
@safe_route("Failed to list sensors")
def list_sensors() -> Response:
    sensors = _get_container().lifecycle.list_sensors()
    return success_response({"sensors": [sensor.to_dict() for sensor in sensors], "total": len(sensors)})


@sensors_api.post("/")
@safe_route("Failed to add sensor")
def add_sensor() -> Response:
    """Register a sensor executable.

    Body:
        ``{"path": "/opt/sensors/temperature-1.2.3.jar"}``
    """
    body = request.get_json(silent=True) or {}
    path = body.get("path")
    if not isinstance(path, str):
        raise ValidationError("Field 'path' is required")

    descriptor = _get_container().lifecycle.add(path)
    return success_response(descriptor.to_dict(), 201, message=f"Sensor {descriptor.sensor_name} added")


@sensors_api.get("/<int:sensor_id>")
@safe_route("Failed to load sensor")
def get_sensor(sensor_id: int) -> Response:
    descriptor = _get_container().sensor_repo.get(sensor_id)
    if descriptor is None:
        raise NotFoundError(f"Sensor {sensor_id} not found")
    return success_response(descriptor.to_dict())


@sensors_api.get("/status")
@safe_route("Failed to get sensor status")
def sensor_status() -> Response:
    """Fleet readiness plus lifecycle state and poll health of each active sensor."""
    container = _get_container()
    health = container.poller.get_health()
    active = [
        {**entry, "poll": health.get(entry["sensor_port"])} for entry in container.lifecycle.sensor_status()
    ]
    return success_response(
        {
            "ready": container.lifecycle.is_ready,
            "polling": container.poller.is_running,
            "active": active,
            "events": container.event_bus.get_metrics(),
        }
    )
