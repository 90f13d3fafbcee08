"""Centralized exception hierarchy for the sensor client.

All domain and service exceptions inherit from :class:`SensorClientError` so
that callers can catch a single base class when they need a broad safety
net, yet still match on specific subclasses where narrower handling is
appropriate.

The JSON API (see ``sensor_client/utils/http.safe_route``) maps these to the
correct HTTP status codes automatically.

Hierarchy
---------
::

    SensorClientError (base, maps to 500)
    ├── ValidationError              (400, bad input from caller)
    │   └── InvalidPathError         (400, unusable sensor executable path)
    ├── NotFoundError                (404, entity does not exist)
    ├── ServiceError                 (500, business-logic failure)
    │   ├── RepositoryError          (500, database / persistence)
    │   └── ExternalServiceError     (502, network dependency)
    │       └── TransportError       (502, sensor control/management call)
    │           └── SerializationError (502, configuration JSON)
    └── ConfigurationError           (500, missing / invalid config)
"""

from __future__ import annotations


class SensorClientError(Exception):
    """Base exception for all sensor client errors.

    Parameters
    ----------
    message:
        Human-readable description (logged server-side, **not** leaked to
        the HTTP client unless the exception class opts in).
    detail:
        Optional machine-readable context dict attached to the error for
        structured logging.
    """

    http_status: int = 500

    def __init__(self, message: str = "", *, detail: dict | None = None) -> None:
        super().__init__(message)
        self.detail = detail or {}


# ── Client errors (4xx) ──────────────────────────────────────────────


class ValidationError(SensorClientError):
    """Caller supplied invalid or incomplete input (HTTP 400)."""

    http_status: int = 400


class InvalidPathError(ValidationError):
    """The sensor executable path does not yield a sensor name."""


class NotFoundError(SensorClientError):
    """Requested entity does not exist (HTTP 404)."""

    http_status: int = 404


# ── Server errors (5xx) ──────────────────────────────────────────────


class ServiceError(SensorClientError):
    """Business-logic failure in a service method (HTTP 500)."""

    http_status: int = 500


class RepositoryError(ServiceError):
    """Database / persistence layer failure (HTTP 500)."""

    http_status: int = 500


class ExternalServiceError(ServiceError):
    """Network dependency failure (HTTP 502)."""

    http_status: int = 502


class TransportError(ExternalServiceError):
    """A sensor control or management surface call failed.

    Covers timeouts, refused connections and non-success status codes.
    """


class SerializationError(TransportError):
    """Configuration JSON could not be parsed or produced."""


class ConfigurationError(SensorClientError):
    """Missing or invalid application configuration (HTTP 500)."""

    http_status: int = 500


class ShutdownInProgressError(ServiceError):
    """A lifecycle step was skipped because the fleet is shutting down."""
