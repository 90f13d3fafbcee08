"""
Port Allocator
==============
Derives the next free (service, management) port pair from the registry.
"""

from __future__ import annotations

import logging

from sensor_client.domain.sensors.repository import SensorRegistry

logger = logging.getLogger(__name__)


class PortAllocator:
    """Hands out service ports spaced ``step`` apart, starting at ``min_port``.

    Reads only; callers must serialize ``next_port`` with the insert that
    consumes the port.
    """

    def __init__(self, registry: SensorRegistry, min_port: int, step: int = 10):
        self.registry = registry
        self.min_port = int(min_port)
        self.step = int(step)

    def next_port(self) -> int:
        highest = self.registry.find_highest_port()
        if highest is None:
            return self.min_port
        return highest.sensor_port + self.step
