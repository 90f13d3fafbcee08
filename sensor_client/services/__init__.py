"""
Service Organization
====================

**sensor_lifecycle_service**
  Registers sensors and sequences add/run/stop across the fleet.

**sensor_data_poller**
  Fixed-period background task polling active sensors for data.

**port_allocator / event_notifier**
  Small collaborators of the lifecycle service.

**container**
  Builds and tears down the whole graph from an ``AppConfig``.
"""
