"""
Infrastructure Package
======================
Persistence (SQLite registry) and logging adapters used by the sensor client.
"""
