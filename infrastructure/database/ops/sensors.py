from __future__ import annotations

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


class SensorOperations:
    """Sensor registry CRUD helpers shared across database handlers."""

    def _create_sensor_tables(self) -> None:
        db = self.get_db()
        db.execute(
            """
            CREATE TABLE IF NOT EXISTS Sensors (
                sensor_id INTEGER PRIMARY KEY AUTOINCREMENT,
                executable_path TEXT NOT NULL,
                sensor_port INTEGER NOT NULL UNIQUE,
                management_port INTEGER NOT NULL UNIQUE,
                sensor_name TEXT NOT NULL,
                created_at TEXT NOT NULL,
                CHECK (management_port = sensor_port + 1)
            )
            """
        )
        db.execute("CREATE INDEX IF NOT EXISTS idx_sensors_name ON Sensors (sensor_name)")
        db.commit()

    def insert_sensor(
        self,
        *,
        executable_path: str,
        sensor_port: int,
        management_port: int,
        sensor_name: str,
        created_at: str,
    ) -> int:
        db = self.get_db()
        cursor = db.execute(
            """
            INSERT INTO Sensors (executable_path, sensor_port, management_port, sensor_name, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (executable_path, sensor_port, management_port, sensor_name, created_at),
        )
        db.commit()
        logger.debug("Inserted sensor %s on port %s (id=%s)", sensor_name, sensor_port, cursor.lastrowid)
        return int(cursor.lastrowid)

    def get_all_sensors(self) -> list[dict[str, Any]]:
        db = self.get_db()
        rows = db.execute("SELECT * FROM Sensors ORDER BY sensor_id").fetchall()
        return [dict(row) for row in rows]

    def get_sensor_with_highest_port(self) -> Optional[dict[str, Any]]:
        db = self.get_db()
        row = db.execute("SELECT * FROM Sensors ORDER BY sensor_port DESC LIMIT 1").fetchone()
        return dict(row) if row else None

    def get_sensor(self, sensor_id: int) -> Optional[dict[str, Any]]:
        db = self.get_db()
        row = db.execute("SELECT * FROM Sensors WHERE sensor_id = ?", (sensor_id,)).fetchone()
        return dict(row) if row else None

    def get_sensors_by_name(self, sensor_name: str) -> list[dict[str, Any]]:
        db = self.get_db()
        rows = db.execute(
            "SELECT * FROM Sensors WHERE sensor_name = ? ORDER BY sensor_id",
            (sensor_name,),
        ).fetchall()
        return [dict(row) for row in rows]
