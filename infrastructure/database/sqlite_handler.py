import logging
import shutil
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from flask import Flask

from infrastructure.database.ops.sensors import SensorOperations

logger = logging.getLogger(__name__)

_MEMORY_DATABASE = ":memory:"


class SQLiteDatabaseHandler(SensorOperations):
    """Thread-safe SQLite handler decoupled from Flask globals."""

    def __init__(self, database_path: str) -> None:
        self._database_path = database_path
        self._local = threading.local()
        # An in-memory database exists only inside its connection, so every
        # thread shares one.
        self._shared_connection: Optional[sqlite3.Connection] = None
        self._shared_lock = threading.Lock()

        # Ensure the directory for the database file exists
        if database_path != _MEMORY_DATABASE:
            db_path = Path(database_path)
            if not db_path.parent.exists():
                db_path.parent.mkdir(parents=True, exist_ok=True)
                logger.info("Created database directory: %s", db_path.parent)

    # --- Lifecycle ------------------------------------------------------------
    def init_app(self, app: Flask | None = None) -> None:
        if app is not None:
            app.teardown_appcontext(self.close_db)
        self.create_tables()

    def get_db(self) -> sqlite3.Connection:
        if self._database_path == _MEMORY_DATABASE:
            with self._shared_lock:
                if self._shared_connection is None:
                    self._shared_connection = self._open_connection()
                return self._shared_connection

        connection: Optional[sqlite3.Connection] = getattr(self._local, "connection", None)
        if connection is None:
            try:
                connection = self._open_connection()
            except sqlite3.DatabaseError as exc:
                if self._is_corruption_error(exc):
                    logger.error("Database appears corrupt (%s). Recreating a fresh database.", exc)
                    self._quarantine_corrupt_db()
                    connection = self._open_connection()
                else:
                    raise
            self._local.connection = connection
        return connection

    def _open_connection(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._database_path, check_same_thread=False)
        try:
            connection.row_factory = sqlite3.Row
            self._configure_connection(connection)
            return connection
        except Exception:
            connection.close()
            raise

    def _is_corruption_error(self, exc: sqlite3.Error) -> bool:
        message = str(exc).lower()
        return (
            "database disk image is malformed" in message
            or "file is not a database" in message
            or "file is encrypted or is not a database" in message
        )

    def _quarantine_corrupt_db(self) -> Optional[Path]:
        if self._database_path == _MEMORY_DATABASE:
            return None
        db_path = Path(self._database_path)
        if not db_path.exists():
            return None

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        quarantine_dir = db_path.parent / "corrupt"
        quarantine_dir.mkdir(parents=True, exist_ok=True)

        suffix = db_path.suffix or ".db"
        quarantined = quarantine_dir / f"{db_path.stem}_corrupt_{timestamp}{suffix}"
        try:
            shutil.move(str(db_path), str(quarantined))
            for sidecar_suffix in ("-wal", "-shm"):
                sidecar = Path(f"{db_path}{sidecar_suffix}")
                if sidecar.exists():
                    shutil.move(str(sidecar), str(quarantine_dir / f"{sidecar.name}_{timestamp}"))
            logger.warning("Quarantined corrupt database to %s", quarantined)
            return quarantined
        except OSError as exc:
            logger.error("Failed to quarantine corrupt database %s: %s", db_path, exc)
            return None

    def _configure_connection(self, connection: sqlite3.Connection) -> None:
        """WAL lets the API read the registry while the CLI registers sensors."""
        if self._database_path != _MEMORY_DATABASE:
            connection.execute("PRAGMA journal_mode=WAL")
            connection.execute("PRAGMA synchronous=NORMAL")
        connection.execute("PRAGMA busy_timeout=5000")
        connection.commit()

    def close_db(self, _e: Optional[BaseException] = None) -> None:
        """Close the calling thread's connection. Registered as app-context teardown."""
        connection: Optional[sqlite3.Connection] = getattr(self._local, "connection", None)
        if connection is not None:
            connection.close()
            delattr(self._local, "connection")

    def close(self) -> None:
        """Close every connection the handler still owns, including the shared in-memory one."""
        self.close_db()
        with self._shared_lock:
            if self._shared_connection is not None:
                self._shared_connection.close()
                self._shared_connection = None

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        conn = self.get_db()
        try:
            yield conn
        finally:
            conn.commit()

    # --- Schema ----------------------------------------------------------------
    def create_tables(self) -> None:
        """Creates the necessary tables in the database if they do not already exist."""
        self._create_sensor_tables()
        logger.debug("Database schema ready (%s)", self._database_path)
