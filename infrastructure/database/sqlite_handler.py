import logging
import shutil
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from flask import Flask

from infrastructure.database.ops.misting import MistingOperations
from infrastructure.database.ops.notifications import NotificationOperations
from infrastructure.database.ops.sensors import SensorReadingOperations
from infrastructure.database.ops.thermal_records import ThermalRecordOperations
from infrastructure.database.ops.users import UserOperations

logger = logging.getLogger(__name__)

MEMORY_DATABASE = ":memory:"


class SQLiteDatabaseHandler(
    UserOperations,
    SensorReadingOperations,
    MistingOperations,
    NotificationOperations,
    ThermalRecordOperations,
):
    """Thread-safe SQLite handler decoupled from Flask globals.

    Each thread gets its own connection. An in-memory database is shared
    through a single connection guarded by a lock instead, since separate
    ``:memory:`` connections would each see an empty database.
    """

    def __init__(self, database_path: str) -> None:
        self._database_path = database_path
        self._local = threading.local()
        self._shared: Optional[sqlite3.Connection] = None
        self._shared_lock = threading.RLock()

        if database_path != MEMORY_DATABASE:
            db_path = Path(database_path)
            if not db_path.parent.exists():
                db_path.parent.mkdir(parents=True, exist_ok=True)
                logger.info("Created database directory: %s", db_path.parent)

    @property
    def database_path(self) -> str:
        return self._database_path

    @property
    def is_memory(self) -> bool:
        return self._database_path == MEMORY_DATABASE

    # --- Lifecycle ------------------------------------------------------------
    def init_app(self, app: Flask | None = None) -> None:
        if app is not None:
            app.teardown_appcontext(self.close_db)
        self.create_tables()

    def get_db(self) -> sqlite3.Connection:
        if self.is_memory:
            with self._shared_lock:
                if self._shared is None:
                    self._shared = self._open_connection()
                return self._shared

        connection: Optional[sqlite3.Connection] = getattr(self._local, "connection", None)
        if connection is None:
            try:
                connection = self._open_connection()
            except sqlite3.DatabaseError as exc:
                if self._is_corruption_error(exc):
                    logger.error("Database appears corrupt (%s). Recreating a fresh database.", exc)
                    self._quarantine_corrupt_db()
                    connection = self._open_connection()
                    self._create_schema(connection)
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
            "malformed" in message
            or "file is not a database" in message
            or "file is encrypted or is not a database" in message
        )

    def _quarantine_corrupt_db(self) -> Optional[Path]:
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
        """WAL for concurrent dashboard reads while the ingest path writes."""
        if not self.is_memory:
            connection.execute("PRAGMA journal_mode=WAL")
            connection.execute("PRAGMA synchronous=NORMAL")
        connection.execute("PRAGMA foreign_keys=ON")
        connection.execute("PRAGMA temp_store=MEMORY")
        connection.execute("PRAGMA busy_timeout=5000")
        connection.commit()

    def close_db(self, _e: Optional[BaseException] = None) -> None:
        if self.is_memory:
            # Closing would drop the in-memory database; only close_all does that.
            return
        connection: Optional[sqlite3.Connection] = getattr(self._local, "connection", None)
        if connection is not None:
            connection.close()
            delattr(self._local, "connection")

    def close_all(self) -> None:
        """Release the current thread's connection and the shared in-memory one."""
        if self._shared is not None:
            with self._shared_lock:
                self._shared.close()
                self._shared = None
        connection: Optional[sqlite3.Connection] = getattr(self._local, "connection", None)
        if connection is not None:
            connection.close()
            delattr(self._local, "connection")

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        conn = self.get_db()
        if self.is_memory:
            with self._shared_lock:
                try:
                    yield conn
                finally:
                    conn.commit()
            return
        try:
            yield conn
        finally:
            conn.commit()

    def ping(self) -> bool:
        """Run ``SELECT 1``; used by the health endpoint."""
        try:
            self.get_db().execute("SELECT 1").fetchone()
            return True
        except sqlite3.Error as exc:
            logger.error("Database ping failed: %s", exc)
            return False

    # --- Schema ----------------------------------------------------------------
    def create_tables(self) -> None:
        """Creates the necessary tables in the database if they do not already exist."""
        with self.connection() as db:
            self._create_schema(db)
        logger.info("Database schema ready at %s", self._database_path)

    def _create_schema(self, db: sqlite3.Connection) -> None:
        db.execute(
            """
            CREATE TABLE IF NOT EXISTS Users (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                fullname TEXT NOT NULL,
                email TEXT UNIQUE NOT NULL COLLATE NOCASE,
                password_hash TEXT NOT NULL,
                role TEXT NOT NULL DEFAULT 'client',
                created_at TEXT NOT NULL
            )
            """
        )
        db.execute(
            """
            CREATE TABLE IF NOT EXISTS SensorReadings (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                temperature REAL,
                humidity REAL,
                water_level INTEGER,
                pump_on INTEGER,
                heat_index REAL,
                captured_at TEXT NOT NULL
            )
            """
        )
        db.execute(
            "CREATE INDEX IF NOT EXISTS idx_sensor_readings_captured ON SensorReadings(captured_at)"
        )
        db.execute(
            """
            CREATE TABLE IF NOT EXISTS MistingLogs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                started_at TEXT NOT NULL,
                ended_at TEXT,
                misting_type TEXT NOT NULL DEFAULT 'AUTO',
                start_temperature REAL,
                start_humidity REAL,
                start_heat_index REAL,
                start_water_level REAL,
                end_temperature REAL,
                end_humidity REAL,
                end_heat_index REAL,
                end_water_level REAL
            )
            """
        )
        db.execute("CREATE INDEX IF NOT EXISTS idx_misting_logs_started ON MistingLogs(started_at)")
        db.execute(
            """
            CREATE TABLE IF NOT EXISTS Notifications (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                kind TEXT NOT NULL,
                message TEXT NOT NULL,
                temperature REAL,
                humidity REAL,
                water_level REAL,
                pump_status INTEGER,
                mode TEXT NOT NULL DEFAULT 'AUTO',
                is_read INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL
            )
            """
        )
        db.execute("CREATE INDEX IF NOT EXISTS idx_notifications_created ON Notifications(created_at)")
        db.execute(
            """
            CREATE TABLE IF NOT EXISTS ThermalRecords (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                body_temp REAL NOT NULL,
                avg_temp REAL,
                min_temp REAL,
                weight REAL,
                age INTEGER,
                breed TEXT,
                last_fed TEXT,
                ambient_temp REAL,
                humidity REAL,
                health_status TEXT NOT NULL,
                notes TEXT,
                scanned_at TEXT NOT NULL
            )
            """
        )
        db.execute("CREATE INDEX IF NOT EXISTS idx_thermal_records_scanned ON ThermalRecords(scanned_at)")
