import sqlite3
import logging
import asyncio

from nibe_stats.domain.errors import PersistenceFailure
from nibe_stats.domain.metrics import Measurement, OperationResult

logger = logging.getLogger(__name__)

# Measurement field -> column
COLUMNS = {
    "outdoor_temp": "outdoor_temp",
    "room_temp": "room_temp",
    "return_temp": "return_temp",
    "calculated_flow_temp": "calculated_flow_temp",
    "heat_medium_flow_temp": "heat_medium_flow",
    "electrical_addition_power": "electrical_addition_power",
}


class SqliteAdapter:
    def __init__(self, db_path: str, scale_factor: float = 10.0):
        self.db_path = db_path
        self.scale_factor = scale_factor

    async def connect(self) -> None:
        await asyncio.to_thread(self._init_db)
        logger.info(f"Connected to database {self.db_path}")

    def _init_db(self):
        """Initialize the database schema synchronously."""
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS measurements (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        outdoor_temp REAL,
                        room_temp REAL,
                        return_temp REAL,
                        calculated_flow_temp REAL,
                        heat_medium_flow REAL,
                        electrical_addition_power REAL,
                        ts TEXT NOT NULL
                    )
                """)
                conn.commit()
        except Exception as e:
            logger.error(f"Failed to initialize SQLite DB: {e}")
            raise e

    async def save_measurement(self, measurement: Measurement) -> OperationResult:
        """Insert one measurement row. Failures are logged and returned."""
        try:
            row_id = await asyncio.to_thread(self._save_measurement_sync, measurement)
        except PersistenceFailure as e:
            logger.error(f"Failed to save measurement to SQLite: {e}")
            return OperationResult.failure(e)

        logger.info(f"Inserted measurement row {row_id}")
        return OperationResult.success()

    def _save_measurement_sync(self, measurement: Measurement) -> int:
        values = measurement.scaled_values(self.scale_factor)
        columns = [COLUMNS[field] for field in values] + ["ts"]
        params = list(values.values()) + [measurement.created.isoformat()]
        placeholders = ", ".join("?" for _ in columns)

        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.execute(
                    f"INSERT INTO measurements ({', '.join(columns)}) VALUES ({placeholders})",
                    tuple(params),
                )
                conn.commit()
                return cursor.lastrowid
        except sqlite3.Error as e:
            raise PersistenceFailure(str(e)) from e

    async def close(self) -> None:
        # Connections are opened per statement
        pass
