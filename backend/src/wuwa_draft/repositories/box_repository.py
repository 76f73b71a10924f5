"""DuckDB-based storage for player boxes."""

import json
import logging
from pathlib import Path

import duckdb

logger = logging.getLogger(__name__)


class BoxRepository:
    """Data access layer - per-player boxes keyed by Discord id."""

    def __init__(self, database_path: str | Path):
        """Initialize with path to the DuckDB file, creating it if needed.

        Args:
            database_path: Path to the boxes database file
        """
        self._db_path = Path(database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

        with duckdb.connect(str(self._db_path)) as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS boxes (
                    discord_id VARCHAR PRIMARY KEY,
                    box VARCHAR NOT NULL,
                    updated_at TIMESTAMP DEFAULT current_timestamp
                )
                """
            )
        logger.info(f"BoxRepository: Using {self._db_path}")

    def get_box(self, discord_id: str) -> list:
        """Box of a player, or an empty list if none was saved."""
        with duckdb.connect(str(self._db_path)) as conn:
            row = conn.execute(
                "SELECT box FROM boxes WHERE discord_id = ?", [discord_id]
            ).fetchone()
        if row is None:
            return []
        return json.loads(row[0])

    def save_box(self, discord_id: str, box: list) -> None:
        """Insert or replace the box of a player."""
        with duckdb.connect(str(self._db_path)) as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO boxes (discord_id, box, updated_at)
                VALUES (?, ?, current_timestamp)
                """,
                [discord_id, json.dumps(box)],
            )

