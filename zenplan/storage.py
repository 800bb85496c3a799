from __future__ import annotations

import logging

from sqlalchemy import create_engine, text as sql_text
from sqlalchemy.engine import Engine

from zenplan.constants import LOCAL_STORE_TABLE

logger = logging.getLogger(__name__)


class KeyValueStore:
    """Synchronous string key/value store backed by a single SQLite table."""

    def __init__(self, storage_url: str):
        self.storage_url = storage_url
        self._engine: Engine | None = None

    def _get_engine(self) -> Engine:
        if self._engine is None:
            engine = create_engine(self.storage_url, future=True)
            with engine.begin() as conn:
                conn.execute(
                    sql_text(
                        f"""
                        CREATE TABLE IF NOT EXISTS {LOCAL_STORE_TABLE} (
                            key TEXT PRIMARY KEY,
                            value TEXT
                        )
                        """
                    )
                )
            self._engine = engine
        return self._engine

    def get_item(self, key: str) -> str | None:
        with self._get_engine().connect() as conn:
            row = conn.execute(
                sql_text(f"SELECT value FROM {LOCAL_STORE_TABLE} WHERE key = :key"),
                {"key": key},
            ).fetchone()
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        with self._get_engine().begin() as conn:
            conn.execute(
                sql_text(
                    f"INSERT INTO {LOCAL_STORE_TABLE} (key, value) VALUES (:key, :value) "
                    "ON CONFLICT(key) DO UPDATE SET value=EXCLUDED.value"
                ),
                {"key": key, "value": value},
            )

    def remove_item(self, key: str) -> None:
        with self._get_engine().begin() as conn:
            conn.execute(
                sql_text(f"DELETE FROM {LOCAL_STORE_TABLE} WHERE key = :key"),
                {"key": key},
            )

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            logger.debug("Closed local store %s", self.storage_url)
