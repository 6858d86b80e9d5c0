"""SQLite persistence for per-user preferences.

Every mutation goes through ``mutate()``, which holds the database write lock
across read, change and write. Two concurrent outcome events for the same
user therefore apply one after the other instead of losing an increment.
"""

import json
import sqlite3
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

import structlog

from db import wal_connect, write_transaction

from .models import UserPreferences

logger = structlog.get_logger()

T = TypeVar("T")


class PreferenceStore:
    """One row of preferences per user, created lazily with defaults."""

    def __init__(
        self,
        db_path: str | Path,
        defaults: Callable[[str], UserPreferences] = UserPreferences,
    ):
        self.db_path = Path(db_path).expanduser()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._defaults = defaults
        self._init_db()

    def _init_db(self):
        with wal_connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS user_preferences (
                    user_id TEXT PRIMARY KEY,
                    data TEXT NOT NULL,
                    version INTEGER NOT NULL DEFAULT 1,
                    last_updated TIMESTAMP NOT NULL
                )
            """)

    def get(self, user_id: str) -> UserPreferences | None:
        """Stored preferences, or None if the user has none yet."""
        with wal_connect(self.db_path, row_factory=True) as conn:
            row = conn.execute(
                "SELECT data FROM user_preferences WHERE user_id = ?", (user_id,)
            ).fetchone()
        return self._row_to_prefs(row) if row else None

    def get_or_create(self, user_id: str) -> UserPreferences:
        prefs = self.get(user_id)
        if prefs is not None:
            return prefs
        prefs, _ = self.mutate(user_id, lambda p: None)
        return prefs

    def mutate(
        self, user_id: str, change: Callable[[UserPreferences], T]
    ) -> tuple[UserPreferences, T]:
        """Apply change() to the user's preferences under the write lock.

        Missing preferences are created from defaults first. If change()
        raises, nothing is written.
        """
        with write_transaction(self.db_path) as conn:
            row = conn.execute(
                "SELECT data FROM user_preferences WHERE user_id = ?", (user_id,)
            ).fetchone()
            if row is None:
                prefs = self._defaults(user_id)
                logger.info("preferences.created", user_id=user_id)
            else:
                prefs = self._row_to_prefs(row)

            value = change(prefs)
            self._write(conn, prefs)
        return prefs, value

    def save(self, prefs: UserPreferences) -> None:
        """Overwrite the stored preferences as-is."""
        with write_transaction(self.db_path) as conn:
            self._write(conn, prefs)

    def delete(self, user_id: str) -> bool:
        with wal_connect(self.db_path) as conn:
            cur = conn.execute("DELETE FROM user_preferences WHERE user_id = ?", (user_id,))
            return cur.rowcount > 0

    @staticmethod
    def _write(conn: sqlite3.Connection, prefs: UserPreferences) -> None:
        conn.execute(
            """INSERT INTO user_preferences (user_id, data, version, last_updated)
               VALUES (?, ?, ?, ?)
               ON CONFLICT(user_id) DO UPDATE SET
                   data=excluded.data,
                   version=excluded.version,
                   last_updated=excluded.last_updated""",
            (
                prefs.user_id,
                json.dumps(prefs.to_dict()),
                prefs.version,
                prefs.last_updated.isoformat(),
            ),
        )

    @staticmethod
    def _row_to_prefs(row: sqlite3.Row) -> UserPreferences:
        return UserPreferences.from_dict(json.loads(row["data"]))
