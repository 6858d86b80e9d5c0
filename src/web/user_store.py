"""Registry of users who have authenticated against the API."""

import os
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import structlog

from db import wal_connect

logger = structlog.get_logger()

_DEFAULT_DB_PATH = Path(os.environ.get("STEWARD_HOME", Path.home() / "steward")) / "users.db"


def _get_conn(db_path: Path | None = None) -> sqlite3.Connection:
    path = db_path or _DEFAULT_DB_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    return wal_connect(path, row_factory=True)


def init_db(db_path: Path | None = None) -> None:
    """Create tables if they don't exist."""
    conn = _get_conn(db_path)
    try:
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                email TEXT,
                name TEXT,
                created_at TIMESTAMP NOT NULL,
                last_seen_at TIMESTAMP
            );
        """)
        conn.commit()
    finally:
        conn.close()


def get_or_create_user(
    user_id: str,
    email: str | None = None,
    name: str | None = None,
    db_path: Path | None = None,
) -> dict[str, Any]:
    """Upsert user on every authenticated request. Returns user dict."""
    now = datetime.now(timezone.utc).isoformat()
    conn = _get_conn(db_path)
    try:
        row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        if row:
            conn.execute(
                """UPDATE users SET email = COALESCE(?, email), name = COALESCE(?, name),
                   last_seen_at = ? WHERE id = ?""",
                (email, name, now, user_id),
            )
        else:
            conn.execute(
                "INSERT INTO users (id, email, name, created_at, last_seen_at) VALUES (?, ?, ?, ?, ?)",
                (user_id, email, name, now, now),
            )
            logger.info("users.registered", user_id=user_id)
        conn.commit()
        row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        return dict(row)
    finally:
        conn.close()
