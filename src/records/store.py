"""SQLite persistence for user records (moods, todos, media, habits, journals).

Every record is a JSON document keyed by user id and record type. Queries are
always scoped to one user; there is no cross-user read path.
"""

import json
import re
import sqlite3
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

import structlog

from db import wal_connect, write_transaction
from shared_types import RecordType

from .models import StoredRecord

logger = structlog.get_logger()

_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_COLUMNS = {"created_at", "updated_at"}


class RecordBackend(Protocol):
    """What the pipeline needs from a record store."""

    def create(self, user_id: str, record_type: RecordType, record: dict) -> StoredRecord: ...

    def find(
        self,
        user_id: str,
        record_type: RecordType,
        filters: dict | None = None,
        limit: int = 50,
        **kwargs: Any,
    ) -> list[StoredRecord]: ...

    def update_one(
        self, user_id: str, record_type: RecordType, record_id: str, patch: dict
    ) -> StoredRecord | None: ...


def _field_expr(name: str) -> str:
    """SQL expression for a column or a top-level JSON field."""
    if not _FIELD_RE.match(name):
        raise ValueError(f"Invalid field name: {name}")
    if name in _COLUMNS:
        return name
    return f"json_extract(data, '$.{name}')"


def _sql_value(value: Any) -> Any:
    # json_extract yields 0/1 for JSON booleans
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class RecordStore:
    """Per-user document store on SQLite."""

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path).expanduser()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        with wal_connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS records (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    record_type TEXT NOT NULL,
                    data TEXT NOT NULL DEFAULT '{}',
                    created_at TIMESTAMP NOT NULL,
                    updated_at TIMESTAMP NOT NULL
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_records_user_type
                ON records(user_id, record_type, created_at)
            """)

    def create(self, user_id: str, record_type: RecordType, record: dict) -> StoredRecord:
        """Insert a new record and return it with its generated id."""
        now = datetime.now()
        stored = StoredRecord(
            id=uuid.uuid4().hex[:16],
            user_id=user_id,
            record_type=RecordType(record_type),
            data=dict(record),
            created_at=now,
            updated_at=now,
        )
        with wal_connect(self.db_path) as conn:
            conn.execute(
                """INSERT INTO records (id, user_id, record_type, data, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (
                    stored.id,
                    user_id,
                    stored.record_type.value,
                    json.dumps(stored.data, default=str),
                    now.isoformat(),
                    now.isoformat(),
                ),
            )
        logger.debug("records.created", record_type=stored.record_type.value, id=stored.id)
        return stored

    def get(self, user_id: str, record_type: RecordType, record_id: str) -> StoredRecord | None:
        with wal_connect(self.db_path, row_factory=True) as conn:
            row = conn.execute(
                "SELECT * FROM records WHERE id = ? AND user_id = ? AND record_type = ?",
                (record_id, user_id, RecordType(record_type).value),
            ).fetchone()
        return self._row_to_record(row) if row else None

    def find(
        self,
        user_id: str,
        record_type: RecordType,
        filters: dict | None = None,
        limit: int = 50,
        since: datetime | None = None,
        touched_since: datetime | None = None,
        order_by: str = "created_at",
        descending: bool = True,
    ) -> list[StoredRecord]:
        """Find records by equality filters on data fields.

        Args:
            filters: {field: value}; a None value matches missing/null fields.
            since: Only records created at or after this time.
            touched_since: Only records updated at or after this time.
            order_by: Column (created_at/updated_at) or data field name.
        """
        where, params = self._where(user_id, record_type, filters)
        if since is not None:
            where.append("created_at >= ?")
            params.append(since.isoformat())
        if touched_since is not None:
            where.append("updated_at >= ?")
            params.append(touched_since.isoformat())

        direction = "DESC" if descending else "ASC"
        sql = (
            f"SELECT * FROM records WHERE {' AND '.join(where)} "
            f"ORDER BY {_field_expr(order_by)} {direction}, rowid {direction} LIMIT ?"
        )
        params.append(limit)

        with wal_connect(self.db_path, row_factory=True) as conn:
            rows = conn.execute(sql, params).fetchall()
        return [self._row_to_record(r) for r in rows]

    def count(self, user_id: str, record_type: RecordType, filters: dict | None = None) -> int:
        where, params = self._where(user_id, record_type, filters)
        with wal_connect(self.db_path) as conn:
            return conn.execute(
                f"SELECT COUNT(*) FROM records WHERE {' AND '.join(where)}", params
            ).fetchone()[0]

    def update_one(
        self, user_id: str, record_type: RecordType, record_id: str, patch: dict
    ) -> StoredRecord | None:
        """Shallow-merge patch into one record's data. Returns None if not found."""
        with write_transaction(self.db_path) as conn:
            row = conn.execute(
                "SELECT * FROM records WHERE id = ? AND user_id = ? AND record_type = ?",
                (record_id, user_id, RecordType(record_type).value),
            ).fetchone()
            if row is None:
                return None
            record = self._row_to_record(row)
            record.data.update(patch)
            record.updated_at = datetime.now()
            conn.execute(
                "UPDATE records SET data = ?, updated_at = ? WHERE id = ?",
                (json.dumps(record.data, default=str), record.updated_at.isoformat(), record_id),
            )
        return record

    @staticmethod
    def _where(
        user_id: str, record_type: RecordType, filters: dict | None
    ) -> tuple[list[str], list]:
        where = ["user_id = ?", "record_type = ?"]
        params: list = [user_id, RecordType(record_type).value]
        for key, value in (filters or {}).items():
            expr = _field_expr(key)
            if value is None:
                where.append(f"{expr} IS NULL")
            else:
                where.append(f"{expr} = ?")
                params.append(_sql_value(value))
        return where, params

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> StoredRecord:
        d = dict(row)
        return StoredRecord(
            id=d["id"],
            user_id=d["user_id"],
            record_type=RecordType(d["record_type"]),
            data=json.loads(d["data"] or "{}"),
            created_at=datetime.fromisoformat(d["created_at"]),
            updated_at=datetime.fromisoformat(d["updated_at"]),
        )
