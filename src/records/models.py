"""Data models for persisted user records."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from shared_types import RecordType


@dataclass
class StoredRecord:
    id: str
    user_id: str
    record_type: RecordType
    data: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def to_dict(self) -> dict:
        """Flat JSON-friendly view: record fields merged over the data payload."""
        return {
            **self.data,
            "id": self.id,
            "user_id": self.user_id,
            "record_type": self.record_type.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
