"""User record persistence: the store the extraction gate writes into."""

from .models import StoredRecord
from .store import RecordBackend, RecordStore

__all__ = ["StoredRecord", "RecordBackend", "RecordStore"]
