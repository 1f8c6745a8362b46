"""Persistence layer - trigger-aware record stores."""

from triggerkit.persistence.adapter import RecordStore, SaveResult
from triggerkit.persistence.sqlite import SQLiteRecordStore

__all__ = ["RecordStore", "SQLiteRecordStore", "SaveResult"]
