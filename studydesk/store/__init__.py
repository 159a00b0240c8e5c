"""State store, snapshot persistence and side preferences."""

from studydesk.store.dashboard import SCHEDULING_TRIGGERS, DashboardStore
from studydesk.store.persistence import (
    JsonFileStorage,
    KeyValueStorage,
    MemoryStorage,
    SnapshotRepository,
)
from studydesk.store.preferences import BackupCredentials, FeedPreferences, ReaderPreferences
from studydesk.store.schema import SCHEMA_VERSION, decode_snapshot, encode_snapshot

__all__ = [
    "SCHEDULING_TRIGGERS",
    "SCHEMA_VERSION",
    "BackupCredentials",
    "DashboardStore",
    "FeedPreferences",
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "ReaderPreferences",
    "SnapshotRepository",
    "decode_snapshot",
    "encode_snapshot",
]
