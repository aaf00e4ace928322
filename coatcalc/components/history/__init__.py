"""
History component - Bounded, persisted log of past calculations.

Keeps the newest entries first, capped at a fixed capacity, and rewrites
the whole log to a single durable slot on every change.
"""

from .component import HistoryStore
from .models import (
    DEFAULT_STORAGE_KEY,
    DEFAULT_TIMESTAMP_FORMAT,
    HISTORY_CAPACITY,
    deserialize_entries,
    serialize_entries,
)
from .ports import ClockPort, IdGeneratorPort, SlotPort

__all__ = [
    # Store
    "HistoryStore",
    # Serialization
    "serialize_entries",
    "deserialize_entries",
    # Ports
    "SlotPort",
    "ClockPort",
    "IdGeneratorPort",
    # Constants
    "HISTORY_CAPACITY",
    "DEFAULT_STORAGE_KEY",
    "DEFAULT_TIMESTAMP_FORMAT",
]
