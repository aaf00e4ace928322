"""
History component models and serialization.

The whole log is stored as one JSON array of entries, newest first.
"""

from __future__ import annotations

from pydantic import TypeAdapter

from coatcalc.domain.entities import HistoryEntry

HISTORY_CAPACITY = 10
DEFAULT_STORAGE_KEY = "coating_calculator_history"
DEFAULT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

_entries_adapter = TypeAdapter(list[HistoryEntry])


def serialize_entries(entries: list[HistoryEntry]) -> str:
    """Encode entries as a JSON array, preserving order."""
    return _entries_adapter.dump_json(entries).decode("utf-8")


def deserialize_entries(blob: str | bytes) -> list[HistoryEntry]:
    """
    Decode a JSON array produced by serialize_entries.

    Raises pydantic.ValidationError (a ValueError) on malformed JSON or
    records that do not match the entry schema.
    """
    return _entries_adapter.validate_json(blob)
