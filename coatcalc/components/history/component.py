"""
History component - Bounded, persisted log of past calculations.

Key behaviors:
- Newest entry first, never more than ``capacity`` entries
- Every mutation rewrites the whole log to one slot
- A missing or corrupt slot loads as an empty log (logged, not fatal)
- A failed write keeps the in-memory mutation and raises PersistenceError
- Non-finite numbers are refused at record time so the log always reloads
"""

from __future__ import annotations

import logging
import math

from coatcalc.adapters.clock import SystemClock
from coatcalc.adapters.ids import TimestampIdGenerator
from coatcalc.components.calculator.models import ValidationError
from coatcalc.domain.entities import CalculationInput, CalculationResult, HistoryEntry
from coatcalc.errors import InvalidInputError, PersistenceError

from .models import (
    DEFAULT_TIMESTAMP_FORMAT,
    HISTORY_CAPACITY,
    deserialize_entries,
    serialize_entries,
)
from .ports import ClockPort, IdGeneratorPort, SlotPort

logger = logging.getLogger(__name__)

RESULT_FIELDS = (
    "primer_weight",
    "topcoat_weight",
    "primer_curing_agent",
    "topcoat_curing_agent",
    "total_weight",
)


def _unrecordable_fields(
    inp: CalculationInput, result: CalculationResult
) -> list[ValidationError]:
    """Stored numbers must be finite: JSON writes NaN/inf as null."""
    values = [("area_mm2", inp.area_mm2)]
    values += [(name, getattr(result, name)) for name in RESULT_FIELDS]

    return [
        ValidationError(
            field=name,
            code="not_finite",
            message=f"Field '{name}' must be a finite number to be recorded",
        )
        for name, value in values
        if not math.isfinite(value)
    ]


class HistoryStore:
    """
    Owns the history log and keeps its slot in sync.

    Not safe for concurrent mutation; a single controller should drive it.
    """

    def __init__(
        self,
        slot: SlotPort,
        *,
        clock: ClockPort | None = None,
        id_generator: IdGeneratorPort | None = None,
        capacity: int = HISTORY_CAPACITY,
        timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT,
    ) -> None:
        """
        Initialize the store and load whatever the slot holds.

        Args:
            slot: Durable slot for the serialized log
            clock: Source of display timestamps (default: system clock)
            id_generator: Source of candidate ids (default: epoch milliseconds)
            capacity: Maximum number of entries kept
            timestamp_format: strftime format for ``created_at``
        """
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")

        self._slot = slot
        self._clock = clock or SystemClock()
        self._ids = id_generator or TimestampIdGenerator()
        self._capacity = capacity
        self._timestamp_format = timestamp_format

        self._entries: list[HistoryEntry] = []
        self._last_id = 0
        self._dirty = False
        self.load_warning: str | None = None

        self.load()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def dirty(self) -> bool:
        """True while the in-memory log has changes the slot does not."""
        return self._dirty

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entry_id: object) -> bool:
        return any(e.id == entry_id for e in self._entries)

    # --- Loading / saving ---

    def load(self) -> list[HistoryEntry]:
        """
        Replace the in-memory log with the slot's contents.

        Never raises for unreadable or corrupt data: the log becomes empty
        and ``load_warning`` describes what happened.
        """
        self.load_warning = None
        entries: list[HistoryEntry] = []

        try:
            blob = self._slot.read()
        except (PersistenceError, OSError) as e:
            self._warn(f"History could not be read, starting empty: {e}")
            blob = None

        if blob:
            try:
                entries = deserialize_entries(blob)
            except ValueError as e:
                self._warn(f"History data is corrupt, starting empty: {e}")
                entries = []

        if len(entries) > self._capacity:
            logger.info(
                "Loaded %d history entries, keeping newest %d",
                len(entries),
                self._capacity,
            )
            entries = entries[: self._capacity]

        self._entries = entries
        self._last_id = max([e.id for e in entries] + [self._last_id])
        self._dirty = False
        return list(self._entries)

    def save(self) -> None:
        """
        Write the current log to the slot.

        Raises:
            PersistenceError: The slot rejected the write.
        """
        blob = serialize_entries(self._entries)
        try:
            self._slot.write(blob)
        except PersistenceError:
            raise
        except OSError as e:
            raise PersistenceError(f"History could not be written: {e}") from e
        self._dirty = False

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.load_warning = message

    def _next_id(self) -> int:
        candidate = self._ids.next_id()
        if candidate <= self._last_id:
            candidate = self._last_id + 1
        self._last_id = candidate
        return candidate

    # --- Operations ---

    def record(self, inp: CalculationInput, result: CalculationResult) -> HistoryEntry:
        """
        Prepend a new entry for ``inp``/``result`` and persist the log.

        Entries beyond capacity are dropped oldest first.

        Raises:
            InvalidInputError: The area or a result mass is not a finite
                number; nothing is recorded.
            PersistenceError: The write failed. The entry is kept in memory
                and attached to the error as ``entry``.
        """
        errors = _unrecordable_fields(inp, result)
        if errors:
            raise InvalidInputError(errors)

        entry = HistoryEntry(
            id=self._next_id(),
            created_at=self._clock.now().strftime(self._timestamp_format),
            project_label=inp.project_label,
            area_mm2=inp.area_mm2,
            total_weight=result.total_weight,
            result=result,
        )

        self._entries.insert(0, entry)
        evicted = len(self._entries) - self._capacity
        if evicted > 0:
            del self._entries[self._capacity :]
        self._dirty = True

        try:
            self.save()
        except PersistenceError as e:
            e.entry = entry
            raise

        logger.info(
            "Recorded history entry %d for %s (evicted %d)",
            entry.id,
            entry.project_label,
            max(evicted, 0),
        )
        return entry

    def list(self) -> list[HistoryEntry]:
        """Entries newest first."""
        return list(self._entries)

    def get(self, entry_id: int) -> HistoryEntry | None:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def delete(self, entry_id: int) -> bool:
        """
        Remove the entry with ``entry_id``.

        Returns False, without writing, when no such entry exists.

        Raises:
            PersistenceError: The entry was removed in memory but the write
                failed.
        """
        for index, entry in enumerate(self._entries):
            if entry.id == entry_id:
                del self._entries[index]
                self._dirty = True
                self.save()
                logger.info("Deleted history entry %d", entry_id)
                return True
        return False

    def clear(self) -> int:
        """Remove every entry and persist; returns how many were removed."""
        removed = len(self._entries)
        self._entries = []
        self._dirty = True
        self.save()
        logger.info("Cleared %d history entries", removed)
        return removed
