"""
CalculationService - Calculate, optionally record, and browse history.

Composes the calculator with a HistoryStore for a presentation layer.
A preview calculation (e.g. while the user types) passes ``record=False``;
an explicit calculation records the result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from coatcalc.components.calculator import (
    ChartSlice,
    compute,
    distribution,
    example_input,
)
from coatcalc.components.history import HistoryStore
from coatcalc.domain.entities import CalculationInput, CalculationResult, HistoryEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalculationOutcome:
    """A computed result, its chart slices and the history entry if recorded."""

    result: CalculationResult
    slices: list[ChartSlice] = field(default_factory=list)
    entry: HistoryEntry | None = None


class CalculationService:
    def __init__(self, store: HistoryStore) -> None:
        self._store = store

    @property
    def store(self) -> HistoryStore:
        return self._store

    def calculate(self, inp: CalculationInput, *, record: bool = True) -> CalculationOutcome:
        """
        Compute masses for ``inp`` and record them when ``record`` is set.

        Raises:
            InvalidInputError: ``inp`` violates a field constraint.
            PersistenceError: The result was recorded in memory but not saved.
        """
        result = compute(inp)
        entry = self._store.record(inp, result) if record else None
        return CalculationOutcome(result=result, slices=distribution(result), entry=entry)

    def calculate_mapping(self, data: dict[str, Any], *, record: bool = True) -> CalculationOutcome:
        """Same as calculate, from raw form data."""
        return self.calculate(CalculationInput.from_mapping(data), record=record)

    def example(self) -> CalculationInput:
        return example_input()

    def history(self) -> list[HistoryEntry]:
        return self._store.list()

    def open_entry(self, entry_id: int) -> CalculationOutcome | None:
        """Re-display a past result without recalculating."""
        entry = self._store.get(entry_id)
        if entry is None:
            return None
        return CalculationOutcome(
            result=entry.result, slices=distribution(entry.result), entry=entry
        )

    def delete_entry(self, entry_id: int) -> bool:
        return self._store.delete(entry_id)

    def clear_history(self) -> int:
        return self._store.clear()
