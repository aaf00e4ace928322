"""
Error types raised by the calculator and the history store.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from coatcalc.components.calculator.models import ValidationError
    from coatcalc.domain.entities import HistoryEntry


class CoatCalcError(Exception):
    """Base class for coatcalc errors."""


class InvalidInputError(CoatCalcError, ValueError):
    """Raised when a calculation input violates a field constraint."""

    def __init__(self, errors: list[ValidationError]) -> None:
        self.errors = list(errors)
        detail = "; ".join(e.message for e in self.errors) or "invalid input"
        super().__init__(f"Invalid calculation input: {detail}")

    @property
    def fields(self) -> list[str]:
        return [e.field for e in self.errors]


class PersistenceError(CoatCalcError):
    """Raised when the durable history slot cannot be read or written."""

    def __init__(self, message: str, *, entry: HistoryEntry | None = None) -> None:
        self.entry = entry
        super().__init__(message)
