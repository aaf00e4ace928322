from __future__ import annotations

from datetime import datetime

import pytest

from coatcalc.adapters.memory_slot import InMemorySlot
from coatcalc.domain.entities import CalculationInput
from coatcalc.errors import PersistenceError

# --- Mock Implementations ---


class MockClock:
    """Fixed clock for deterministic timestamps."""

    def __init__(self, fixed_time: datetime | None = None) -> None:
        self._time = fixed_time or datetime(2024, 6, 15, 12, 0, 0)

    def now(self) -> datetime:
        return self._time


class MockIdGenerator:
    """Counts up from ``start`` (or repeats it when ``step`` is 0)."""

    def __init__(self, start: int = 1000, step: int = 1) -> None:
        self._next = start
        self._step = step

    def next_id(self) -> int:
        value = self._next
        self._next += self._step
        return value


class FlakySlot(InMemorySlot):
    """In-memory slot whose reads/writes can be switched to fail."""

    def __init__(self, initial: str | None = None) -> None:
        super().__init__(initial)
        self.fail_reads = False
        self.fail_writes = False

    def read(self) -> str | None:
        if self.fail_reads:
            raise PersistenceError("disk unavailable")
        return super().read()

    def write(self, blob: str) -> None:
        if self.fail_writes:
            raise PersistenceError("quota exceeded")
        super().write(blob)


# --- Fixtures ---


@pytest.fixture
def clock() -> MockClock:
    return MockClock()


@pytest.fixture
def id_generator() -> MockIdGenerator:
    return MockIdGenerator()


@pytest.fixture
def slot() -> FlakySlot:
    return FlakySlot()


@pytest.fixture
def sample_input() -> CalculationInput:
    """The R6-2000H sample job."""
    return CalculationInput(
        project_label="R6-2000H",
        area_mm2=73834,
        primer_thickness_mm=0.04,
        topcoat_thickness_mm=0.14,
        density_kg_per_l=1.22,
        primer_ratio_a=1,
        primer_ratio_b=10,
        topcoat_ratio_a=1,
        topcoat_ratio_b=10,
    )


@pytest.fixture
def square_metre_input() -> CalculationInput:
    """1 m2, 0.1/0.2 mm, 1.5 kg/L, 4:1 and 2:1 ratios."""
    return CalculationInput(
        project_label="Panel A",
        area_mm2=1_000_000,
        primer_thickness_mm=0.1,
        topcoat_thickness_mm=0.2,
        density_kg_per_l=1.5,
        primer_ratio_a=4,
        primer_ratio_b=1,
        topcoat_ratio_a=2,
        topcoat_ratio_b=1,
    )
