"""
HistoryStore tests.

Bounding, ordering, id uniqueness, persistence and degraded loading.
"""

from __future__ import annotations

import json
import logging
import math

import pytest

from coatcalc.components.calculator import compute
from coatcalc.components.history import (
    HISTORY_CAPACITY,
    HistoryStore,
    deserialize_entries,
    serialize_entries,
)
from coatcalc.domain.entities import CalculationInput, CalculationResult, HistoryEntry
from coatcalc.errors import InvalidInputError, PersistenceError


class RepeatingIdGenerator:
    """Always proposes the same id, like two clicks in the same millisecond."""

    def __init__(self, value: int) -> None:
        self.value = value

    def next_id(self) -> int:
        return self.value


def make_entry(entry_id: int, label: str = "Old job") -> HistoryEntry:
    result = CalculationResult(
        primer_weight=0.1,
        topcoat_weight=0.2,
        primer_curing_agent=0.01,
        topcoat_curing_agent=0.02,
        total_weight=0.33,
    )
    return HistoryEntry(
        id=entry_id,
        created_at="2024-01-01 08:00:00",
        project_label=label,
        area_mm2=5000.0,
        total_weight=result.total_weight,
        result=result,
    )


@pytest.fixture
def store(slot, clock, id_generator) -> HistoryStore:
    return HistoryStore(slot, clock=clock, id_generator=id_generator)


def record_many(store: HistoryStore, inp: CalculationInput, count: int) -> list[HistoryEntry]:
    result = compute(inp)
    return [
        store.record(inp.model_copy(update={"project_label": f"Job {i}"}), result)
        for i in range(count)
    ]


class TestRecord:
    def test_record_builds_entry(self, store, sample_input) -> None:
        result = compute(sample_input)

        entry = store.record(sample_input, result)

        assert entry.id == 1000
        assert entry.created_at == "2024-06-15 12:00:00"
        assert entry.project_label == "R6-2000H"
        assert entry.area_mm2 == 73834
        assert entry.total_weight == result.total_weight
        assert entry.result == result

    def test_newest_first(self, store, sample_input) -> None:
        entries = record_many(store, sample_input, 3)

        assert store.list() == list(reversed(entries))

    def test_bounded_to_capacity(self, store, sample_input) -> None:
        entries = record_many(store, sample_input, HISTORY_CAPACITY + 3)

        listed = store.list()
        assert len(listed) == HISTORY_CAPACITY
        assert listed == list(reversed(entries))[:HISTORY_CAPACITY]
        assert entries[0].id not in store

    def test_custom_capacity(self, slot, clock, id_generator, sample_input) -> None:
        store = HistoryStore(slot, clock=clock, id_generator=id_generator, capacity=2)
        record_many(store, sample_input, 5)

        assert [e.project_label for e in store.list()] == ["Job 4", "Job 3"]

    def test_capacity_must_be_positive(self, slot) -> None:
        with pytest.raises(ValueError):
            HistoryStore(slot, capacity=0)

    def test_persists_full_log(self, store, slot, sample_input) -> None:
        record_many(store, sample_input, 2)

        assert deserialize_entries(slot.read()) == store.list()
        assert slot.write_count == 2
        assert store.dirty is False

    def test_custom_timestamp_format(self, slot, clock, sample_input) -> None:
        store = HistoryStore(slot, clock=clock, timestamp_format="%d/%m/%Y %H:%M")
        entry = store.record(sample_input, compute(sample_input))
        assert entry.created_at == "15/06/2024 12:00"

    def test_list_is_a_copy(self, store, sample_input) -> None:
        record_many(store, sample_input, 1)
        store.list().clear()
        assert len(store) == 1


class TestIds:
    def test_repeated_candidate_still_unique(self, slot, clock, sample_input) -> None:
        store = HistoryStore(slot, clock=clock, id_generator=RepeatingIdGenerator(42))
        entries = record_many(store, sample_input, 4)

        assert [e.id for e in entries] == [42, 43, 44, 45]

    def test_ids_continue_past_loaded_entries(self, slot, clock, sample_input) -> None:
        slot.write(serialize_entries([make_entry(5000)]))
        store = HistoryStore(slot, clock=clock, id_generator=RepeatingIdGenerator(1))

        entry = store.record(sample_input, compute(sample_input))

        assert entry.id == 5001

    def test_deleted_ids_not_reused(self, store, sample_input) -> None:
        first = record_many(store, sample_input, 1)[0]
        store.delete(first.id)

        second = store.record(sample_input, compute(sample_input))

        assert second.id != first.id

    def test_default_generator_is_timestamp_based(self, slot, clock, sample_input) -> None:
        store = HistoryStore(slot, clock=clock)
        a, b = record_many(store, sample_input, 2)

        # epoch milliseconds are well past 10^12 today
        assert a.id > 10**12
        assert b.id > a.id


class TestLookupAndDelete:
    def test_get(self, store, sample_input) -> None:
        entries = record_many(store, sample_input, 2)

        assert store.get(entries[0].id) == entries[0]
        assert store.get(999_999) is None

    def test_delete_existing(self, store, slot, sample_input) -> None:
        entries = record_many(store, sample_input, 3)
        target = entries[1]

        assert store.delete(target.id) is True

        assert store.get(target.id) is None
        assert len(store.list()) == 2
        assert target.id not in {e.id for e in deserialize_entries(slot.read())}

    def test_delete_unknown(self, store, slot, sample_input) -> None:
        record_many(store, sample_input, 2)
        before = store.list()
        writes = slot.write_count

        assert store.delete(123) is False

        assert store.list() == before
        assert slot.write_count == writes

    def test_clear(self, store, slot, sample_input) -> None:
        record_many(store, sample_input, 3)

        assert store.clear() == 3

        assert store.list() == []
        assert deserialize_entries(slot.read()) == []


class TestLoad:
    def test_reload_round_trips(self, store, slot, clock, sample_input) -> None:
        record_many(store, sample_input, 4)

        reloaded = HistoryStore(slot, clock=clock)

        assert reloaded.list() == store.list()
        assert reloaded.load_warning is None

    def test_empty_slot(self, store) -> None:
        assert store.list() == []
        assert store.load_warning is None

    @pytest.mark.parametrize(
        "blob",
        [
            "not json at all",
            '{"id": 1}',
            '[{"id": "abc"}]',
        ],
    )
    def test_corrupt_slot_loads_empty(self, slot, blob, caplog) -> None:
        slot.write(blob)

        with caplog.at_level(logging.WARNING):
            store = HistoryStore(slot)

        assert store.list() == []
        assert store.load_warning is not None
        assert "corrupt" in caplog.text

    def test_unreadable_slot_loads_empty(self, slot) -> None:
        slot.fail_reads = True

        store = HistoryStore(slot)

        assert store.list() == []
        assert "could not be read" in store.load_warning

    def test_oversized_log_truncated_to_newest(self, slot) -> None:
        stored = [make_entry(i, f"Job {i}") for i in range(20, 5, -1)]
        slot.write(serialize_entries(stored))

        store = HistoryStore(slot)

        assert store.list() == stored[:HISTORY_CAPACITY]

    def test_load_replaces_memory(self, store, slot, sample_input) -> None:
        record_many(store, sample_input, 2)
        slot.write(json.dumps([]))

        assert store.load() == []
        assert len(store) == 0


class TestWriteFailure:
    def test_record_reports_failure(self, store, slot, sample_input) -> None:
        slot.fail_writes = True
        result = compute(sample_input)

        with pytest.raises(PersistenceError) as exc_info:
            store.record(sample_input, result)

        entry = exc_info.value.entry
        assert entry is not None
        assert store.list() == [entry]
        assert store.dirty is True
        assert slot.read() is None

    def test_save_retries(self, store, slot, sample_input) -> None:
        slot.fail_writes = True
        with pytest.raises(PersistenceError):
            store.record(sample_input, compute(sample_input))

        slot.fail_writes = False
        store.save()

        assert store.dirty is False
        assert deserialize_entries(slot.read()) == store.list()

    def test_delete_reports_failure(self, store, slot, sample_input) -> None:
        entry = record_many(store, sample_input, 1)[0]
        slot.fail_writes = True

        with pytest.raises(PersistenceError):
            store.delete(entry.id)

        assert store.get(entry.id) is None
        assert store.dirty is True

    def test_os_error_from_custom_slot_is_wrapped(self, clock, sample_input) -> None:
        class BrokenSlot:
            def read(self) -> str | None:
                return None

            def write(self, blob: str) -> None:
                raise OSError("read-only file system")

        store = HistoryStore(BrokenSlot(), clock=clock)

        with pytest.raises(PersistenceError, match="read-only"):
            store.record(sample_input, compute(sample_input))

    def test_os_error_on_read_loads_empty(self, clock) -> None:
        class UnreadableSlot:
            def read(self) -> str | None:
                raise OSError("permission denied")

            def write(self, blob: str) -> None:
                pass

        store = HistoryStore(UnreadableSlot(), clock=clock)

        assert store.list() == []
        assert "permission denied" in store.load_warning


class TestNonFiniteValues:
    @pytest.mark.parametrize("value", [math.nan, math.inf])
    def test_non_finite_area_not_recorded(self, store, slot, sample_input, value) -> None:
        result = compute(sample_input)
        kept = record_many(store, sample_input, 2)
        writes = slot.write_count
        bad = sample_input.model_copy(update={"area_mm2": value})

        with pytest.raises(InvalidInputError) as exc_info:
            store.record(bad, result)

        assert exc_info.value.fields == ["area_mm2"]
        assert store.list() == list(reversed(kept))
        assert slot.write_count == writes

    def test_non_finite_result_not_recorded(self, store, sample_input) -> None:
        result = compute(sample_input).model_copy(update={"total_weight": math.nan})

        with pytest.raises(InvalidInputError) as exc_info:
            store.record(sample_input, result)

        assert exc_info.value.fields == ["total_weight"]
        assert len(store) == 0

    def test_log_reloads_after_rejected_entry(self, store, slot, clock, sample_input) -> None:
        kept = record_many(store, sample_input, 2)
        with pytest.raises(InvalidInputError):
            store.record(
                sample_input.model_copy(update={"area_mm2": math.nan}),
                compute(sample_input),
            )

        reloaded = HistoryStore(slot, clock=clock)

        assert reloaded.list() == list(reversed(kept))
        assert reloaded.load_warning is None
