from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from coatcalc.adapters.fs.filestore import FileSlot, FileSystemStore
from coatcalc.adapters.memory_slot import InMemorySlot
from coatcalc.adapters.sqlite.kv import SQLiteSlot
from coatcalc.components.history import (
    ClockPort,
    HistoryStore,
    IdGeneratorPort,
    SlotPort,
)
from coatcalc.rules.models import Rules
from coatcalc.services.calculation import CalculationService

DATA_DIR_ENV = "COATCALC_DATA_DIR"

logger = logging.getLogger(__name__)


def configure_logging(level: int = logging.INFO) -> None:
    """Application-side logging setup; the library itself adds no handlers."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_slot(rules: Rules, data_dir: str | Path) -> SlotPort:
    storage = rules.storage
    key = rules.history.storage_key

    if storage.backend == "memory":
        return InMemorySlot()
    if storage.backend == "sqlite":
        Path(data_dir).mkdir(parents=True, exist_ok=True)
        return SQLiteSlot(str(Path(data_dir) / storage.db_name), key)
    return FileSlot(FileSystemStore(Path(data_dir) / storage.file_dir), key)


@dataclass
class ServiceContext:
    rules: Rules
    slot: SlotPort
    history_store: HistoryStore
    calculation_service: CalculationService

    @classmethod
    def create(
        cls,
        rules: Rules,
        data_dir: str | Path | None = None,
        *,
        slot: SlotPort | None = None,
        clock: ClockPort | None = None,
        id_generator: IdGeneratorPort | None = None,
    ) -> ServiceContext:
        if data_dir is None:
            data_dir = os.environ.get(DATA_DIR_ENV, ".")

        if slot is None:
            slot = create_slot(rules, data_dir)

        store = HistoryStore(
            slot,
            clock=clock,
            id_generator=id_generator,
            capacity=rules.history.capacity,
            timestamp_format=rules.history.timestamp_format,
        )
        service = CalculationService(store)
        logger.info(
            "coatcalc ready (backend=%s, capacity=%d, entries=%d)",
            rules.storage.backend,
            rules.history.capacity,
            len(store),
        )
        return cls(
            rules=rules,
            slot=slot,
            history_store=store,
            calculation_service=service,
        )
