from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from coatcalc.components.history.models import (
    DEFAULT_STORAGE_KEY,
    DEFAULT_TIMESTAMP_FORMAT,
    HISTORY_CAPACITY,
)


class HistoryRules(BaseModel):
    capacity: int = Field(default=HISTORY_CAPACITY, ge=1, le=1000)
    storage_key: str = Field(default=DEFAULT_STORAGE_KEY, min_length=1)
    timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT

class StorageRules(BaseModel):
    backend: Literal["memory", "file", "sqlite"] = "file"
    file_dir: str = "history"  # relative to the data dir
    db_name: str = "coatcalc.db"

class Rules(BaseModel):
    # unknown sections fail loudly; rounding is fixed at 4 places
    model_config = ConfigDict(extra="forbid")

    history: HistoryRules = Field(default_factory=HistoryRules)
    storage: StorageRules = Field(default_factory=StorageRules)
