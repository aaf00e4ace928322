import logging
import os
from pathlib import Path

from coatcalc.errors import PersistenceError

logger = logging.getLogger(__name__)


class FileSystemStore:
    def __init__(self, base_path: str | Path):
        self.base_path = Path(base_path).resolve()
        if not self.base_path.exists():
            os.makedirs(self.base_path, exist_ok=True)

    def _safe_path(self, path: str) -> Path:
        # Prevent traversal
        target = (self.base_path / path).resolve()
        if not target.is_relative_to(self.base_path):
            raise ValueError(f"Path traversal attempt detected: {path}")
        return target

    def save(self, name: str, data: bytes) -> str:
        """Save bytes atomically and return the path relative to the base."""
        target = self._safe_path(name)
        target.parent.mkdir(parents=True, exist_ok=True)
        # Write aside and swap so readers never see a half-written file
        tmp = target.with_name(target.name + ".tmp")
        with open(tmp, "wb") as f:
            f.write(data)
        os.replace(tmp, target)
        return str(target.relative_to(self.base_path))

    def get(self, path: str) -> bytes:
        """Retrieve bytes by path. Raises FileNotFoundError."""
        target = self._safe_path(path)
        if not target.exists():
            raise FileNotFoundError(f"File not found: {path}")
        with open(target, "rb") as f:
            return f.read()



class FileSlot:
    """History slot stored as ``<key>.json`` inside a FileSystemStore."""

    def __init__(self, store: FileSystemStore, key: str) -> None:
        self.store = store
        self.name = f"{key}.json"

    def read(self) -> str | None:
        try:
            data = self.store.get(self.name)
        except FileNotFoundError:
            return None
        except OSError as e:
            raise PersistenceError(f"Cannot read {self.name}: {e}") from e
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise PersistenceError(f"{self.name} is not valid UTF-8: {e}") from e

    def write(self, blob: str) -> None:
        try:
            self.store.save(self.name, blob.encode("utf-8"))
        except OSError as e:
            raise PersistenceError(f"Cannot write {self.name}: {e}") from e
        logger.debug("Wrote %d bytes to %s", len(blob), self.name)
