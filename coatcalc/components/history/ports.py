"""
History component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class SlotPort(Protocol):
    """A single named durable slot holding the whole serialized history."""

    def read(self) -> str | None:
        """
        Return the stored blob, or None if nothing was ever written.

        Raises PersistenceError if the backend cannot be read.
        """
        ...

    def write(self, blob: str) -> None:
        """
        Replace the stored blob.

        Raises PersistenceError if the backend cannot be written.
        """
        ...


class ClockPort(Protocol):
    """Port for time operations - enables deterministic testing."""

    def now(self) -> datetime:
        """Get current local time (used for display timestamps)."""
        ...


class IdGeneratorPort(Protocol):
    def next_id(self) -> int: ...
