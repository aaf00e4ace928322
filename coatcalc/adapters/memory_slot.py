class InMemorySlot:
    """Process-local slot; contents vanish with the process."""

    def __init__(self, initial: str | None = None) -> None:
        self._blob = initial
        self.write_count = 0

    def read(self) -> str | None:
        return self._blob

    def write(self, blob: str) -> None:
        self._blob = blob
        self.write_count += 1
