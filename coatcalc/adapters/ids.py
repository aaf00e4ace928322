from coatcalc.adapters.clock import SystemClock


class TimestampIdGenerator:
    """Ids are milliseconds since the epoch, bumped to stay strictly increasing."""

    def __init__(self, clock: SystemClock | None = None) -> None:
        self._clock = clock or SystemClock()
        self._last = 0

    def next_id(self) -> int:
        candidate = int(self._clock.now_utc().timestamp() * 1000)
        if candidate <= self._last:
            candidate = self._last + 1
        self._last = candidate
        return candidate
