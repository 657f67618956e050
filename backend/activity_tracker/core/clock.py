import time


class Clock:
    """Source of the current time in epoch milliseconds."""

    def now_ms(self) -> int:
        raise NotImplementedError


class SystemClock(Clock):
    def now_ms(self) -> int:
        return int(time.time() * 1000)
