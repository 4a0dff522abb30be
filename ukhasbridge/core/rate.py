import time
from typing import Callable, Optional

from ukhasbridge.core.line_encoder import rate_line


def wall_clock_minute() -> int:
    return int(time.time() // 60)


class RateCounter:
    """Counts published packets per wall-clock minute.

    ``record_publish()`` is called once per successful publish and returns the
    ``packets_per_minute`` record for the previous minute when the minute has
    rolled over, else None. The first minute observed never produces a record.
    """

    def __init__(self, clock: Callable[[], int] = wall_clock_minute):
        self._clock = clock
        self.count = 0
        self.minute: Optional[int] = None

    def record_publish(self) -> Optional[str]:
        now = self._clock()
        if self.minute is None:
            self.minute = now
            self.count = 1
            return None
        if now == self.minute:
            self.count += 1
            return None
        line = rate_line(self.count)
        self.minute = now
        self.count = 1
        return line
