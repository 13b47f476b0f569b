from __future__ import annotations

import time
from typing import Callable


class EventClock:
    """Monotonic cursor measuring the time since the last recorded event."""

    def __init__(self, now: Callable[[], float] = time.monotonic) -> None:
        self._now = now
        self._last = now()

    def reset(self) -> None:
        """Rebase the cursor so the next delta is measured from now."""

        self._last = self._now()

    def stamp(self) -> float:
        """Return the delta since the last event and move the cursor here."""

        now = self._now()
        delta = max(now - self._last, 0.0)
        self._last = now
        return delta

    def since_last(self) -> float:
        """Time since the last event, without moving the cursor."""

        return max(self._now() - self._last, 0.0)
