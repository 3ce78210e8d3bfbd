from __future__ import annotations
import math
import time


class MidiClock:
    """Monotonic millisecond clock; timestamps are ms since the clock was created."""

    def __init__(self) -> None:
        self._origin = time.perf_counter()

    def now(self) -> float:
        return (time.perf_counter() - self._origin) * 1000.0


class TimeResolver:
    """Turns a time descriptor into an absolute clock timestamp (ms).

    ``None`` means now. A number is an absolute timestamp; one in the past is
    delivered as soon as possible by the output. ``"+250"`` means 250 ms from
    now. Other strings fall back to now. NaN and infinity raise ValueError.
    """

    def __init__(self, clock: MidiClock) -> None:
        self._clock = clock

    def resolve(self, time_spec: float | str | None = None) -> float:
        if time_spec is None:
            return self._clock.now()
        if isinstance(time_spec, str):
            if time_spec.startswith("+"):
                try:
                    lapse = float(time_spec[1:])
                except ValueError:
                    lapse = 0.0
                if math.isfinite(lapse) and lapse > 0:
                    return self._clock.now() + lapse
            return self._clock.now()
        if isinstance(time_spec, bool) or not isinstance(time_spec, (int, float)):
            raise TypeError(f"Time must be a number, a '+<ms>' string or None, got {time_spec!r}")
        if not math.isfinite(time_spec):
            raise ValueError(f"Time must be a finite number, got {time_spec!r}")
        return float(time_spec)
