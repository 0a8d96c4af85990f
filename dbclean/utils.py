import time


class StopWatch:
    """Measures wall-clock time between `start()` and `stop()`."""

    def __init__(self):
        self._started_at: float | None = None
        self._elapsed = 0.0

    def start(self) -> None:
        self._started_at = time.perf_counter()

    def stop(self) -> None:
        if self._started_at is None:
            raise RuntimeError("StopWatch.stop() called before start()")
        self._elapsed += time.perf_counter() - self._started_at
        self._started_at = None

    @property
    def total_time_millis(self) -> int:
        return int(self._elapsed * 1000)


def format_duration(millis: int) -> str:
    """Format a duration as `mm:ss.SSSs`, or `hh:mm:ss.SSSs` past one hour.

    >>> format_duration(1234)
    '00:01.234s'
    """
    seconds, millis = divmod(millis, 1000)
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}.{millis:03d}s"
    return f"{minutes:02d}:{seconds:02d}.{millis:03d}s"
