"""Wall-clock, CPU time and memory measurements."""

from __future__ import annotations

import sys
import time

try:
    import resource as _resource
except ImportError:  # pragma: no cover - not available on every platform
    _resource = None


def wall_clock_time() -> float:
    """Seconds since the epoch as a float."""
    return time.time()


class ResourceUsage:
    """Snapshot of elapsed, user and system time and peak memory (KiB).

    Called without arguments it samples the current process.
    """

    def __init__(
        self,
        etime: float | None = None,
        utime: float = 0.0,
        stime: float = 0.0,
        maxrss: int = 0,
    ) -> None:
        self.etime = 0.0 if etime is None else etime
        self.utime = utime
        self.stime = stime
        self.maxrss = maxrss
        if etime is None:
            self.update()

    def update(self) -> ResourceUsage:
        """Sample the current process and return ``self``."""
        self.etime = wall_clock_time()
        if _resource is not None:
            usage = _resource.getrusage(_resource.RUSAGE_SELF)
            self.utime = usage.ru_utime
            self.stime = usage.ru_stime
            maxrss = usage.ru_maxrss
            if sys.platform == "darwin":
                maxrss //= 1024  # reported in bytes there
            self.maxrss = maxrss
        else:
            self.utime = time.process_time()
            self.stime = 0.0
            self.maxrss = 0
        return self

    def __add__(self, other: ResourceUsage) -> ResourceUsage:
        return ResourceUsage(
            self.etime + other.etime,
            self.utime + other.utime,
            self.stime + other.stime,
            max(self.maxrss, other.maxrss),
        )

    def __sub__(self, other: ResourceUsage) -> ResourceUsage:
        return ResourceUsage(
            self.etime - other.etime,
            self.utime - other.utime,
            self.stime - other.stime,
            max(self.maxrss, other.maxrss),
        )

    def elapsed_time(self) -> str:
        return f"{self.etime:.2f}s"

    def user_time(self) -> str:
        return f"{self.utime:.2f}s"

    def memory(self) -> str:
        return f"{self.maxrss / 1024.0:.0f}MB"

    def __str__(self) -> str:
        return (
            f"{self.etime:.2f}s elapsed, {self.utime:.2f}s user, "
            f"{self.maxrss / 1024.0:.0f}MB"
        )

    def __repr__(self) -> str:
        return (
            f"ResourceUsage(etime={self.etime!r}, utime={self.utime!r}, "
            f"stime={self.stime!r}, maxrss={self.maxrss!r})"
        )


class ElapsedTimeCounter:
    """Accumulates wall-clock time over start/stop intervals."""

    def __init__(self) -> None:
        self._total = 0.0
        self._start = 0.0

    def reset(self) -> ElapsedTimeCounter:
        self._total = 0.0
        return self

    def start(self) -> ElapsedTimeCounter:
        self._start = wall_clock_time()
        return self

    def stop(self) -> ElapsedTimeCounter:
        self._total += wall_clock_time() - self._start
        return self

    def __enter__(self) -> ElapsedTimeCounter:
        return self.start()

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def __float__(self) -> float:
        return self._total

    def __str__(self) -> str:
        return f"{self._total:.2f}s"