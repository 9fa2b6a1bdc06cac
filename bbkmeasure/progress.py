"""Progress bookkeeping for the download and upload speed measurements."""

from __future__ import annotations

import enum
import logging

from bbkmeasure.metrics import add_overhead_mbps, f_value

log = logging.getLogger(__name__)

MIN_DURATION = 2.0
MAX_DURATION = 20.0
INITIAL_LOAD_SIZE = 50000
SLOW_LOAD_SIZE = 5000
MIN_LOAD_SIZE = 6000
MAX_LOAD_SIZE = 40000000
# Stop starting new requests when less than this many seconds remain.
_FINAL_STRETCH = 0.35
# The reported speed is not allowed to drop during the last half second.
_NO_DECREASE_WINDOW = 0.5


class ProgressStatus(enum.Enum):
    """What a call to :meth:`ProgressTracker.do_test_progress` did."""

    IGNORED = "ignored"
    PROGRESS = "progress"
    WINDING_DOWN = "winding_down"
    FINISHED = "finished"


class ProgressTracker:
    """Tracks speed and progress of a timed load test and sizes its requests.

    The tracker is finished once :attr:`result` is set, either by reaching
    the full duration or by :meth:`connection_lost`.
    """

    def __init__(self, duration: float = 10.0, no_conn: int = 4) -> None:
        self._tot_duration = min(max(duration, MIN_DURATION), MAX_DURATION)
        self._current_load_size = INITIAL_LOAD_SIZE
        self._load_size_check = no_conn + 2
        self._no_started_loads = 0
        self._current_duration = 0.0
        self._current_mbps = 0.0
        self._speedlimit_mbps = 0.0
        self._soon_finished = False
        self._no_more_connections = False
        self._byte_count = 0
        self._result: str | None = None
        self.wake_up_requested = False

    @property
    def tot_duration(self) -> float:
        return self._tot_duration

    @property
    def current_duration(self) -> float:
        return self._current_duration

    @property
    def current_mbps(self) -> float:
        return self._current_mbps

    @property
    def speedlimit_mbps(self) -> float:
        return self._speedlimit_mbps

    @property
    def byte_count(self) -> int:
        return self._byte_count

    @property
    def soon_finished(self) -> bool:
        """True when no new requests should be started."""
        return self._soon_finished

    @property
    def no_more_connections(self) -> bool:
        return self._no_more_connections

    @property
    def result(self) -> str | None:
        """Final speed in Mbit/s as text, "-1" on failure, None while running."""
        return self._result

    @property
    def terminated(self) -> bool:
        return self._result is not None

    def _finish(self, result: str) -> str:
        if self._result is None:
            self._result = result
        return self._result

    def do_test_progress(self, mbps: float, duration: float, no_conn: int) -> ProgressStatus:
        """Record a speed sample taken ``duration`` seconds into the test."""
        if duration <= self._current_duration or self.terminated:
            return ProgressStatus.IGNORED

        self._current_duration = duration

        if duration < self._tot_duration - _NO_DECREASE_WINDOW or mbps > self._current_mbps:
            self._current_mbps = mbps

        if duration >= self._tot_duration:
            self._finish(f_value(self._current_mbps))
            return ProgressStatus.FINISHED

        log.debug("task progress %s %s", self._current_mbps, duration / self._tot_duration)

        if duration > self._tot_duration - _FINAL_STRETCH:
            self._no_more_connections = True
            self._current_load_size = 0
            self._soon_finished = True
            return ProgressStatus.WINDING_DOWN

        if not no_conn:
            return ProgressStatus.PROGRESS

        time_left = self._tot_duration - duration
        if self._speedlimit_mbps > 0.0:
            exp_bytes = min(self._speedlimit_mbps, mbps) * min(time_left, 0.3) / 0.000008
        else:
            exp_bytes = mbps * time_left / 0.000008

        load_size = int(exp_bytes / 4.0 / no_conn)
        self._current_load_size = min(max(load_size, MIN_LOAD_SIZE), MAX_LOAD_SIZE)

        if self._speedlimit_mbps > mbps:
            log.debug("going too slow, waking up passive connections")
            self.wake_up_requested = True
        return ProgressStatus.PROGRESS

    def notify_bytes_and_duration(self, count: int, duration: float) -> ProgressStatus:
        """Record a byte count measured over ``duration`` seconds."""
        return self.do_test_progress(
            add_overhead_mbps(count, duration), duration, 0
        )

    def load_size(self, elapsed: float, current_connections: int) -> int:
        """Size in bytes of the next request; 0 means make no request now."""
        self._no_started_loads += 1
        if self._no_started_loads == self._load_size_check and self._current_duration <= 0:
            # Very fast networks: adapt the load size before the first tick.
            speed = add_overhead_mbps(self._byte_count, elapsed)
            self.do_test_progress(speed, elapsed, current_connections)
        if self._speedlimit_mbps > 0.0:
            speed = add_overhead_mbps(self._byte_count, elapsed)
            if speed > self._speedlimit_mbps:
                log.info("going too fast, will pause")
                return 0
        return self._current_load_size

    def set_speedlimit(self, limit_mbps: float) -> None:
        self._speedlimit_mbps = max(limit_mbps, 0.5)
        if self._speedlimit_mbps < 5.0:
            self._current_load_size = SLOW_LOAD_SIZE

    def notify_bytes_loaded(self, n: int) -> None:
        self._byte_count += n

    def connection_lost(self) -> str:
        """Finish after losing all connections; keep the speed if over half done."""
        if self._current_duration > self._tot_duration * 0.5:
            return self._finish(f_value(self._current_mbps))
        return self._finish("-1")

    def timeout(self) -> str:
        """Finish with a failure result."""
        return self._finish("-1")

    def current_progress(self) -> float:
        return self._current_duration / self._tot_duration


class UploadInfoParser:
    """Splits the server's streamed upload report into (bytes, seconds) samples.

    The server sends lines of the form ``"<byte count> <duration>\\r\\n"``.
    """

    def __init__(self) -> None:
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Text received after the last complete line."""
        return self._buffer

    def feed(self, data: bytes | str) -> list[tuple[int, float]]:
        """Add received data; return the samples from every completed line."""
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("latin-1")
        self._buffer += data
        *lines, self._buffer = self._buffer.split("\r\n")
        samples = []
        for line in lines:
            sample = _parse_info_line(line)
            if sample is not None:
                log.debug("server upload info %d %s", *sample)
                samples.append(sample)
            elif line:
                log.error("bad server info line: %s", line)
        return samples


def _parse_info_line(line: str) -> tuple[int, float] | None:
    fields = line.split()
    if len(fields) < 2:
        return None
    try:
        count = int(fields[0])
        duration = float(fields[1])
    except ValueError:
        return None
    if count < 0:
        return None
    return count, duration