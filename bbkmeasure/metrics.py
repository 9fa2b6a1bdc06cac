"""Numeric helpers shared by the measurement tasks."""

from __future__ import annotations

from collections.abc import Iterable

from bbkmeasure.jsonvalue import Json

_OVERHEAD_THRESHOLD_MBPS = 8.0


def f_value(x: float) -> str:
    """Format a number the way JSON output expects (six significant digits)."""
    return "%g" % x


def json_obj(attr: str, value: str) -> str:
    """Serialized JSON object with a single attribute."""
    return Json({attr: value}).dump()


def calculate_latency(samples: Iterable[float]) -> str:
    """Mean of the best 60% of latency samples (seconds), in milliseconds.

    Returns an empty string when there are fewer than five samples.
    """
    ordered = sorted(samples)
    if len(ordered) < 5:
        return ""
    best = ordered[: len(ordered) * 3 // 5]
    return f_value(1000.0 * sum(best) / len(best))


def add_overhead_mbps(n: int, seconds: float) -> float:
    """Convert a byte count over a duration to Mbit/s, adding protocol overhead."""
    if seconds <= 0.0:
        return 0.0
    mbps = n / seconds * 0.000008
    if mbps > _OVERHEAD_THRESHOLD_MBPS:
        return mbps * 1.02 + 0.16
    return mbps * 1.04


def download_connection_target(speed: float, current: int) -> int:
    """Number of download connections suited to ``speed`` Mbit/s.

    Never fewer than the ``current`` number of connections.
    """
    if speed < 250.0:
        target = 12 if speed < 100 else 24
    else:
        target = 32 if speed < 500 else 48
    return max(target, current)