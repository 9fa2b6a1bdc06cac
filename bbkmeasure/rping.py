"""Latency measurement: websocket round trips and plain HTTP ping-pong."""

from __future__ import annotations

import logging
import random

from bbkmeasure.jsonvalue import Json
from bbkmeasure.metrics import calculate_latency, f_value

log = logging.getLogger(__name__)

MAX_ROUNDTRIPS = 100
REQUIRED_SAMPLES = 12
_MAX_CHALLENGE_LEN = 10
_SERIAL_MODULUS = 2**32


class RpingSession:
    """Client side of the websocket "rping" latency exchange.

    The server sends challenges; each is echoed back. Once the server has
    seen enough round trips, the client sends ``"rping end"`` and the server
    answers with the final latency, which becomes :attr:`result`.
    """

    def __init__(self, max_roundtrips: int = MAX_ROUNDTRIPS) -> None:
        self.max_roundtrips = max_roundtrips
        self.samples: list[float] = []
        self.sent_challenge = False
        self.result: str | None = None

    @property
    def finished(self) -> bool:
        return self.result is not None

    def start_message(self) -> str:
        """Message to send once the websocket connection is established."""
        log.info("Sending rping start")
        return "rping start"

    def handle_message(self, msg: str) -> str | None:
        """Handle a text message from the server.

        Returns the reply to send, or None when the exchange is over and the
        connection should be closed.
        """
        if not self.max_roundtrips:
            self.result = ""
            return None
        self.max_roundtrips -= 1

        tokens = iter(msg.split())
        cmd = next(tokens, "")
        stream_ok = True
        if self.sent_challenge:
            value = _parse_float(next(tokens, None))
            stream_ok = value is not None
            if cmd == "latency_result":
                self.result = f_value(value if value is not None else 0.0)
                return None
            if stream_ok and value > 0.0:
                self.samples.append(value)

        if cmd != "challenge":
            log.error("unknown message: %s", msg)
            return None
        log.info("Received %s", msg)

        challenge = next(tokens, None) if stream_ok else None
        if challenge is None or len(challenge) > _MAX_CHALLENGE_LEN:
            log.error("Bad rping challenge")
            return None

        if len(self.samples) >= REQUIRED_SAMPLES:
            log.info("Sending rping end")
            return "rping end"

        log.info("Sending rping %s", challenge)
        self.sent_challenge = True
        return "rping " + challenge


def _parse_float(token: str | None) -> float | None:
    if token is None:
        return None
    try:
        return float(token)
    except ValueError:
        return None


class LatencyProbe:
    """HTTP latency measurement: repeated ``/pingpong/<n>`` requests.

    Each response body is expected to be ``"<n> ok"``; the time from request
    to response is one sample.
    """

    def __init__(self, ticket: str, serial_no: int | None = None) -> None:
        self.ticket = ticket
        self._serial_no = (
            random.getrandbits(31) if serial_no is None else serial_no % _SERIAL_MODULUS
        )
        self._pending: dict[str, float] = {}
        self.samples: list[float] = []
        self.result: str | None = None

    @property
    def finished(self) -> bool:
        return self.result is not None

    def next_request(self, now: float) -> str:
        """URL of the next request, started at time ``now`` (seconds)."""
        self._serial_no = (self._serial_no + 1) % _SERIAL_MODULUS
        label = str(self._serial_no)
        self._pending[label + " ok"] = now
        return f"/pingpong/{label}?t={self.ticket}"

    def response(self, contents: str, now: float) -> bool:
        """Record a response received at ``now``; return whether to continue."""
        started = self._pending.get(contents)
        if started is None:
            log.info("unexpected response: %s", contents)
        else:
            latency = now - started
            log.info("got %s after %s sec", contents, latency)
            self.samples.append(latency)

        if len(self.samples) < REQUIRED_SAMPLES:
            return True

        if not self.finished:
            log.info("Samples: %s", Json(self.samples).dump())
            self.result = calculate_latency(self.samples)
        return False