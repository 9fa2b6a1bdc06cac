"""State of a measurement run and the messages the agent sends to its client."""

from __future__ import annotations

import enum
import logging

from bbkmeasure.jsonparse import JsonParseError, parse
from bbkmeasure.jsonvalue import Json
from bbkmeasure.metrics import f_value

log = logging.getLogger(__name__)


class MeasurementState(enum.Enum):
    """Where the agent is in a measurement.

    The agent starts IDLE. ``startTest`` moves it to STARTED; when the test
    is done it becomes FINISHED, and ``resetTest`` brings it back to IDLE.
    ``abortTest`` during a test moves it to ABORTED until the test ends.
    """

    IDLE = "idle"
    STARTED = "started"
    FINISHED = "finished"
    ABORTED = "aborted"


class LifecycleError(RuntimeError):
    """Raised when a client command does not fit the current state."""

    def __init__(self, message: str, errno: str = "") -> None:
        super().__init__(message)
        self.errno = errno

    def to_json(self) -> str:
        """Error object to report to the client."""
        return Json({"error": str(self), "errno": self.errno}).dump()


class TestLifecycle:
    """Transitions of :class:`MeasurementState` driven by client commands."""

    __test__ = False  # not a pytest test class

    def __init__(self) -> None:
        self.state = MeasurementState.IDLE

    def start(self) -> MeasurementState:
        """Begin a measurement; only allowed when idle."""
        if self.state is not MeasurementState.IDLE:
            raise LifecycleError("Must do resetTest before starting a new test")
        self.state = MeasurementState.STARTED
        return self.state

    def abort(self) -> MeasurementState:
        """Abort the running measurement."""
        if self.state is not MeasurementState.STARTED:
            raise LifecycleError("got abortTest when not in measurement")
        self.state = MeasurementState.ABORTED
        return self.state

    def finish(self) -> MeasurementState:
        """Mark the measurement as over, whether completed, failed or aborted."""
        self.state = MeasurementState.FINISHED
        return self.state

    def reset(self) -> bool:
        """Prepare for a new measurement.

        Returns True when the agent went back to idle and should announce
        that it is ready again, False when it already was idle.
        """
        if self.state is MeasurementState.FINISHED:
            self.state = MeasurementState.IDLE
            return True
        if self.state is MeasurementState.IDLE:
            return False
        raise LifecycleError("got resetTest during measurement", "X02")


def task_progress_json(taskname: str, speed: float, progress: float) -> str:
    """Arguments of a ``taskProgress`` message."""
    return (
        f'{{"task": "{taskname}", "result": {f_value(speed)}, '
        f'"progress": {f_value(progress)}}}'
    )


def task_complete_json(task: str, result: str = "") -> str:
    """Arguments of a ``taskComplete`` message; ``result`` is raw JSON text."""
    args = f'{{"task": "{task}"'
    if result:
        args += ", \"result\": " + result
    return args + "}"


def insert_hashkey(result: str, newkey: str, hashkey: str) -> str:
    """Put ``hashkey`` into settings JSON text that carries ``newkey``.

    An empty ``newkey`` means the settings had no key, so one is appended;
    otherwise the first quoted occurrence of ``newkey`` is replaced. Text
    that does not end with a closing brace is returned unchanged.
    """
    if not result.endswith("}") or newkey == hashkey:
        return result
    if not newkey:
        return result[:-1] + ',"hashkey":"' + hashkey + '"}'
    quoted = '"' + newkey + '"'
    return result.replace(quoted, '"' + hashkey + '"', 1)


def log_sent_status(result: str) -> str:
    """"OK" if the server acknowledged an uploaded log with a nonzero status."""
    try:
        obj = parse(result)
    except JsonParseError:
        return "NOK"
    return "OK" if obj["status"].number_value() != 0 else "NOK"