"""Fakes for the socket, timer and aggregation store used by the pusher."""

import threading
from typing import Callable, List, Optional, Sequence

from graphite_metrics.metrics.types import MetricSnapshot


class FakeTimer:
    def __init__(self, interval: float, function: Callable[[], None]):
        self.interval = interval
        self.function = function
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        self.function()


class FakeTimerFactory:
    def __init__(self) -> None:
        self.timers: List[FakeTimer] = []

    def __call__(self, interval: float, function: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(interval, function)
        self.timers.append(timer)
        return timer


class FakeSocket:
    def __init__(self, fail_with: Optional[OSError] = None):
        self.fail_with = fail_with
        self.sent: List[bytes] = []
        self.closed = False

    def sendall(self, data: bytes) -> None:
        if self.closed:
            raise AssertionError("write on a closed socket")
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(data)

    def shutdown(self, how: int) -> None:
        pass

    def close(self) -> None:
        self.closed = True


class BlockingSocket(FakeSocket):
    """A socket whose sendall hangs until the connection is shut down."""

    def __init__(self) -> None:
        super().__init__()
        self.sending = threading.Event()
        self.released = threading.Event()
        self.shutdowns: List[int] = []

    def sendall(self, data: bytes) -> None:
        self.sending.set()
        if not self.released.wait(timeout=5.0):
            raise AssertionError("sendall was never unblocked")
        raise BrokenPipeError("connection shut down")

    def shutdown(self, how: int) -> None:
        self.shutdowns.append(how)
        self.released.set()


class FakeConnector:
    """Hands out the given sockets in order, then fresh healthy ones."""

    def __init__(self, sockets: Sequence[FakeSocket] = (), fail_with: Optional[OSError] = None):
        self.pending = list(sockets)
        self.fail_with = fail_with
        self.opened: List[FakeSocket] = []
        self.calls = 0

    def __call__(self) -> FakeSocket:
        self.calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        sock = self.pending.pop(0) if self.pending else FakeSocket()
        self.opened.append(sock)
        return sock


class FakeStore:
    def __init__(self, metrics: Sequence = (), fail_with: Optional[Exception] = None):
        self.metrics = tuple(metrics)
        self.fail_with = fail_with
        self.windows: List[int] = []

    def get_window(self, window_s: int) -> MetricSnapshot:
        self.windows.append(window_s)
        if self.fail_with is not None:
            raise self.fail_with
        return MetricSnapshot(window_s=window_s, metrics=self.metrics)
