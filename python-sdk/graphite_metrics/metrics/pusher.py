"""Graphite metrics pusher."""

import socket
import threading
import time
from typing import Callable, Optional

import structlog

from graphite_metrics.metrics.config import ConfigError, PusherConfig
from graphite_metrics.metrics.histogram import summarize as default_summarize
from graphite_metrics.metrics.registry import (
    graphite_connect_failures_total,
    graphite_lines_sent_total,
    graphite_pushes_total,
)
from graphite_metrics.metrics.serializer import filter_metrics, serialize_metrics
from graphite_metrics.metrics.store import AggregationStore, RegistryStore

logger = structlog.get_logger(__name__)


class GraphitePusher:
    """Periodically pushes a metrics window to Graphite over the plaintext protocol.

    A timer fires every `interval_ms`. Each fire schedules the next one
    before doing any work, so pushes carry on through any number of failed
    cycles. The connection is opened lazily, reused across cycles and
    dropped on the first I/O error; the next cycle reconnects.

    Cycles never overlap: a tick that fires while the previous cycle is
    still running is skipped.
    """

    def __init__(
        self,
        config: PusherConfig,
        store: AggregationStore,
        summarize: Callable = default_summarize,
        connect: Optional[Callable[[], socket.socket]] = None,
        timer_factory: Callable = threading.Timer,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config
        self.store = store
        self.prefix = config.prefix
        self.address = config.address
        self._summarize = summarize
        self._connect = connect or self._open_socket
        self._timer_factory = timer_factory
        self._clock = clock

        self._timer = None
        self._socket: Optional[socket.socket] = None
        self._stopped = threading.Event()
        # Guards the timer slot
        self._timer_lock = threading.Lock()
        # Held for the duration of a cycle, guards the socket
        self._cycle_lock = threading.Lock()

    def start(self):
        """Schedule the first push."""
        self._stopped.clear()
        self._schedule()
        logger.info(
            "graphite pusher started",
            host=self.address[0],
            port=self.address[1],
            interval_ms=self.config.interval_ms,
        )

    def stop(self, timeout: float = 5.0):
        """Cancel the timer and close the connection.

        Waits up to `timeout` seconds for an in-flight cycle. If it is still
        running, its connection is shut down to unblock the stuck I/O and
        the cycle closes it on the way out.
        """
        self._stopped.set()
        with self._timer_lock:
            if self._timer is not None:
                self._timer.cancel()

        if self._cycle_lock.acquire(timeout=timeout):
            try:
                self._close_socket()
            finally:
                self._cycle_lock.release()
            return

        logger.warning("push to graphite still in progress, shutting connection down")
        sock = self._socket
        if sock is not None:
            try:
                sock.shutdown(socket.SHUT_RDWR)
                sock.close()
            except OSError as e:
                logger.debug("error shutting down graphite connection", error=str(e))

    def get_timer(self):
        """Return the currently scheduled timer handle."""
        return self._timer

    def _schedule(self):
        with self._timer_lock:
            if self._stopped.is_set():
                return
            timer = self._timer_factory(self.config.interval_s, lambda: self.handle_timeout(timer))
            timer.daemon = True
            self._timer = timer
            timer.start()

    def handle_timeout(self, timer):
        """Timer callback: reschedule, then run one push cycle."""
        if timer is not self._timer or self._stopped.is_set():
            logger.info("got unexpected timer event", timer=repr(timer))
            return

        self._schedule()

        if not self._cycle_lock.acquire(blocking=False):
            logger.warning("previous push to graphite still in progress, skipping")
            return
        try:
            self._run_cycle()
        except Exception as e:
            logger.warning("push cycle failed", error=str(e))
        finally:
            self._cycle_lock.release()

    def push_once(self) -> bool:
        """Run one push cycle, waiting for any cycle already in flight.

        Returns True if the window was written, or there was nothing to write.
        Does nothing once the pusher is stopped.
        """
        with self._cycle_lock:
            return self._run_cycle()

    def _run_cycle(self) -> bool:
        # Called with _cycle_lock held
        if self._stopped.is_set():
            return False
        try:
            return self._push()
        finally:
            # stop() may have given up waiting for this cycle
            if self._stopped.is_set():
                self._close_socket()

    def _push(self) -> bool:
        if self._socket is None:
            try:
                self._socket = self._connect()
            except OSError as e:
                graphite_connect_failures_total.inc()
                graphite_pushes_total.labels(status="error").inc()
                logger.warning(
                    "failed to connect to graphite",
                    host=self.address[0],
                    port=self.address[1],
                    error=str(e),
                )
                return False

        if self._stopped.is_set():
            return False

        try:
            snapshot = self.store.get_window(self.config.window_s)
            metrics = filter_metrics(snapshot, self.config.whitelist)
            payload = serialize_metrics(self.prefix, metrics, self._summarize, self._clock)
        except Exception as e:
            graphite_pushes_total.labels(status="error").inc()
            logger.warning("failed to collect metrics window", error=str(e))
            return False

        if not payload:
            graphite_pushes_total.labels(status="empty").inc()
            return True

        try:
            self._socket.sendall(payload)
        except OSError as e:
            graphite_pushes_total.labels(status="error").inc()
            logger.warning("failed to push to graphite", error=str(e))
            self._close_socket()
            return False

        graphite_pushes_total.labels(status="success").inc()
        graphite_lines_sent_total.inc(payload.count(b"\n"))
        return True

    def _open_socket(self) -> socket.socket:
        return socket.create_connection(self.address, timeout=self.config.timeout_s)

    def _close_socket(self):
        sock, self._socket = self._socket, None
        if sock is not None:
            try:
                sock.close()
            except OSError as e:
                logger.debug("error closing graphite connection", error=str(e))


_pusher: Optional[GraphitePusher] = None


def start_metrics_pusher(
    store: Optional[AggregationStore] = None,
    config: Optional[PusherConfig] = None,
) -> bool:
    """Start the Graphite metrics pusher.

    Returns True if started, False if disabled or misconfigured.
    """
    global _pusher

    if config is None:
        try:
            config = PusherConfig.from_env()
        except ConfigError as e:
            logger.warning("graphite metrics push disabled", reason=str(e))
            return False

    if not config.enabled:
        return False

    if _pusher:
        _pusher.stop()

    _pusher = GraphitePusher(config, store if store is not None else RegistryStore())
    _pusher.start()

    return True


def stop_metrics_pusher():
    """Stop the metrics pusher."""
    global _pusher
    if _pusher:
        _pusher.stop()
        _pusher = None


def get_pusher() -> Optional[GraphitePusher]:
    """Return the running pusher, if any."""
    return _pusher
