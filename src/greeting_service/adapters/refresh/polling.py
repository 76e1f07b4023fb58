"""Background polling refresh trigger.

Purpose
    Re-resolve configuration every *interval* seconds so edits to layered files
    or a rewritten ``.env`` reach ``/hello`` without a restart or an admin
    call.

Contents
    - ``PollingRefresher``: daemon thread driving ``ConfigRefresher.refresh``.
"""

from __future__ import annotations

import threading

from ...application.refresh import ConfigRefresher
from ...domain.errors import ConfigError
from ...observability import log_error, log_info


class PollingRefresher:
    """Call :meth:`ConfigRefresher.refresh` on a fixed interval.

    A failed refresh is logged and the loop carries on; the previous greeting
    remains in effect until a later poll succeeds.
    """

    def __init__(self, refresher: ConfigRefresher, interval: float) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._refresher = refresher
        self._interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self.polls = 0
        self.failures = 0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="greeting-refresh-poller", daemon=True)
        self._thread.start()
        log_info("poll_started", layer="refresh", path=None, interval=self._interval)

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None:
            thread.join(timeout)
            log_info("poll_stopped", layer="refresh", path=None, polls=self.polls, failures=self.failures)

    def poll_once(self) -> tuple[str, ...] | None:
        """Run one refresh; return changed keys, or ``None`` when it failed."""

        self.polls += 1
        try:
            return self._refresher.refresh()
        except ConfigError as exc:
            self.failures += 1
            log_error("poll_failed", layer="refresh", path=None, error=str(exc))
            return None

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            try:
                self.poll_once()
            except Exception as exc:  # noqa: BLE001 - the thread must outlive any single poll
                self.failures += 1
                log_error("poll_failed", layer="refresh", path=None, error=repr(exc))

    def __enter__(self) -> PollingRefresher:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
