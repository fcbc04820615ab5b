"""Background sweeper driving a pool cache's expiration."""

from __future__ import annotations

import logging
import threading
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class Sweepable(Protocol):
    def flush(self) -> int:
        ...

    def clean(self) -> int:
        ...


class Janitor:
    """Daemon thread that calls ``cache.flush()`` every ``interval`` seconds.

    When stopped it calls ``cache.clean()`` exactly once and exits. The stop
    signal is one-shot: stopping twice raises ``RuntimeError``.

    Parameters
    ----------
    cache: Sweepable
        Cache to maintain.
    interval: float
        Seconds between two sweeps.
    name: str, optional
        Thread name, useful in thread dumps.
    """

    def __init__(self, cache: Sweepable, interval: float, name: Optional[str] = None):
        if interval <= 0:
            raise ValueError(f"interval must be > 0, got {interval}")
        self.interval = interval
        self._cache = cache
        self._stop = threading.Event()
        self._thread = threading.Thread(
            target=self._run,
            name=name or f"cachepool-janitor-{id(cache):x}",
            daemon=True,
        )

    def start(self) -> None:
        self._thread.start()
        logger.debug(
            "janitor.started",
            extra={"janitor": self._thread.name, "interval_seconds": self.interval},
        )

    def stop(self, timeout: Optional[float] = None, wait: bool = True) -> None:
        """Signal the janitor and wait until its final clean has run.

        With ``wait=False``, or when called from the janitor thread itself,
        only the signal is sent.

        Raises
        ------
        RuntimeError
            If the janitor was already stopped.
        """
        if self._stop.is_set():
            raise RuntimeError(f"Janitor '{self._thread.name}' already stopped")
        self._stop.set()
        if not wait or threading.current_thread() is self._thread:
            return
        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning(
                "janitor.stop_timeout",
                extra={"janitor": self._thread.name, "timeout_seconds": timeout},
            )

    @property
    def running(self) -> bool:
        return self._thread.is_alive() and not self._stop.is_set()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self._cache.flush()
            except Exception:
                logger.exception(
                    "janitor.flush_failed", extra={"janitor": self._thread.name}
                )
        self._cache.clean()
        logger.debug("janitor.stopped", extra={"janitor": self._thread.name})
