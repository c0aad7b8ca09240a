from __future__ import annotations

import logging
from threading import Event, Thread
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class IssueScheduler:
    """
    Background thread that periodically asks a node to issue a token.

    The first issue happens once ``startup_delay`` has passed (giving
    the other nodes time to come up), then one every ``interval``
    seconds until ``stop()`` is called.
    """

    def __init__(
        self,
        issue: Callable[[], object],
        interval: float,
        startup_delay: float = 0.0,
        name: str = "token-issuer",
    ) -> None:
        self._issue = issue
        self._interval = interval
        self._startup_delay = startup_delay
        self._name = name
        self._stop = Event()
        self._thread: Optional[Thread] = None
        self.issued = 0

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            raise RuntimeError("Issue scheduler is already running")

        self._stop.clear()
        self._thread = Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()

        logger.info(
            "[SCHEDULER] Started | interval=%.1fs | startup_delay=%.1fs",
            self._interval,
            self._startup_delay,
        )

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()

        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

        logger.info("[SCHEDULER] Stopped | issued=%d", self.issued)

    def _run(self) -> None:
        if self._stop.wait(self._startup_delay):
            return

        while True:
            self._tick()
            if self._stop.wait(self._interval):
                return

    def _tick(self) -> None:
        try:
            self._issue()
        except Exception:
            logger.exception("[SCHEDULER] Token issue failed")
        finally:
            self.issued += 1
