"""Pacing between mutating registrar calls during a bulk update."""

import logging
import time

logger = logging.getLogger(__name__)


class FixedIntervalPacer:
    """Waits a fixed interval each time `wait` is called.

    The bulk update service calls `wait` between dispatches, never after the last one.
    This is separate from the retry backoff in registrarwrapper.
    """

    def __init__(self, interval: float = 0.1, sleep=time.sleep):
        if interval < 0:
            raise ValueError("interval must not be negative")
        self.interval = interval
        self._sleep = sleep

    def wait(self):
        if self.interval:
            self._sleep(self.interval)
