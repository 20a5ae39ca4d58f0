"""
Cooperative throttle for the address scan.

The remote endpoints publish no limits, so the scan pauses for a fixed
time after every batch of addresses.
"""

import time
from typing import Callable


DEFAULT_BATCH_SIZE = 5
DEFAULT_PAUSE = 1.0  # seconds


class BatchRateLimiter:
    """Sleeps for `pause` seconds after every `batch_size` ticks."""

    def __init__(
        self,
        batch_size: int = DEFAULT_BATCH_SIZE,
        pause: float = DEFAULT_PAUSE,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the limiter.

        Args:
            batch_size: Number of addresses per batch (must be positive)
            pause: Pause after each full batch, in seconds
            sleep: Sleep function (injectable for tests)
        """
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        if pause < 0:
            raise ValueError(f"pause must not be negative, got {pause}")
        self.batch_size = batch_size
        self.pause = pause
        self._sleep = sleep
        self.count = 0

    def tick(self) -> bool:
        """
        Record one processed address, pausing when a batch completes.

        Returns:
            True if the call paused
        """
        self.count += 1
        if self.count % self.batch_size == 0 and self.pause > 0:
            self._sleep(self.pause)
            return True
        return False
