from __future__ import annotations

import time


class RateLimiter:
    """Simple fixed-delay rate limiter."""

    def __init__(self, delay_ms: int):
        self.delay_s = max(0, delay_ms) / 1000.0

    def sleep(self) -> None:
        """Sleep for the configured delay."""
        if self.delay_s > 0:
            time.sleep(self.delay_s)
