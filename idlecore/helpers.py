from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class HelperPool:
    """Session-local automatic producers (helper hands).

    Capacity comes entirely from the ``HELPER_MAX_COUNT`` stat, so the
    pool itself only remembers how many helpers are hired.
    """

    count: int = 0

    @staticmethod
    def capacity(max_count: float = 0.0) -> int:
        return max(0, int(max_count))

    def add(self, max_count: float = 0.0) -> bool:
        """Add one helper if under capacity."""
        if self.count >= self.capacity(max_count):
            return False
        self.count += 1
        return True

    def trim(self, max_count: float = 0.0) -> int:
        """Drop helpers above capacity. Returns how many were removed."""
        excess = max(0, self.count - self.capacity(max_count))
        self.count -= excess
        if excess:
            logger.info("Released %d helper(s) above capacity", excess)
        return excess

    def reset(self) -> None:
        self.count = 0

    def snapshot(self) -> dict:
        return {"count": self.count}

    def restore(self, data: dict) -> None:
        try:
            count = max(0, int(data.get("count", 0)))
        except (TypeError, ValueError, AttributeError):
            logger.warning("Discarding unreadable helper state %r", data)
            count = 0
        self.count = count
