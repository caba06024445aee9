from __future__ import annotations

from typing import Any, Callable

Listener = Callable[[Any], None]


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Clamp *value* into [low, high]."""
    if value < low:
        return low
    if value > high:
        return high
    return value
