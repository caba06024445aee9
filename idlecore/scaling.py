from __future__ import annotations

from typing import Callable


class Scaling:
    """Determines how a base amount grows with a level or owned count."""

    def __init__(self, fn: Callable[[float, int], float]) -> None:
        self._fn = fn

    def compute(self, base: float, level: int) -> float:
        return self._fn(base, level)

    @classmethod
    def fixed(cls) -> Scaling:
        """Amount never changes."""
        return cls(lambda base, _level: base)

    @classmethod
    def exponential(cls, growth_rate: float = 1.15) -> Scaling:
        """Amount = base * growth_rate^level."""
        gr = growth_rate  # capture

        def _compute(base: float, level: int) -> float:
            return base * gr ** level

        return cls(_compute)

    @classmethod
    def linear(cls, increment_pct: float = 0.10) -> Scaling:
        """Amount = base * (1 + increment_pct * level)."""
        pct = increment_pct

        def _compute(base: float, level: int) -> float:
            return base * (1.0 + pct * level)

        return cls(_compute)

    @classmethod
    def custom(cls, fn: Callable[[float, int], float]) -> Scaling:
        """Arbitrary growth function."""
        return cls(fn)
