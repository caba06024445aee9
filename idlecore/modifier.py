from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class Stat(Enum):
    GLOBAL_MONEY_MULTIPLIER = auto()
    MANUAL_MONEY_MULTIPLIER = auto()
    IDLE_MONEY_MULTIPLIER = auto()
    DARK_MATTER_MULTIPLIER = auto()
    JACKPOT_CHANCE = auto()
    JACKPOT_MULTIPLIER = auto()
    HELPER_SPEED_MULTIPLIER = auto()
    HELPER_EXTRA_ROLLS = auto()
    HELPER_MAX_COUNT = auto()
    OFFLINE_EFFICIENCY = auto()
    SKILL_COOLDOWN_MULTIPLIER = auto()
    UNIT_VALUE_BONUS = auto()
    SKILL_COST_REDUCTION = auto()


class ModifierMode(Enum):
    MULTIPLICATIVE = auto()
    ADDITIVE = auto()


# Value of each stat when no modifiers are active
DEFAULT_BASES: dict[Stat, float] = {
    Stat.GLOBAL_MONEY_MULTIPLIER: 1.0,
    Stat.MANUAL_MONEY_MULTIPLIER: 1.0,
    Stat.IDLE_MONEY_MULTIPLIER: 1.0,
    Stat.DARK_MATTER_MULTIPLIER: 1.0,
    Stat.JACKPOT_CHANCE: 0.0,
    Stat.JACKPOT_MULTIPLIER: 2.0,
    Stat.HELPER_SPEED_MULTIPLIER: 1.0,
    Stat.HELPER_EXTRA_ROLLS: 0.0,
    Stat.HELPER_MAX_COUNT: 0.0,
    Stat.OFFLINE_EFFICIENCY: 0.25,
    Stat.SKILL_COOLDOWN_MULTIPLIER: 1.0,
    Stat.UNIT_VALUE_BONUS: 0.0,
    Stat.SKILL_COST_REDUCTION: 0.0,
}


@dataclass(frozen=True)
class StatModifier:
    """A tagged, reversible contribution to one stat."""

    source_id: str
    stat: Stat
    mode: ModifierMode
    magnitude: float

    @property
    def key(self) -> tuple[str, Stat]:
        return (self.source_id, self.stat)

    def to_row(self) -> list:
        return [self.source_id, self.stat.name, self.mode.name, self.magnitude]

    @classmethod
    def from_row(cls, row: list) -> StatModifier:
        """Inverse of to_row(). Raises ValueError/KeyError on malformed rows."""
        source_id, stat, mode, magnitude = row
        return cls(
            source_id=str(source_id),
            stat=Stat[stat],
            mode=ModifierMode[mode],
            magnitude=float(magnitude),
        )


@dataclass(frozen=True)
class ModifierSpec:
    """Source-less modifier template, bound to a source when unlocked."""

    stat: Stat
    mode: ModifierMode
    magnitude: float

    def bind(self, source_id: str) -> StatModifier:
        return StatModifier(source_id, self.stat, self.mode, self.magnitude)


class Modifier:
    """Convenience constructors for common modifier patterns."""

    @staticmethod
    def mult(stat: Stat, magnitude: float) -> ModifierSpec:
        """Multiplies the stat by *magnitude*."""
        return ModifierSpec(stat, ModifierMode.MULTIPLICATIVE, magnitude)

    @staticmethod
    def add(stat: Stat, magnitude: float) -> ModifierSpec:
        """Adds *magnitude* after all multipliers."""
        return ModifierSpec(stat, ModifierMode.ADDITIVE, magnitude)

    @staticmethod
    def percent(stat: Stat, pct: float) -> ModifierSpec:
        """Multiplier expressed as a percentage bonus (25 -> x1.25)."""
        return ModifierSpec(stat, ModifierMode.MULTIPLICATIVE, 1.0 + pct / 100.0)
