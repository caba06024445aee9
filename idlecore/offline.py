from __future__ import annotations

from dataclasses import dataclass, field

from idlecore._types import clamp


@dataclass
class OfflineConfig:
    """Tunables for retroactive offline production."""

    max_seconds: float = 86400.0
    base_cycle_seconds: float = 4.0
    base_units_per_cycle: int = 1


@dataclass(frozen=True)
class UnitYield:
    """Per-cycle yield of one owned unit, its own multiplier included."""

    money: float
    dark_matter: float = 0.0


@dataclass
class ProductionContext:
    """Snapshot of everything offline production depends on."""

    producers: int = 0
    unit_yields: list[UnitYield] = field(default_factory=list)
    speed_multiplier: float = 1.0
    bonus_units: int = 0
    efficiency: float = 0.25
    money_multiplier: float = 1.0
    dark_matter_multiplier: float = 1.0
    dark_matter_enabled: bool = False

    @property
    def unit_count(self) -> int:
        return len(self.unit_yields)

    @property
    def average_money_yield(self) -> float:
        if not self.unit_yields:
            return 0.0
        return sum(y.money for y in self.unit_yields) / len(self.unit_yields)

    @property
    def average_dark_matter_yield(self) -> float:
        if not self.unit_yields:
            return 0.0
        return sum(y.dark_matter for y in self.unit_yields) / len(self.unit_yields)


@dataclass(frozen=True)
class OfflineResult:
    """Totals earned while away. Nothing is applied by the simulator itself."""

    money: float = 0.0
    dark_matter: float = 0.0
    elapsed_seconds: float = 0.0
    cycles: float = 0.0
    units_processed: float = 0.0

    @property
    def is_empty(self) -> bool:
        return self.money <= 0 and self.dark_matter <= 0


class OfflineEarningsSimulator:
    """Closed-form estimate of what producers would have earned while away.

    Each cycle a producer processes ``min(base + bonus, owned)`` units drawn
    uniformly from the owned set, so the expected yield per unit is the
    plain mean over owned units.
    """

    def __init__(self, config: OfflineConfig | None = None) -> None:
        self.config = config or OfflineConfig()

    def clamp_elapsed(self, elapsed_seconds: float) -> float:
        return clamp(elapsed_seconds, 0.0, self.config.max_seconds)

    def simulate(self, elapsed_seconds: float, context: ProductionContext) -> OfflineResult:
        elapsed = self.clamp_elapsed(elapsed_seconds)
        if (
            elapsed <= 0
            or context.producers <= 0
            or context.unit_count == 0
            or context.speed_multiplier <= 0
        ):
            return OfflineResult(elapsed_seconds=elapsed)

        cycle_seconds = self.config.base_cycle_seconds / context.speed_multiplier
        cycles = elapsed / cycle_seconds
        per_cycle = min(
            self.config.base_units_per_cycle + max(0, context.bonus_units),
            context.unit_count,
        )
        efficiency = clamp(context.efficiency)
        processed = cycles * context.producers * per_cycle * efficiency

        money = processed * context.average_money_yield * context.money_multiplier
        dark_matter = 0.0
        if context.dark_matter_enabled:
            dark_matter = (
                processed
                * context.average_dark_matter_yield
                * context.dark_matter_multiplier
            )
        return OfflineResult(
            money=money,
            dark_matter=dark_matter,
            elapsed_seconds=elapsed,
            cycles=cycles,
            units_processed=processed,
        )
