from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum

from idlecore.currency import CurrencyKind, CurrencyStore
from idlecore.events import EventBus, UnitAdded, UnitRemoved
from idlecore.scaling import Scaling

logger = logging.getLogger(__name__)


class UnitTier(Enum):
    BASIC = 0
    BRONZE = 1
    SILVER = 2
    GOLD = 3
    EMERALD = 4
    RUBY = 5
    DIAMOND = 6

    @property
    def rank(self) -> int:
        return self.value


@dataclass
class UnitDef:
    """Static definition of a production unit tier."""

    tier: UnitTier
    display_name: str = ""
    base_payout: float = 1.0
    dm_per_roll: float = 0.0
    shop_base_cost: float = 10.0
    shop_scaling: Scaling = field(default_factory=lambda: Scaling.exponential(1.15))

    def __post_init__(self) -> None:
        if not self.display_name:
            self.display_name = self.tier.name.title()

    def price(self, owned: int) -> float:
        return self.shop_scaling.compute(self.shop_base_cost, owned)


@dataclass
class ProductionUnit:
    """A single owned unit."""

    id: str
    tier: UnitTier
    money_multiplier: float = 1.0
    dm_multiplier: float = 1.0


class UnitRegistry:
    """Owned production units."""

    def __init__(
        self,
        definitions: list[UnitDef],
        bus: EventBus,
        currencies: CurrencyStore | None = None,
        baseline_tier: UnitTier = UnitTier.BASIC,
    ) -> None:
        self.bus = bus
        self.currencies = currencies
        self.baseline_tier = baseline_tier
        self._defs: dict[UnitTier, UnitDef] = {d.tier: d for d in definitions}
        self._units: dict[str, ProductionUnit] = {}
        self._ids = itertools.count(1)

    def get_def(self, tier: UnitTier) -> UnitDef | None:
        return self._defs.get(tier)

    def definitions(self) -> list[UnitDef]:
        return list(self._defs.values())

    def list_units(self) -> list[ProductionUnit]:
        return list(self._units.values())

    def get(self, unit_id: str) -> ProductionUnit | None:
        return self._units.get(unit_id)

    def count(self, tier: UnitTier | None = None) -> int:
        if tier is None:
            return len(self._units)
        return sum(1 for u in self._units.values() if u.tier is tier)

    def current_price(self, tier: UnitTier) -> float | None:
        udef = self._defs.get(tier)
        if udef is None:
            return None
        return udef.price(self.count(tier))

    # ── Mutations ────────────────────────────────────────────────────

    def add_unit(self, tier: UnitTier, purchased: bool = False) -> ProductionUnit:
        if tier not in self._defs:
            raise ValueError(f"Unknown unit tier: {tier.name}")
        unit = ProductionUnit(id=f"{tier.name.lower()}-{next(self._ids)}", tier=tier)
        self._units[unit.id] = unit
        self.bus.publish(
            UnitAdded(unit.id, tier, purchased=purchased, owned_count=len(self._units))
        )
        return unit

    def buy_unit(self, tier: UnitTier) -> ProductionUnit | None:
        """Spend money on a new unit. Returns None if unknown or unaffordable."""
        price = self.current_price(tier)
        if price is None or self.currencies is None:
            return None
        if not self.currencies.spend(CurrencyKind.MONEY, price, reason="unit"):
            return None
        return self.add_unit(tier, purchased=True)

    def remove_unit(self, unit_id: str) -> bool:
        unit = self._units.pop(unit_id, None)
        if unit is None:
            return False
        self.bus.publish(UnitRemoved(unit.id, unit.tier))
        return True

    def reset_to_baseline(self) -> ProductionUnit:
        """Remove every unit except a single baseline-tier unit."""
        keep = next(
            (u for u in self._units.values() if u.tier is self.baseline_tier), None
        )
        for unit_id in [uid for uid in self._units if keep is None or uid != keep.id]:
            self.remove_unit(unit_id)
        if keep is None:
            keep = self.add_unit(self.baseline_tier)
        return keep

    # ── Persistence ──────────────────────────────────────────────────

    def snapshot(self) -> list[dict]:
        return [
            {
                "tier": u.tier.name,
                "money_multiplier": u.money_multiplier,
                "dm_multiplier": u.dm_multiplier,
            }
            for u in self._units.values()
        ]

    def restore(self, rows: list) -> None:
        """Recreate owned units. Unit ids are reissued."""
        self._units.clear()
        for row in rows or []:
            try:
                tier = UnitTier[row["tier"]]
                money_mult = float(row.get("money_multiplier", 1.0))
                dm_mult = float(row.get("dm_multiplier", 1.0))
            except (KeyError, ValueError, TypeError, AttributeError):
                logger.warning("Discarding unreadable unit row %r", row)
                continue
            if tier not in self._defs:
                logger.warning("Discarding unit of undefined tier %s", tier.name)
                continue
            unit = ProductionUnit(
                id=f"{tier.name.lower()}-{next(self._ids)}",
                tier=tier,
                money_multiplier=money_mult,
                dm_multiplier=dm_mult,
            )
            self._units[unit.id] = unit
