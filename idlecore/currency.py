from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto

from idlecore.events import CurrencyChanged, EventBus

logger = logging.getLogger(__name__)


class CurrencyKind(Enum):
    MONEY = auto()
    DARK_MATTER = auto()
    TIME_SHARDS = auto()


@dataclass
class CurrencyState:
    """Mutable runtime state for a currency."""

    current: float = 0.0
    lifetime: float = 0.0


class CurrencyStore:
    """Balances of every currency, publishing a CurrencyChanged on each change."""

    def __init__(self, bus: EventBus) -> None:
        self.bus = bus
        self.currencies: dict[CurrencyKind, CurrencyState] = {
            kind: CurrencyState() for kind in CurrencyKind
        }

    def get_amount(self, kind: CurrencyKind) -> float:
        return self.currencies[kind].current

    def get_lifetime(self, kind: CurrencyKind) -> float:
        return self.currencies[kind].lifetime

    def add(
        self,
        kind: CurrencyKind,
        amount: float,
        count_lifetime: bool = True,
        reason: str = "",
    ) -> None:
        """Credit *amount*. Non-positive amounts are ignored."""
        if amount <= 0:
            return
        cs = self.currencies[kind]
        cs.current += amount
        if count_lifetime:
            cs.lifetime += amount
        self._notify(kind, amount, reason)

    def can_afford(self, kind: CurrencyKind, amount: float) -> bool:
        return self.currencies[kind].current >= amount

    def spend(self, kind: CurrencyKind, amount: float, reason: str = "") -> bool:
        """Debit *amount* if affordable. Returns True on success."""
        if amount <= 0:
            return True
        cs = self.currencies[kind]
        if cs.current < amount:
            return False
        cs.current -= amount
        self._notify(kind, -amount, reason)
        return True

    def zero(self, kind: CurrencyKind, reason: str = "reset") -> None:
        """Set the current balance to 0; lifetime totals survive."""
        cs = self.currencies[kind]
        if cs.current == 0:
            return
        delta = -cs.current
        cs.current = 0.0
        self._notify(kind, delta, reason)

    # ── Persistence ──────────────────────────────────────────────────

    def snapshot(self) -> list[list]:
        return [
            [kind.name, cs.current, cs.lifetime]
            for kind, cs in self.currencies.items()
        ]

    def restore(self, rows: list) -> None:
        for row in rows or []:
            try:
                name, current, lifetime = row
                kind = CurrencyKind[name]
                state = CurrencyState(float(current), float(lifetime))
            except (KeyError, ValueError, TypeError):
                logger.warning("Discarding unreadable currency row %r", row)
                continue
            self.currencies[kind] = state
            self._notify(kind, 0.0, "restore")

    def _notify(self, kind: CurrencyKind, delta: float, reason: str) -> None:
        cs = self.currencies[kind]
        self.bus.publish(
            CurrencyChanged(
                kind=kind,
                amount=cs.current,
                lifetime=cs.lifetime,
                delta=delta,
                reason=reason,
            )
        )
