from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto

from idlecore.currency import CurrencyKind, CurrencyStore
from idlecore.events import (
    EventBus,
    OverclockHeatChanged,
    UnitDestroyed,
    UnitOverclocked,
    UnitProduced,
    UnitRemoved,
)
from idlecore.units import UnitRegistry, UnitTier

logger = logging.getLogger(__name__)


@dataclass
class OverclockConfig:
    """Tunables for the overclock risk/reward boost."""

    payout_multiplier: float = 2.5
    heat_per_roll: float = 0.1
    destroy_reward: float = 10.0
    tier_reward_step: float = 0.5
    warning_threshold: float = 0.9


class OverclockStatus(Enum):
    NORMAL = auto()
    OVERCLOCKED = auto()
    DESTROYED = auto()


@dataclass
class OverclockState:
    """Session-local state of one overclocked unit."""

    unit_id: str
    tier: UnitTier
    rolls: int = 0
    heat: float = 0.0
    bonus_earned: float = 0.0
    status: OverclockStatus = OverclockStatus.OVERCLOCKED


@dataclass(frozen=True)
class OverclockResult:
    """Outcome of an overclock attempt."""

    success: bool
    unit_id: str = ""
    reason: str = ""


class OverclockStateMachine:
    """Normal -> Overclocked -> Destroyed, driven by unit production events.

    Only lifetime counters are persisted; a reloaded session starts with
    every unit back to Normal.
    """

    def __init__(
        self,
        bus: EventBus,
        units: UnitRegistry,
        currencies: CurrencyStore,
        config: OverclockConfig | None = None,
    ) -> None:
        self.bus = bus
        self.units = units
        self.currencies = currencies
        self.config = config or OverclockConfig()
        self._states: dict[str, OverclockState] = {}
        self._destroyed: set[str] = set()
        self.total_destroyed = 0
        self.total_destroy_reward = 0.0
        self._unsubscribers = [
            bus.subscribe(UnitProduced, self._on_unit_produced),
            bus.subscribe(UnitRemoved, self._on_unit_removed),
        ]

    def close(self) -> None:
        for unsub in self._unsubscribers:
            unsub()
        self._unsubscribers = []

    # ── Queries ──────────────────────────────────────────────────────

    def status(self, unit_id: str) -> OverclockStatus:
        if unit_id in self._destroyed:
            return OverclockStatus.DESTROYED
        if unit_id in self._states:
            return OverclockStatus.OVERCLOCKED
        return OverclockStatus.NORMAL

    def is_overclocked(self, unit_id: str) -> bool:
        return self.status(unit_id) is OverclockStatus.OVERCLOCKED

    def get_state(self, unit_id: str) -> OverclockState | None:
        return self._states.get(unit_id)

    def active(self) -> list[OverclockState]:
        return list(self._states.values())

    def payout_multiplier(self, unit_id: str) -> float:
        if self.is_overclocked(unit_id):
            return self.config.payout_multiplier
        return 1.0

    def reward_for(self, tier: UnitTier) -> float:
        return self.config.destroy_reward * (1.0 + tier.rank * self.config.tier_reward_step)

    # ── Transitions ──────────────────────────────────────────────────

    def start(self, unit_id: str) -> OverclockResult:
        if unit_id in self._destroyed:
            return OverclockResult(False, unit_id, reason="Unit was destroyed")
        if unit_id in self._states:
            return OverclockResult(False, unit_id, reason="Already overclocked")
        unit = self.units.get(unit_id)
        if unit is None:
            return OverclockResult(False, unit_id, reason=f"Unknown unit: {unit_id}")
        if unit.tier is self.units.baseline_tier and self.units.count() <= 1:
            return OverclockResult(False, unit_id, reason="Cannot overclock the last unit")

        self._states[unit_id] = OverclockState(unit_id, unit.tier)
        self.bus.publish(UnitOverclocked(unit_id))
        return OverclockResult(True, unit_id)

    def reset(self) -> None:
        """Return every unit to Normal without destroying anything."""
        self._states.clear()

    # ── Event handlers ───────────────────────────────────────────────

    def _on_unit_produced(self, event: UnitProduced) -> None:
        state = self._states.get(event.unit_id)
        if state is None or state.status is not OverclockStatus.OVERCLOCKED:
            return

        bonus = event.amount * (self.config.payout_multiplier - 1.0)
        if bonus > 0:
            self.currencies.add(CurrencyKind.MONEY, bonus, reason="overclock")
            state.bonus_earned += bonus

        state.rolls += 1
        state.heat = min(1.0, round(state.rolls * self.config.heat_per_roll, 9))
        self.bus.publish(
            OverclockHeatChanged(
                state.unit_id,
                state.heat,
                warning=state.heat >= self.config.warning_threshold,
            )
        )
        if state.heat >= 1.0:
            self._destroy(state)

    def _on_unit_removed(self, event: UnitRemoved) -> None:
        state = self._states.get(event.unit_id)
        if state is not None and state.status is OverclockStatus.OVERCLOCKED:
            del self._states[event.unit_id]

    def _destroy(self, state: OverclockState) -> None:
        state.status = OverclockStatus.DESTROYED
        self._destroyed.add(state.unit_id)
        reward = self.reward_for(state.tier)
        self.currencies.add(CurrencyKind.DARK_MATTER, reward, reason="overclock")
        self.total_destroyed += 1
        self.total_destroy_reward += reward

        self.units.remove_unit(state.unit_id)
        del self._states[state.unit_id]
        logger.info(
            "Unit %s destroyed by overclock, %.1f dark matter awarded",
            state.unit_id, reward,
        )
        self.bus.publish(UnitDestroyed(state.unit_id, state.tier, reward))

    # ── Persistence ──────────────────────────────────────────────────

    def snapshot(self) -> dict:
        return {
            "total_destroyed": self.total_destroyed,
            "total_destroy_reward": self.total_destroy_reward,
        }

    def restore(self, data: dict) -> None:
        self._states.clear()
        self._destroyed.clear()
        try:
            self.total_destroyed = int(data.get("total_destroyed", 0))
            self.total_destroy_reward = float(data.get("total_destroy_reward", 0.0))
        except (TypeError, ValueError):
            logger.warning("Discarding unreadable overclock counters %r", data)
            self.total_destroyed = 0
            self.total_destroy_reward = 0.0
