"""Turns bus events into goal progress updates."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields

from idlecore.currency import CurrencyKind, CurrencyStore
from idlecore.events import (
    CurrencyChanged,
    EventBus,
    GoalClaimed,
    OverclockHeatChanged,
    PrestigeCompleted,
    SkillUnlocked,
    UnitAdded,
    UnitDestroyed,
    UnitProduced,
)
from idlecore.goal import GoalKind, GoalMetric
from idlecore.tracker import ProgressTracker

# Currency changes with these reasons move balances without earning or spending
_NEUTRAL_REASONS = frozenset({"reset", "restore", "start"})

_EARNED = {
    CurrencyKind.MONEY: GoalMetric.MONEY_EARNED,
    CurrencyKind.DARK_MATTER: GoalMetric.DARK_MATTER_EARNED,
}
_SPENT = {
    CurrencyKind.MONEY: GoalMetric.MONEY_SPENT,
    CurrencyKind.DARK_MATTER: GoalMetric.DARK_MATTER_SPENT,
}
_LIFETIME = {
    CurrencyKind.MONEY: GoalMetric.LIFETIME_MONEY,
    CurrencyKind.DARK_MATTER: GoalMetric.LIFETIME_DARK_MATTER,
    CurrencyKind.TIME_SHARDS: GoalMetric.LIFETIME_TIME_SHARDS,
}


@dataclass
class LifetimeStats:
    """Counters that survive prestige and feed the absolute goal metrics."""

    total_rolls: int = 0
    total_jackpots: int = 0
    max_units_owned: int = 0
    total_units_destroyed: int = 0
    total_skills_unlocked: int = 0
    total_missions_completed: int = 0
    total_prestiges: int = 0
    play_time_seconds: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> LifetimeStats:
        stats = cls()
        for f in fields(cls):
            if f.name not in data:
                continue
            try:
                setattr(stats, f.name, type(getattr(stats, f.name))(data[f.name]))
            except (TypeError, ValueError):
                continue
        return stats


class ProgressFeed:
    """Single bus-level subscriber that forwards gameplay to the tracker.

    Currency deltas are derived by diffing each new balance against the
    last one seen, so a replayed or re-published balance never counts twice.
    """

    def __init__(
        self,
        bus: EventBus,
        tracker: ProgressTracker,
        currencies: CurrencyStore,
        stats: LifetimeStats | None = None,
    ) -> None:
        self.bus = bus
        self.tracker = tracker
        self.stats = stats or LifetimeStats()
        self._last_seen: dict[CurrencyKind, float] = {
            kind: currencies.get_amount(kind) for kind in CurrencyKind
        }
        self._unsubscribers = [
            bus.subscribe(CurrencyChanged, self._on_currency),
            bus.subscribe(UnitProduced, self._on_produced),
            bus.subscribe(UnitAdded, self._on_unit_added),
            bus.subscribe(UnitDestroyed, self._on_unit_destroyed),
            bus.subscribe(SkillUnlocked, self._on_skill_unlocked),
            bus.subscribe(GoalClaimed, self._on_goal_claimed),
            bus.subscribe(PrestigeCompleted, self._on_prestige),
            bus.subscribe(OverclockHeatChanged, self._on_overclock_roll),
        ]

    def close(self) -> None:
        for unsub in self._unsubscribers:
            unsub()
        self._unsubscribers = []

    def add_play_time(self, seconds: float) -> None:
        if seconds <= 0:
            return
        self.stats.play_time_seconds += seconds
        self.tracker.set_progress(
            GoalMetric.PLAY_TIME_MINUTES, self.stats.play_time_seconds / 60.0
        )

    def sync(self) -> None:
        """Push every absolute metric to the tracker, e.g. after a restore."""
        s = self.stats
        self.tracker.set_progress(GoalMetric.TOTAL_ROLLS, s.total_rolls)
        self.tracker.set_progress(GoalMetric.TOTAL_JACKPOTS, s.total_jackpots)
        self.tracker.set_progress(GoalMetric.MAX_UNITS_OWNED, s.max_units_owned)
        self.tracker.set_progress(GoalMetric.TOTAL_UNITS_DESTROYED, s.total_units_destroyed)
        self.tracker.set_progress(GoalMetric.TOTAL_SKILLS_UNLOCKED, s.total_skills_unlocked)
        self.tracker.set_progress(
            GoalMetric.TOTAL_MISSIONS_COMPLETED, s.total_missions_completed
        )
        self.tracker.set_progress(GoalMetric.TOTAL_PRESTIGES, s.total_prestiges)
        self.tracker.set_progress(GoalMetric.PLAY_TIME_MINUTES, s.play_time_seconds / 60.0)

    # ── Handlers ─────────────────────────────────────────────────────

    def _on_currency(self, event: CurrencyChanged) -> None:
        previous = self._last_seen.get(event.kind, event.amount - event.delta)
        self._last_seen[event.kind] = event.amount
        self.tracker.set_progress(_LIFETIME[event.kind], event.lifetime)
        if event.reason in _NEUTRAL_REASONS:
            return

        delta = event.amount - previous
        if delta > 0 and event.kind in _EARNED:
            self.tracker.add_progress(_EARNED[event.kind], delta)
        elif delta < 0 and event.kind in _SPENT:
            self.tracker.add_progress(_SPENT[event.kind], -delta)

    def _on_produced(self, event: UnitProduced) -> None:
        self.stats.total_rolls += 1
        self.tracker.add_progress(GoalMetric.ROLLS, 1)
        self.tracker.set_progress(GoalMetric.TOTAL_ROLLS, self.stats.total_rolls)
        if event.is_bonus:
            self.stats.total_jackpots += 1
            self.tracker.add_progress(GoalMetric.JACKPOTS, 1)
            self.tracker.set_progress(GoalMetric.TOTAL_JACKPOTS, self.stats.total_jackpots)

    def _on_unit_added(self, event: UnitAdded) -> None:
        if event.purchased:
            self.tracker.add_progress(GoalMetric.UNITS_BOUGHT, 1)
        if event.owned_count > self.stats.max_units_owned:
            self.stats.max_units_owned = event.owned_count
            self.tracker.set_progress(GoalMetric.MAX_UNITS_OWNED, event.owned_count)

    def _on_unit_destroyed(self, event: UnitDestroyed) -> None:
        self.stats.total_units_destroyed += 1
        self.tracker.add_progress(GoalMetric.UNITS_DESTROYED, 1)
        self.tracker.set_progress(
            GoalMetric.TOTAL_UNITS_DESTROYED, self.stats.total_units_destroyed
        )

    def _on_skill_unlocked(self, event: SkillUnlocked) -> None:
        self.stats.total_skills_unlocked += 1
        self.tracker.add_progress(GoalMetric.SKILLS_UNLOCKED, 1)
        self.tracker.set_progress(
            GoalMetric.TOTAL_SKILLS_UNLOCKED, self.stats.total_skills_unlocked
        )

    def _on_goal_claimed(self, event: GoalClaimed) -> None:
        if event.kind is not GoalKind.MISSION:
            return
        self.stats.total_missions_completed += 1
        self.tracker.set_progress(
            GoalMetric.TOTAL_MISSIONS_COMPLETED, self.stats.total_missions_completed
        )

    def _on_prestige(self, event: PrestigeCompleted) -> None:
        self.stats.total_prestiges += 1
        self.tracker.add_progress(GoalMetric.PRESTIGES, 1)
        self.tracker.set_progress(GoalMetric.PRESTIGE_LEVEL, event.level)
        self.tracker.set_progress(GoalMetric.TOTAL_PRESTIGES, self.stats.total_prestiges)

    def _on_overclock_roll(self, event: OverclockHeatChanged) -> None:
        self.tracker.add_progress(GoalMetric.OVERCLOCK_ROLLS, 1)
