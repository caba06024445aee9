from __future__ import annotations

import logging
import random
from datetime import datetime

from idlecore.active_skills import ActiveSkillKind, ActiveSkillManager, ActiveSkillResult
from idlecore.aggregator import ModifierAggregator
from idlecore.currency import CurrencyKind, CurrencyStore
from idlecore.daily_login import DailyLoginResult, DailyLoginTracker
from idlecore.definition import EconomyDefinition
from idlecore.events import (
    DarkMatterUnlocked,
    EventBus,
    OfflineEarningsApplied,
    SkillRevoked,
    SkillUnlocked,
    UnitProduced,
)
from idlecore.feed import LifetimeStats, ProgressFeed
from idlecore.goal import ClaimResult
from idlecore.helpers import HelperPool
from idlecore.modifier import Stat
from idlecore.offline import (
    OfflineEarningsSimulator,
    OfflineResult,
    ProductionContext,
    UnitYield,
)
from idlecore.overclock import OverclockResult, OverclockStateMachine
from idlecore.prestige import PrestigeOrchestrator, PrestigeResult
from idlecore.skills import SkillRegistry
from idlecore.tracker import ProgressTracker, RolloverResult
from idlecore.units import ProductionUnit, UnitRegistry, UnitTier

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


class EconomyRuntime:
    """Authoritative economy processor.

    Builds every component from an ``EconomyDefinition`` and wires them
    onto one synchronous event bus. Player actions return booleans or
    result objects; nothing here raises for a rejected action.
    """

    def __init__(
        self, definition: EconomyDefinition, rng: random.Random | None = None
    ) -> None:
        errors = definition.validate()
        if errors:
            raise ValueError(
                "Invalid EconomyDefinition:\n" + "\n".join(f"  - {e}" for e in errors)
            )

        self.definition = definition
        self.rng = rng or random.Random()
        cfg = definition.config

        self.bus = EventBus()
        self.aggregator = ModifierAggregator()
        self.currencies = CurrencyStore(self.bus)
        self.units = UnitRegistry(
            definition.units, self.bus, self.currencies, baseline_tier=cfg.baseline_tier
        )
        self.skills = SkillRegistry(definition.skills, self.bus, self.currencies)
        self.helpers = HelperPool()
        self.overclock = OverclockStateMachine(
            self.bus, self.units, self.currencies, definition.overclock
        )
        self.tracker = ProgressTracker(
            definition.milestones,
            definition.daily_missions,
            definition.weekly_missions,
            self.currencies,
            self.aggregator,
            self.bus,
            rng=self.rng,
            daily_count=cfg.daily_mission_count,
            weekly_count=cfg.weekly_mission_count,
        )
        self.feed = ProgressFeed(self.bus, self.tracker, self.currencies)
        self.prestige = PrestigeOrchestrator(
            self.currencies,
            self.units,
            self.aggregator,
            self.bus,
            skills=self.skills,
            helpers=self.helpers,
            overclock=self.overclock,
            config=definition.prestige,
        )
        self.offline = OfflineEarningsSimulator(definition.offline)
        self.active_skills = ActiveSkillManager(
            self.aggregator, self.bus, self.skills, definition.active_skills
        )
        self.daily_login = DailyLoginTracker(
            self.currencies, self.aggregator, self.bus, definition.daily_login
        )

        self.dark_matter_unlocked = False
        self.time_elapsed = 0.0
        self.last_seen: float | None = None
        self._helper_progress = 0.0

        self.bus.subscribe(SkillUnlocked, self._on_skill_unlocked)
        self.bus.subscribe(SkillRevoked, self._on_skill_revoked)

        self.prestige.apply_bonuses()
        self.units.add_unit(cfg.baseline_tier)
        self.currencies.add(
            CurrencyKind.MONEY, cfg.starting_money, count_lifetime=False, reason="start"
        )

    # ── Queries ──────────────────────────────────────────────────────

    def get_stat(self, stat: Stat) -> float:
        return self.aggregator.get_stat(stat)

    def money(self) -> float:
        return self.currencies.get_amount(CurrencyKind.MONEY)

    def dark_matter(self) -> float:
        return self.currencies.get_amount(CurrencyKind.DARK_MATTER)

    def time_shards(self) -> float:
        return self.currencies.get_amount(CurrencyKind.TIME_SHARDS)

    def helper_capacity(self) -> int:
        return self.helpers.capacity(self.get_stat(Stat.HELPER_MAX_COUNT))

    def helper_cost(self) -> float:
        cfg = self.definition.config
        return cfg.helper_cost_scaling.compute(cfg.helper_base_cost, self.helpers.count)

    def skill_cost(self, skill_id: str) -> float | None:
        return self.skills.current_cost(
            skill_id, self.get_stat(Stat.SKILL_COST_REDUCTION)
        )

    def unit_yield(self, unit: ProductionUnit) -> UnitYield:
        """Per-roll yield of *unit* before global multipliers and jackpots."""
        udef = self.units.get_def(unit.tier)
        money = (udef.base_payout + self.get_stat(Stat.UNIT_VALUE_BONUS)) * unit.money_multiplier
        return UnitYield(money=money, dark_matter=udef.dm_per_roll * unit.dm_multiplier)

    def money_per_roll(self) -> float:
        """Average money a manual roll pays right now, jackpots aside."""
        owned = self.units.list_units()
        if not owned:
            return 0.0
        per_unit = sum(self.unit_yield(u).money for u in owned) / len(owned)
        return (
            per_unit
            * self.get_stat(Stat.GLOBAL_MONEY_MULTIPLIER)
            * self.get_stat(Stat.MANUAL_MONEY_MULTIPLIER)
        )

    def build_production_context(self) -> ProductionContext:
        return ProductionContext(
            producers=self.helpers.count,
            unit_yields=[self.unit_yield(u) for u in self.units.list_units()],
            speed_multiplier=self.get_stat(Stat.HELPER_SPEED_MULTIPLIER),
            bonus_units=int(self.get_stat(Stat.HELPER_EXTRA_ROLLS)),
            efficiency=self.get_stat(Stat.OFFLINE_EFFICIENCY),
            money_multiplier=(
                self.get_stat(Stat.GLOBAL_MONEY_MULTIPLIER)
                * self.get_stat(Stat.IDLE_MONEY_MULTIPLIER)
            ),
            dark_matter_multiplier=self.get_stat(Stat.DARK_MATTER_MULTIPLIER),
            dark_matter_enabled=self.dark_matter_unlocked,
        )

    # ── Core loop ────────────────────────────────────────────────────

    def tick(self, delta: float) -> None:
        """Advance the economy by *delta* seconds of active play."""
        if delta <= 0:
            return
        self.time_elapsed += delta
        self.aggregator.advance(delta)
        self.active_skills.advance(delta)
        self.feed.add_play_time(delta)
        self._run_helpers(delta)

    def _run_helpers(self, delta: float) -> None:
        speed = self.get_stat(Stat.HELPER_SPEED_MULTIPLIER)
        if self.helpers.count <= 0 or speed <= 0:
            self._helper_progress = 0.0
            return
        cycle = self.definition.offline.base_cycle_seconds / speed
        self._helper_progress += delta
        while self._helper_progress >= cycle:
            self._helper_progress -= cycle
            for _ in range(self.helpers.count):
                self._helper_cycle()

    def _helper_cycle(self) -> None:
        owned = self.units.list_units()
        per_cycle = min(
            self.definition.offline.base_units_per_cycle
            + int(self.get_stat(Stat.HELPER_EXTRA_ROLLS)),
            len(owned),
        )
        for unit in self.rng.sample(owned, per_cycle):
            # An earlier roll this cycle may have destroyed the unit
            if self.units.get(unit.id) is not None:
                self._produce(unit, manual=False)

    # ── Player actions ───────────────────────────────────────────────

    def roll(self, unit_id: str | None = None) -> UnitProduced | None:
        """Roll one unit by hand (a random owned unit when *unit_id* is None)."""
        if unit_id is None:
            owned = self.units.list_units()
            if not owned:
                return None
            unit = self.rng.choice(owned)
        else:
            unit = self.units.get(unit_id)
            if unit is None:
                return None
        return self._produce(unit, manual=True)

    def roll_all(self) -> list[UnitProduced]:
        """Roll every owned unit once."""
        events = []
        for unit in self.units.list_units():
            events.append(self._produce(unit, manual=True))
        return events

    def buy_unit(self, tier: UnitTier) -> ProductionUnit | None:
        return self.units.buy_unit(tier)

    def unlock_dark_matter(self) -> bool:
        """One-time ascension purchase that starts dark matter production."""
        if self.dark_matter_unlocked:
            return False
        cost = self.definition.config.ascension_cost
        if not self.currencies.spend(CurrencyKind.MONEY, cost, reason="ascension"):
            return False
        self.dark_matter_unlocked = True
        logger.info("Dark matter unlocked")
        self.bus.publish(DarkMatterUnlocked())
        return True

    def buy_skill(self, skill_id: str) -> bool:
        return self.skills.purchase(skill_id, self.get_stat(Stat.SKILL_COST_REDUCTION))

    def refund_skill(self, skill_id: str) -> bool:
        return self.skills.revoke(skill_id, refund=True)

    def buy_helper(self) -> bool:
        if self.helpers.count >= self.helper_capacity():
            return False
        if not self.currencies.spend(CurrencyKind.MONEY, self.helper_cost(), reason="helper"):
            return False
        return self.helpers.add(self.get_stat(Stat.HELPER_MAX_COUNT))

    def claim_goal(self, goal_id: str) -> ClaimResult:
        return self.tracker.claim(goal_id)

    def start_overclock(self, unit_id: str) -> OverclockResult:
        return self.overclock.start(unit_id)

    def perform_prestige(self) -> PrestigeResult:
        result = self.prestige.perform_prestige()
        if result.success:
            self._helper_progress = 0.0
            self.active_skills.reset()
        return result

    def check_rollover(self, now: datetime | None = None) -> RolloverResult:
        return self.tracker.check_rollover(now or datetime.now())

    def activate_skill(self, kind: ActiveSkillKind) -> ActiveSkillResult:
        """Trigger an active skill. Roll Burst rolls every owned unit at once."""
        result = self.active_skills.activate(kind)
        if result.success and kind is ActiveSkillKind.ROLL_BURST:
            self.roll_all()
        return result

    def check_daily_login(self, now: datetime | None = None) -> bool:
        """Check in for the day. Returns True when a new reward became available."""
        if not self.skills.feature_available("daily_login"):
            return False
        return self.daily_login.check_in(now or datetime.now())

    def claim_daily_reward(self) -> DailyLoginResult:
        if not self.skills.feature_available("daily_login"):
            return DailyLoginResult(False, reason="Daily rewards are locked")
        return self.daily_login.claim(self.money_per_roll())

    # ── Offline ──────────────────────────────────────────────────────

    def preview_offline(self, elapsed_seconds: float) -> OfflineResult:
        return self.offline.simulate(elapsed_seconds, self.build_production_context())

    def apply_offline_earnings(self, elapsed_seconds: float) -> OfflineResult:
        """Credit what helpers earned during *elapsed_seconds* away."""
        result = self.preview_offline(elapsed_seconds)
        if result.is_empty:
            return result
        self.currencies.add(CurrencyKind.MONEY, result.money, reason="offline")
        self.currencies.add(CurrencyKind.DARK_MATTER, result.dark_matter, reason="offline")
        logger.info(
            "Offline earnings for %.0fs: %.2f money, %.2f dark matter",
            result.elapsed_seconds, result.money, result.dark_matter,
        )
        self.bus.publish(
            OfflineEarningsApplied(result.money, result.dark_matter, result.elapsed_seconds)
        )
        return result

    def mark_seen(self, now: float) -> None:
        """Record *now* as the last moment the player was present."""
        self.last_seen = now

    def resume(self, now: float) -> OfflineResult:
        """Return to the game at epoch seconds *now*.

        Credits offline earnings since ``last_seen``, then runs the
        calendar checks a new day may have made due.
        """
        elapsed = 0.0 if self.last_seen is None else now - self.last_seen
        self.mark_seen(now)
        result = self.apply_offline_earnings(elapsed)
        wall_clock = datetime.fromtimestamp(now)
        self.check_rollover(wall_clock)
        self.check_daily_login(wall_clock)
        return result

    # ── Event handlers ───────────────────────────────────────────────

    def _produce(self, unit: ProductionUnit, manual: bool) -> UnitProduced:
        udef = self.units.get_def(unit.tier)
        source = Stat.MANUAL_MONEY_MULTIPLIER if manual else Stat.IDLE_MONEY_MULTIPLIER
        money = (
            self.unit_yield(unit).money
            * self.get_stat(Stat.GLOBAL_MONEY_MULTIPLIER)
            * self.get_stat(source)
        )
        is_bonus = self.rng.random() < self.get_stat(Stat.JACKPOT_CHANCE)
        if is_bonus:
            money *= self.get_stat(Stat.JACKPOT_MULTIPLIER)

        dark_matter = 0.0
        if self.dark_matter_unlocked:
            dark_matter = (
                udef.dm_per_roll
                * unit.dm_multiplier
                * self.get_stat(Stat.DARK_MATTER_MULTIPLIER)
            )

        self.currencies.add(CurrencyKind.MONEY, money, reason="roll")
        self.currencies.add(CurrencyKind.DARK_MATTER, dark_matter, reason="roll")
        event = UnitProduced(unit.id, money, is_bonus=is_bonus,
                             dark_matter=dark_matter, manual=manual)
        # Overclock bonus is credited by the state machine on this event
        self.bus.publish(event)
        return event

    def _on_skill_unlocked(self, event: SkillUnlocked) -> None:
        sdef = self.skills.get_def(event.skill_id)
        if sdef is None:
            return
        for mod in sdef.bound_modifiers():
            self.aggregator.apply_modifier(mod)

    def _on_skill_revoked(self, event: SkillRevoked) -> None:
        self.aggregator.remove_all_from_source(event.skill_id)
        self.helpers.trim(self.get_stat(Stat.HELPER_MAX_COUNT))

    # ── Persistence ──────────────────────────────────────────────────

    def snapshot(self, now: float | None = None) -> dict:
        """JSON-safe snapshot of everything that survives a reload.

        Pass *now* when saving on exit so the next ``resume`` only pays
        for the time actually spent away.
        """
        if now is not None:
            self.mark_seen(now)
        return {
            "version": SNAPSHOT_VERSION,
            "currencies": self.currencies.snapshot(),
            "units": self.units.snapshot(),
            "skills": self.skills.snapshot(),
            "helpers": self.helpers.snapshot(),
            "modifiers": self.aggregator.snapshot(),
            "tracker": self.tracker.snapshot(),
            "stats": self.feed.stats.to_dict(),
            "prestige": self.prestige.snapshot(),
            "overclock": self.overclock.snapshot(),
            "daily_login": self.daily_login.snapshot(),
            "dark_matter_unlocked": self.dark_matter_unlocked,
            "time_elapsed": self.time_elapsed,
            "last_seen": self.last_seen,
        }

    def restore(self, data: dict) -> None:
        """Load a snapshot. Missing or corrupt parts fall back to defaults."""
        self.tracker.restore(data.get("tracker") or {})
        self.feed.stats = LifetimeStats.from_dict(data.get("stats") or {})
        self.currencies.restore(data.get("currencies") or [])

        self.overclock.restore(data.get("overclock") or {})
        self.units.restore(data.get("units") or [])
        if self.units.count() == 0:
            self.units.add_unit(self.units.baseline_tier)

        self.skills.restore(data.get("skills") or [])
        self.aggregator.restore(data.get("modifiers") or [])
        for skill_id in self.skills.list_unlocked():
            for mod in self.skills.get_def(skill_id).bound_modifiers():
                self.aggregator.apply_modifier(mod)
        self.prestige.restore(data.get("prestige") or {})

        self.helpers.restore(data.get("helpers") or {})
        self.helpers.trim(self.get_stat(Stat.HELPER_MAX_COUNT))

        self.daily_login.restore(data.get("daily_login") or {})
        self.active_skills.reset()

        self.dark_matter_unlocked = bool(data.get("dark_matter_unlocked", False))
        self.time_elapsed = _as_float(data.get("time_elapsed"), 0.0)
        self.last_seen = _as_float(data.get("last_seen"), None)
        self._helper_progress = 0.0
        self.feed.sync()


def _as_float(value: object, default: float | None) -> float | None:
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning("Discarding unreadable number %r", value)
        return default
