from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from idlecore.calendar import (
    EPOCH,
    daily_rollover_due,
    parse_timestamp,
    weekly_rollover_due,
)
from idlecore.events import EventBus, GoalClaimed, GoalCompleted, MissionsRefreshed
from idlecore.goal import (
    MILESTONE_BOOST_SOURCE,
    ClaimResult,
    GoalDefinition,
    GoalMetric,
    GoalProgress,
    GoalScope,
    UpdateMode,
    grant_reward,
)

if TYPE_CHECKING:
    from idlecore.aggregator import ModifierAggregator
    from idlecore.currency import CurrencyStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RolloverResult:
    """Which mission sets were regenerated by a rollover check."""

    daily: bool = False
    weekly: bool = False

    @property
    def refreshed(self) -> bool:
        return self.daily or self.weekly


class ProgressTracker:
    """Owns progress for permanent milestones and calendar-scoped missions.

    Milestones are tracked from construction. Missions are drawn from the
    daily and weekly pools at each rollover and replaced wholesale by the
    next one.
    """

    def __init__(
        self,
        milestones: list[GoalDefinition],
        daily_pool: list[GoalDefinition],
        weekly_pool: list[GoalDefinition],
        currencies: CurrencyStore,
        aggregator: ModifierAggregator,
        bus: EventBus,
        rng: random.Random | None = None,
        daily_count: int = 3,
        weekly_count: int = 5,
    ) -> None:
        self.currencies = currencies
        self.aggregator = aggregator
        self.bus = bus
        self.rng = rng or random.Random()
        self.daily_count = daily_count
        self.weekly_count = weekly_count

        self._milestones = list(milestones)
        self._pools: dict[GoalScope, list[GoalDefinition]] = {
            GoalScope.DAILY: list(daily_pool),
            GoalScope.WEEKLY: list(weekly_pool),
        }
        self._defs: dict[str, GoalDefinition] = {
            d.id: d for d in [*milestones, *daily_pool, *weekly_pool]
        }
        self.progress: dict[str, GoalProgress] = {
            m.id: GoalProgress(m.id) for m in self._milestones
        }
        self.active: dict[GoalScope, list[str]] = {
            GoalScope.DAILY: [],
            GoalScope.WEEKLY: [],
        }
        self.last_reset: dict[GoalScope, datetime | None] = {
            GoalScope.DAILY: None,
            GoalScope.WEEKLY: None,
        }

    # ── Queries ──────────────────────────────────────────────────────

    def get_definition(self, goal_id: str) -> GoalDefinition | None:
        return self._defs.get(goal_id)

    def get_progress(self, goal_id: str) -> GoalProgress | None:
        return self.progress.get(goal_id)

    def milestones(self) -> list[GoalProgress]:
        return [self.progress[m.id] for m in self._milestones]

    def missions(self, scope: GoalScope) -> list[GoalProgress]:
        return [self.progress[gid] for gid in self.active[scope]]

    def claimable(self) -> list[str]:
        return [gid for gid, p in self.progress.items() if p.claimable]

    # ── Progress updates ─────────────────────────────────────────────

    def on_event(
        self, metric: GoalMetric, amount: float, mode: UpdateMode | None = None
    ) -> list[str]:
        """Feed a metric update to every matching goal.

        Returns the ids of goals that completed on this call.
        """
        if mode is None:
            mode = metric.mode
        completed: list[str] = []
        for goal_id, prog in self.progress.items():
            defn = self._defs[goal_id]
            if defn.metric is not metric:
                continue
            if prog.apply(amount, mode, defn.target):
                completed.append(goal_id)
        for goal_id in completed:
            defn = self._defs[goal_id]
            logger.debug("Goal %s completed", goal_id)
            self.bus.publish(GoalCompleted(goal_id, defn.kind))
        return completed

    def add_progress(self, metric: GoalMetric, delta: float) -> list[str]:
        return self.on_event(metric, delta, UpdateMode.INCREMENT)

    def set_progress(self, metric: GoalMetric, value: float) -> list[str]:
        return self.on_event(metric, value, UpdateMode.ABSOLUTE)

    # ── Claiming ─────────────────────────────────────────────────────

    def claim(self, goal_id: str) -> ClaimResult:
        prog = self.progress.get(goal_id)
        if prog is None:
            return ClaimResult(False, goal_id, reason=f"Unknown or inactive goal: {goal_id}")
        if prog.claimed:
            return ClaimResult(False, goal_id, reason="Already claimed")
        if not prog.completed:
            return ClaimResult(False, goal_id, reason="Not completed")

        defn = self._defs[goal_id]
        for reward in defn.rewards:
            source = MILESTONE_BOOST_SOURCE if reward.is_permanent_boost else f"goal:{goal_id}"
            grant_reward(reward, source, self.currencies, self.aggregator)
        prog.claimed = True
        self.bus.publish(GoalClaimed(goal_id, defn.kind))
        return ClaimResult(True, goal_id, rewards=defn.rewards)

    # ── Calendar rollover ────────────────────────────────────────────

    def check_rollover(self, now: datetime) -> RolloverResult:
        """Regenerate mission sets whose period has ended. Safe to repeat."""
        daily = daily_rollover_due(self.last_reset[GoalScope.DAILY], now)
        if daily:
            self.refresh(GoalScope.DAILY, now)
        weekly = weekly_rollover_due(self.last_reset[GoalScope.WEEKLY], now)
        if weekly:
            self.refresh(GoalScope.WEEKLY, now)
        return RolloverResult(daily=daily, weekly=weekly)

    def refresh(self, scope: GoalScope, now: datetime) -> list[str]:
        """Replace the active missions of *scope* with a fresh random draw."""
        for goal_id in self.active[scope]:
            self.progress.pop(goal_id, None)

        pool = self._pools[scope]
        count = self.daily_count if scope is GoalScope.DAILY else self.weekly_count
        drawn = self.rng.sample(pool, min(count, len(pool)))
        self.active[scope] = [d.id for d in drawn]
        for goal_id in self.active[scope]:
            self.progress[goal_id] = GoalProgress(goal_id)
        self.last_reset[scope] = now

        logger.info("Refreshed %s missions: %s", scope.name.lower(), self.active[scope])
        self.bus.publish(MissionsRefreshed(scope, tuple(self.active[scope])))
        return list(self.active[scope])

    # ── Persistence ──────────────────────────────────────────────────

    def snapshot(self) -> dict:
        return {
            "progress": [p.to_dict() for p in self.progress.values()],
            "active_daily": list(self.active[GoalScope.DAILY]),
            "active_weekly": list(self.active[GoalScope.WEEKLY]),
            "last_daily_reset": _format_timestamp(self.last_reset[GoalScope.DAILY]),
            "last_weekly_reset": _format_timestamp(self.last_reset[GoalScope.WEEKLY]),
        }

    def restore(self, data: dict) -> None:
        """Load saved progress, dropping entries that no longer make sense."""
        self.active = {
            GoalScope.DAILY: self._restore_active(data.get("active_daily"), GoalScope.DAILY),
            GoalScope.WEEKLY: self._restore_active(data.get("active_weekly"), GoalScope.WEEKLY),
        }
        live_ids = {m.id for m in self._milestones}
        live_ids.update(self.active[GoalScope.DAILY], self.active[GoalScope.WEEKLY])

        self.progress = {m.id: GoalProgress(m.id) for m in self._milestones}
        for gid in self.active[GoalScope.DAILY] + self.active[GoalScope.WEEKLY]:
            self.progress[gid] = GoalProgress(gid)
        for row in data.get("progress") or []:
            try:
                prog = GoalProgress.from_dict(row)
            except (KeyError, ValueError, TypeError, AttributeError):
                logger.warning("Discarding unreadable goal progress %r", row)
                continue
            if prog.goal_id not in live_ids:
                logger.warning("Discarding orphaned progress for goal %r", prog.goal_id)
                continue
            self.progress[prog.goal_id] = prog

        self.last_reset = {
            GoalScope.DAILY: _restore_timestamp(data.get("last_daily_reset")),
            GoalScope.WEEKLY: _restore_timestamp(data.get("last_weekly_reset")),
        }

    def _restore_active(self, goal_ids: object, scope: GoalScope) -> list[str]:
        pool_ids = {d.id for d in self._pools[scope]}
        active = []
        for gid in goal_ids or []:
            if gid not in pool_ids:
                logger.warning("Discarding unknown %s mission %r", scope.name.lower(), gid)
                continue
            if gid not in active:
                active.append(gid)
        return active


def _format_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _restore_timestamp(value: object) -> datetime | None:
    if value is None:
        return None
    parsed = parse_timestamp(value)
    if parsed is None:
        logger.warning("Unreadable reset timestamp %r, forcing rollover", value)
        return EPOCH
    return parsed
