from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING

from idlecore.currency import CurrencyKind
from idlecore.modifier import ModifierMode, Stat, StatModifier

if TYPE_CHECKING:
    from idlecore.aggregator import ModifierAggregator
    from idlecore.currency import CurrencyStore


class GoalKind(Enum):
    MILESTONE = auto()
    MISSION = auto()


class GoalScope(Enum):
    PERMANENT = auto()
    DAILY = auto()
    WEEKLY = auto()


class UpdateMode(Enum):
    INCREMENT = auto()
    ABSOLUTE = auto()


class GoalMetric(Enum):
    # Lifetime totals, fed as absolute values
    LIFETIME_MONEY = auto()
    LIFETIME_DARK_MATTER = auto()
    LIFETIME_TIME_SHARDS = auto()
    TOTAL_ROLLS = auto()
    TOTAL_JACKPOTS = auto()
    MAX_UNITS_OWNED = auto()
    TOTAL_UNITS_DESTROYED = auto()
    PRESTIGE_LEVEL = auto()
    TOTAL_PRESTIGES = auto()
    TOTAL_SKILLS_UNLOCKED = auto()
    TOTAL_MISSIONS_COMPLETED = auto()
    PLAY_TIME_MINUTES = auto()

    # Per-period counters, fed as deltas
    ROLLS = auto()
    JACKPOTS = auto()
    MONEY_EARNED = auto()
    MONEY_SPENT = auto()
    DARK_MATTER_EARNED = auto()
    DARK_MATTER_SPENT = auto()
    UNITS_BOUGHT = auto()
    SKILLS_UNLOCKED = auto()
    OVERCLOCK_ROLLS = auto()
    UNITS_DESTROYED = auto()
    PRESTIGES = auto()

    @property
    def mode(self) -> UpdateMode:
        if self in _ABSOLUTE_METRICS:
            return UpdateMode.ABSOLUTE
        return UpdateMode.INCREMENT


_ABSOLUTE_METRICS = frozenset({
    GoalMetric.LIFETIME_MONEY,
    GoalMetric.LIFETIME_DARK_MATTER,
    GoalMetric.LIFETIME_TIME_SHARDS,
    GoalMetric.TOTAL_ROLLS,
    GoalMetric.TOTAL_JACKPOTS,
    GoalMetric.MAX_UNITS_OWNED,
    GoalMetric.TOTAL_UNITS_DESTROYED,
    GoalMetric.PRESTIGE_LEVEL,
    GoalMetric.TOTAL_PRESTIGES,
    GoalMetric.TOTAL_SKILLS_UNLOCKED,
    GoalMetric.TOTAL_MISSIONS_COMPLETED,
    GoalMetric.PLAY_TIME_MINUTES,
})


class GoalStatus(Enum):
    ACTIVE = auto()
    COMPLETED = auto()
    CLAIMED = auto()


class RewardType(Enum):
    MONEY = auto()
    DARK_MATTER = auto()
    TIME_SHARDS = auto()
    PERMANENT_MONEY_BOOST = auto()
    PERMANENT_DARK_MATTER_BOOST = auto()
    MONEY_BOOST = auto()
    DARK_MATTER_BOOST = auto()


@dataclass(frozen=True)
class Reward:
    type: RewardType
    amount: float
    duration: float = 0.0

    @property
    def is_permanent_boost(self) -> bool:
        return self.type in (
            RewardType.PERMANENT_MONEY_BOOST, RewardType.PERMANENT_DARK_MATTER_BOOST
        )


@dataclass(frozen=True)
class GoalDefinition:
    """A tracked objective. Immutable once loaded."""

    id: str
    kind: GoalKind
    metric: GoalMetric
    target: float
    rewards: tuple[Reward, ...] = ()
    scope: GoalScope = GoalScope.PERMANENT
    display_name: str = ""
    description: str = ""
    tier: int = 1

    @classmethod
    def milestone(
        cls,
        id: str,
        metric: GoalMetric,
        target: float,
        *rewards: Reward,
        display_name: str = "",
        tier: int = 1,
    ) -> GoalDefinition:
        return cls(
            id=id,
            kind=GoalKind.MILESTONE,
            metric=metric,
            target=target,
            rewards=tuple(rewards),
            scope=GoalScope.PERMANENT,
            display_name=display_name or id,
            tier=tier,
        )

    @classmethod
    def mission(
        cls,
        id: str,
        scope: GoalScope,
        metric: GoalMetric,
        target: float,
        *rewards: Reward,
        display_name: str = "",
    ) -> GoalDefinition:
        return cls(
            id=id,
            kind=GoalKind.MISSION,
            metric=metric,
            target=target,
            rewards=tuple(rewards),
            scope=scope,
            display_name=display_name or id,
        )


@dataclass
class GoalProgress:
    """Runtime progress toward one goal: Active -> Completed -> Claimed."""

    goal_id: str
    current: float = 0.0
    completed: bool = False
    claimed: bool = False

    @property
    def status(self) -> GoalStatus:
        if self.claimed:
            return GoalStatus.CLAIMED
        if self.completed:
            return GoalStatus.COMPLETED
        return GoalStatus.ACTIVE

    @property
    def claimable(self) -> bool:
        return self.completed and not self.claimed

    def apply(self, amount: float, mode: UpdateMode, target: float) -> bool:
        """Update progress. Returns True only on the Active -> Completed edge."""
        if self.completed or self.claimed:
            return False
        if mode is UpdateMode.ABSOLUTE:
            self.current = amount
        else:
            self.current += amount
        if self.current >= target:
            self.current = target
            self.completed = True
            return True
        return False

    def to_dict(self) -> dict:
        return {
            "goal_id": self.goal_id,
            "current": self.current,
            "completed": self.completed,
            "claimed": self.claimed,
        }

    @classmethod
    def from_dict(cls, data: dict) -> GoalProgress:
        return cls(
            goal_id=str(data["goal_id"]),
            current=float(data.get("current", 0.0)),
            completed=bool(data.get("completed", False)),
            claimed=bool(data.get("claimed", False)),
        )


# Shared source for every claimed permanent milestone boost
MILESTONE_BOOST_SOURCE = "milestones"

_CURRENCY_REWARDS = {
    RewardType.MONEY: CurrencyKind.MONEY,
    RewardType.DARK_MATTER: CurrencyKind.DARK_MATTER,
    RewardType.TIME_SHARDS: CurrencyKind.TIME_SHARDS,
}

_BOOST_STATS = {
    RewardType.PERMANENT_MONEY_BOOST: Stat.GLOBAL_MONEY_MULTIPLIER,
    RewardType.PERMANENT_DARK_MATTER_BOOST: Stat.DARK_MATTER_MULTIPLIER,
    RewardType.MONEY_BOOST: Stat.GLOBAL_MONEY_MULTIPLIER,
    RewardType.DARK_MATTER_BOOST: Stat.DARK_MATTER_MULTIPLIER,
}


def grant_reward(
    reward: Reward,
    source_id: str,
    currencies: CurrencyStore,
    aggregator: ModifierAggregator,
) -> None:
    """Deliver one reward through the currency store or the aggregator."""
    kind = _CURRENCY_REWARDS.get(reward.type)
    if kind is not None:
        currencies.add(kind, reward.amount, count_lifetime=False, reason="reward")
        return

    stat = _BOOST_STATS[reward.type]
    if reward.type in (RewardType.MONEY_BOOST, RewardType.DARK_MATTER_BOOST):
        # Temporary boosts are percentages held for a duration
        mod = StatModifier(
            f"{source_id}:boost", stat, ModifierMode.MULTIPLICATIVE,
            1.0 + reward.amount / 100.0,
        )
        aggregator.apply_timed(mod, reward.duration)
    else:
        # Permanent boosts under one source pool additively: 1 + sum(amounts)
        pooled = 1.0 + reward.amount
        for existing in aggregator.modifiers_from(source_id):
            if existing.stat is stat:
                pooled += existing.magnitude - 1.0
        aggregator.apply_modifier(
            StatModifier(source_id, stat, ModifierMode.MULTIPLICATIVE, pooled)
        )


@dataclass(frozen=True)
class ClaimResult:
    """Outcome of a claim attempt."""

    success: bool
    goal_id: str = ""
    rewards: tuple[Reward, ...] = field(default_factory=tuple)
    reason: str = ""
