"""Daily check-in rewards with a streak that grows day over day."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime

from idlecore.aggregator import ModifierAggregator
from idlecore.calendar import parse_timestamp
from idlecore.currency import CurrencyKind, CurrencyStore
from idlecore.events import DailyRewardAvailable, DailyRewardClaimed, EventBus
from idlecore.goal import Reward, RewardType, grant_reward

logger = logging.getLogger(__name__)

DAILY_LOGIN_SOURCE = "daily_login"


@dataclass(frozen=True)
class DailyRewardDay:
    """One day of the streak calendar."""

    reward: Reward
    streak_multiplier: float = 1.0
    title: str = ""
    description: str = ""


def _default_days() -> list[DailyRewardDay]:
    return [
        DailyRewardDay(Reward(RewardType.MONEY, 100), 1.0, "Welcome Back!"),
        DailyRewardDay(Reward(RewardType.MONEY, 200), 1.5, "Day 2"),
        DailyRewardDay(Reward(RewardType.DARK_MATTER, 10), 1.0, "Day 3"),
        DailyRewardDay(Reward(RewardType.MONEY_BOOST, 50, duration=600), 1.0, "Day 4",
                       "+50% money for 10 minutes"),
        DailyRewardDay(Reward(RewardType.MONEY, 500), 2.0, "Day 5"),
        DailyRewardDay(Reward(RewardType.DARK_MATTER_BOOST, 100, duration=600), 1.0, "Day 6",
                       "+100% dark matter for 10 minutes"),
        DailyRewardDay(Reward(RewardType.MONEY, 1000), 3.0, "JACKPOT DAY!"),
    ]


@dataclass
class DailyLoginConfig:
    """Streak calendar and reward scaling for daily check-ins."""

    days: list[DailyRewardDay] = field(default_factory=_default_days)
    reset_streak_on_miss: bool = True
    # Days that may pass between check-ins before the streak is lost
    grace_period_days: int = 2
    # Money rewards are at least this many minutes of manual rolling
    money_minutes_worth: float = 10.0
    rolls_per_minute: float = 10.0
    # Share of yesterday's dark matter added to dark matter rewards
    yesterday_dark_matter_share: float = 0.1

    def validate(self) -> list[str]:
        errors: list[str] = []
        if not self.days:
            errors.append("Daily login needs at least one reward day")
        for i, day in enumerate(self.days, start=1):
            if day.reward.amount < 0:
                errors.append(f"Daily reward day {i} has a negative amount")
            if day.streak_multiplier <= 0:
                errors.append(f"Daily reward day {i} must have a positive multiplier")
        if self.grace_period_days < 1:
            errors.append("Daily login grace period must be at least one day")
        return errors


@dataclass(frozen=True)
class DailyLoginResult:
    """Outcome of a daily reward claim."""

    success: bool
    streak_day: int = 0
    reward: Reward | None = None
    reason: str = ""


class DailyLoginTracker:
    """Check-in calendar for the daily reward.

    ``check_in`` is called whenever the player shows up. The first call
    on a new calendar day advances (or resets) the streak and makes one
    reward claimable. Rewards go through the same delivery path as goal
    rewards.
    """

    def __init__(
        self,
        currencies: CurrencyStore,
        aggregator: ModifierAggregator,
        bus: EventBus,
        config: DailyLoginConfig | None = None,
    ) -> None:
        self.currencies = currencies
        self.aggregator = aggregator
        self.bus = bus
        self.config = config or DailyLoginConfig()
        self.last_login: datetime | None = None
        self.streak_day = 1
        self.claimed_today = False
        self.total_login_days = 0
        self.yesterday_dark_matter = 0.0
        # Lifetime dark matter at the last check-in
        self._dark_matter_mark = 0.0

    @property
    def streak_length(self) -> int:
        return len(self.config.days)

    def can_claim(self) -> bool:
        return self.last_login is not None and not self.claimed_today

    def today(self) -> DailyRewardDay:
        index = min(max(self.streak_day, 1), self.streak_length) - 1
        return self.config.days[index]

    def check_in(self, now: datetime) -> bool:
        """Record a visit. Returns True when a new day's reward became available."""
        lifetime_dm = self.currencies.get_lifetime(CurrencyKind.DARK_MATTER)
        if self.last_login is None:
            self.streak_day = 1
            self.total_login_days = 0
        else:
            days = (now.date() - self.last_login.date()).days
            if days <= 0:
                return False
            if days == 1:
                self.streak_day = min(self.streak_day + 1, self.streak_length)
                self.yesterday_dark_matter = max(0.0, lifetime_dm - self._dark_matter_mark)
            else:
                self.yesterday_dark_matter = 0.0
                if self.config.reset_streak_on_miss and days > self.config.grace_period_days:
                    logger.info("Daily streak lost after %d days away", days)
                    self.streak_day = 1

        self.total_login_days += 1
        self.claimed_today = False
        self.last_login = now
        self._dark_matter_mark = lifetime_dm
        logger.info("Daily reward available, streak day %d", self.streak_day)
        self.bus.publish(DailyRewardAvailable(self.streak_day))
        return True

    def preview(self, money_per_roll: float = 0.0) -> Reward:
        """Today's reward, scaled to the current economy."""
        cfg = self.config
        day = self.today()
        reward = day.reward
        amount = reward.amount
        if reward.type is RewardType.MONEY:
            floor = money_per_roll * cfg.rolls_per_minute * cfg.money_minutes_worth
            amount = max(amount, floor)
        elif reward.type is RewardType.DARK_MATTER:
            amount += self.yesterday_dark_matter * cfg.yesterday_dark_matter_share
        return replace(reward, amount=amount * day.streak_multiplier)

    def claim(self, money_per_roll: float = 0.0) -> DailyLoginResult:
        if self.last_login is None:
            return DailyLoginResult(False, reason="No check-in yet")
        if self.claimed_today:
            return DailyLoginResult(False, self.streak_day, reason="Already claimed today")

        reward = self.preview(money_per_roll)
        grant_reward(reward, DAILY_LOGIN_SOURCE, self.currencies, self.aggregator)
        self.claimed_today = True
        logger.info(
            "Claimed daily reward: %s %.2f (streak day %d)",
            reward.type.name, reward.amount, self.streak_day,
        )
        self.bus.publish(DailyRewardClaimed(self.streak_day, reward.type, reward.amount))
        return DailyLoginResult(True, self.streak_day, reward=reward)

    # ── Persistence ──────────────────────────────────────────────────

    def snapshot(self) -> dict:
        return {
            "last_login": self.last_login.isoformat() if self.last_login else None,
            "streak_day": self.streak_day,
            "claimed_today": self.claimed_today,
            "total_login_days": self.total_login_days,
            "yesterday_dark_matter": self.yesterday_dark_matter,
            "dark_matter_mark": self._dark_matter_mark,
        }

    def restore(self, data: dict) -> None:
        """Load saved check-in state. Unreadable fields fall back to defaults."""
        self.last_login = parse_timestamp(data.get("last_login"))
        try:
            streak = int(data.get("streak_day", 1))
            total = max(0, int(data.get("total_login_days", 0)))
            yesterday = max(0.0, float(data.get("yesterday_dark_matter", 0.0)))
            mark = max(0.0, float(data.get("dark_matter_mark", 0.0)))
        except (TypeError, ValueError):
            logger.warning("Discarding unreadable daily login state %r", data)
            streak, total, yesterday, mark = 1, 0, 0.0, 0.0
        self.streak_day = min(max(streak, 1), self.streak_length)
        self.total_login_days = total
        self.yesterday_dark_matter = yesterday
        self._dark_matter_mark = mark
        self.claimed_today = bool(data.get("claimed_today", False))
