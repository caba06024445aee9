"""Tests for daily_login module."""
from datetime import datetime, timedelta

import pytest

from idlecore.aggregator import ModifierAggregator
from idlecore.currency import CurrencyKind, CurrencyStore
from idlecore.daily_login import (
    DailyLoginConfig,
    DailyLoginTracker,
    DailyRewardDay,
)
from idlecore.events import (
    DailyRewardAvailable,
    DailyRewardClaimed,
    EventBus,
    EventRecorder,
)
from idlecore.goal import Reward, RewardType
from idlecore.modifier import Stat

START = datetime(2024, 5, 13, 9, 0)


def _day(n: int) -> datetime:
    return START + timedelta(days=n)


def _make_tracker(config: DailyLoginConfig | None = None):
    bus = EventBus()
    store = CurrencyStore(bus)
    agg = ModifierAggregator()
    tracker = DailyLoginTracker(store, agg, bus, config)
    rec = EventRecorder(bus, (DailyRewardAvailable, DailyRewardClaimed))
    return tracker, store, agg, rec


def test_first_check_in_starts_streak():
    tracker, _, _, rec = _make_tracker()
    assert not tracker.can_claim()
    assert tracker.check_in(START)
    assert (tracker.streak_day, tracker.total_login_days) == (1, 1)
    assert tracker.can_claim()
    assert not tracker.check_in(START.replace(hour=23))
    assert rec.events == [DailyRewardAvailable(1)]


def test_consecutive_days_grow_streak_up_to_length():
    tracker, _, _, _ = _make_tracker()
    for n in range(10):
        tracker.check_in(_day(n))
    assert tracker.streak_day == 7
    assert tracker.total_login_days == 10
    assert tracker.today().title == "JACKPOT DAY!"


def test_gap_within_grace_keeps_streak():
    tracker, _, _, _ = _make_tracker()
    tracker.check_in(_day(0))
    tracker.check_in(_day(1))
    tracker.check_in(_day(3))
    assert tracker.streak_day == 2
    tracker.check_in(_day(7))
    assert tracker.streak_day == 1
    assert tracker.total_login_days == 4


def test_gap_keeps_streak_when_reset_disabled():
    tracker, _, _, _ = _make_tracker(DailyLoginConfig(reset_streak_on_miss=False))
    tracker.check_in(_day(0))
    tracker.check_in(_day(1))
    tracker.check_in(_day(30))
    assert tracker.streak_day == 2


def test_money_reward_scales_with_roll_value_and_streak():
    tracker, store, _, rec = _make_tracker()
    tracker.check_in(_day(0))
    tracker.check_in(_day(1))
    # Day two: 200 * 1.5, or ten minutes of rolling at 5 per roll * 1.5
    assert tracker.preview().amount == pytest.approx(300.0)
    assert tracker.preview(money_per_roll=5).amount == pytest.approx(750.0)

    result = tracker.claim(money_per_roll=5)
    assert result.success
    assert result.streak_day == 2
    assert store.get_amount(CurrencyKind.MONEY) == pytest.approx(750.0)
    assert store.get_lifetime(CurrencyKind.MONEY) == 0
    assert rec.of_type(DailyRewardClaimed) == [
        DailyRewardClaimed(2, RewardType.MONEY, pytest.approx(750.0))
    ]
    assert tracker.claim().reason == "Already claimed today"


def test_dark_matter_reward_adds_share_of_yesterday():
    tracker, store, _, _ = _make_tracker()
    tracker.check_in(_day(0))
    tracker.check_in(_day(1))
    store.add(CurrencyKind.DARK_MATTER, 100)
    tracker.check_in(_day(2))
    assert tracker.yesterday_dark_matter == 100
    assert tracker.claim().reward == Reward(RewardType.DARK_MATTER, pytest.approx(20.0))
    assert store.get_amount(CurrencyKind.DARK_MATTER) == pytest.approx(120.0)


def test_boost_reward_is_timed_modifier():
    tracker, _, agg, _ = _make_tracker()
    for n in range(4):
        tracker.check_in(_day(n))
    result = tracker.claim()
    assert result.reward.type is RewardType.MONEY_BOOST
    assert agg.get_stat(Stat.GLOBAL_MONEY_MULTIPLIER) == 1.5
    agg.advance(600)
    assert agg.get_stat(Stat.GLOBAL_MONEY_MULTIPLIER) == 1.0


def test_claim_before_check_in_fails():
    tracker, store, _, rec = _make_tracker()
    result = tracker.claim()
    assert not result.success
    assert result.reason == "No check-in yet"
    assert store.get_amount(CurrencyKind.MONEY) == 0
    assert rec.events == []


def test_snapshot_restore_round_trip():
    tracker, store, agg, _ = _make_tracker()
    tracker.check_in(_day(0))
    tracker.check_in(_day(1))
    tracker.claim()
    data = tracker.snapshot()

    other = DailyLoginTracker(store, agg, EventBus())
    other.restore(data)
    assert other.snapshot() == data
    assert not other.can_claim()
    assert other.check_in(_day(2))
    assert other.streak_day == 3


def test_restore_tolerates_garbage():
    tracker, _, _, _ = _make_tracker()
    tracker.restore({"last_login": "soon", "streak_day": "x", "claimed_today": True})
    assert tracker.last_login is None
    assert tracker.streak_day == 1
    tracker.restore({"streak_day": 99})
    assert tracker.streak_day == 7


def test_config_validation():
    assert DailyLoginConfig().validate() == []
    bad = DailyLoginConfig(
        days=[DailyRewardDay(Reward(RewardType.MONEY, -1), streak_multiplier=0)],
        grace_period_days=0,
    )
    assert len(bad.validate()) == 3
    assert DailyLoginConfig(days=[]).validate() == ["Daily login needs at least one reward day"]
