"""Tests for goal module."""
import pytest

from idlecore.aggregator import ModifierAggregator
from idlecore.currency import CurrencyKind, CurrencyStore
from idlecore.events import EventBus
from idlecore.goal import (
    GoalDefinition,
    GoalKind,
    GoalMetric,
    GoalProgress,
    GoalScope,
    GoalStatus,
    Reward,
    RewardType,
    UpdateMode,
    grant_reward,
)
from idlecore.modifier import Stat


def test_metric_default_modes():
    assert GoalMetric.LIFETIME_MONEY.mode is UpdateMode.ABSOLUTE
    assert GoalMetric.TOTAL_ROLLS.mode is UpdateMode.ABSOLUTE
    assert GoalMetric.ROLLS.mode is UpdateMode.INCREMENT
    assert GoalMetric.MONEY_SPENT.mode is UpdateMode.INCREMENT


def test_factories():
    m = GoalDefinition.milestone("m", GoalMetric.TOTAL_ROLLS, 100, Reward(RewardType.MONEY, 5))
    assert m.kind is GoalKind.MILESTONE
    assert m.scope is GoalScope.PERMANENT
    assert m.display_name == "m"
    assert m.rewards == (Reward(RewardType.MONEY, 5),)

    d = GoalDefinition.mission("d", GoalScope.DAILY, GoalMetric.ROLLS, 50)
    assert d.kind is GoalKind.MISSION
    assert d.scope is GoalScope.DAILY


def test_absolute_completes_on_crossing_only():
    prog = GoalProgress("money_1k")
    assert not prog.apply(999, UpdateMode.ABSOLUTE, 1000)
    assert prog.status is GoalStatus.ACTIVE
    assert prog.apply(1000, UpdateMode.ABSOLUTE, 1000)
    assert prog.status is GoalStatus.COMPLETED


def test_increment_clamps_at_target():
    prog = GoalProgress("rolls")
    prog.apply(30, UpdateMode.INCREMENT, 50)
    assert prog.apply(30, UpdateMode.INCREMENT, 50)
    assert prog.current == 50


def test_completion_fires_once_and_never_reverts():
    prog = GoalProgress("g")
    assert prog.apply(10, UpdateMode.ABSOLUTE, 10)
    assert not prog.apply(20, UpdateMode.ABSOLUTE, 10)
    assert not prog.apply(0, UpdateMode.ABSOLUTE, 10)
    assert prog.completed
    assert prog.current == 10


def test_claimed_goal_ignores_updates():
    prog = GoalProgress("g", current=10, completed=True, claimed=True)
    assert not prog.apply(5, UpdateMode.INCREMENT, 10)
    assert prog.status is GoalStatus.CLAIMED
    assert not prog.claimable


def test_progress_dict_round_trip():
    prog = GoalProgress("g", current=3.5, completed=True)
    assert GoalProgress.from_dict(prog.to_dict()) == prog


def _collaborators():
    bus = EventBus()
    return CurrencyStore(bus), ModifierAggregator()


def test_grant_currency_reward_skips_lifetime():
    store, agg = _collaborators()
    grant_reward(Reward(RewardType.TIME_SHARDS, 5), "goal:x", store, agg)
    assert store.get_amount(CurrencyKind.TIME_SHARDS) == 5
    assert store.get_lifetime(CurrencyKind.TIME_SHARDS) == 0


def test_grant_permanent_boost():
    store, agg = _collaborators()
    grant_reward(Reward(RewardType.PERMANENT_MONEY_BOOST, 0.05), "goal:x", store, agg)
    grant_reward(Reward(RewardType.PERMANENT_DARK_MATTER_BOOST, 0.1), "goal:y", store, agg)
    assert agg.get_stat(Stat.GLOBAL_MONEY_MULTIPLIER) == pytest.approx(1.05)
    assert agg.get_stat(Stat.DARK_MATTER_MULTIPLIER) == pytest.approx(1.1)
    assert agg.sources() == {"goal:x", "goal:y"}


def test_permanent_boosts_pool_under_one_source():
    store, agg = _collaborators()
    grant_reward(Reward(RewardType.PERMANENT_MONEY_BOOST, 0.5), "milestones", store, agg)
    grant_reward(Reward(RewardType.PERMANENT_MONEY_BOOST, 0.25), "milestones", store, agg)
    grant_reward(Reward(RewardType.PERMANENT_DARK_MATTER_BOOST, 0.1), "milestones", store, agg)
    assert agg.get_stat(Stat.GLOBAL_MONEY_MULTIPLIER) == pytest.approx(1.75)
    assert agg.get_stat(Stat.DARK_MATTER_MULTIPLIER) == pytest.approx(1.1)
    assert Reward(RewardType.PERMANENT_MONEY_BOOST, 1).is_permanent_boost
    assert not Reward(RewardType.MONEY_BOOST, 1).is_permanent_boost


def test_grant_timed_boost():
    store, agg = _collaborators()
    grant_reward(Reward(RewardType.MONEY_BOOST, 50, duration=60), "goal:x", store, agg)
    assert agg.get_stat(Stat.GLOBAL_MONEY_MULTIPLIER) == 1.5
    agg.advance(60)
    assert agg.get_stat(Stat.GLOBAL_MONEY_MULTIPLIER) == 1.0
