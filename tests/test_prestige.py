"""Tests for prestige module."""
import pytest

from idlecore.aggregator import ModifierAggregator
from idlecore.currency import CurrencyKind, CurrencyStore
from idlecore.events import CurrencyChanged, EventBus, EventRecorder, PrestigeCompleted
from idlecore.helpers import HelperPool
from idlecore.modifier import Modifier, Stat
from idlecore.prestige import (
    PrestigeBonuses,
    PrestigeConfig,
    PrestigeOrchestrator,
    PrestigeState,
)
from idlecore.skills import SkillNodeDef, SkillRegistry
from idlecore.units import UnitDef, UnitRegistry, UnitTier

MONEY = CurrencyKind.MONEY
DM = CurrencyKind.DARK_MATTER
SHARDS = CurrencyKind.TIME_SHARDS


def _make_orchestrator(with_skills: bool = True, with_helpers: bool = True):
    bus = EventBus()
    store = CurrencyStore(bus)
    agg = ModifierAggregator()
    units = UnitRegistry([UnitDef(UnitTier.BASIC), UnitDef(UnitTier.GOLD)], bus, store)
    units.add_unit(UnitTier.BASIC)
    skills = None
    if with_skills:
        skills = SkillRegistry(
            [SkillNodeDef("big", modifiers=[Modifier.mult(Stat.GLOBAL_MONEY_MULTIPLIER, 2.0)])],
            bus,
            store,
        )
    helpers = HelperPool(count=3) if with_helpers else None
    orch = PrestigeOrchestrator(store, units, agg, bus, skills=skills, helpers=helpers)
    orch.apply_bonuses()
    return orch, store, agg, units, skills, helpers, bus


def _fund(store: CurrencyStore, money: float = 100000, dm: float = 500) -> None:
    store.add(MONEY, money)
    store.add(DM, dm)


def test_level_zero_is_neutral():
    orch, _, agg, _, _, _, _ = _make_orchestrator()
    assert agg.get_stat(Stat.GLOBAL_MONEY_MULTIPLIER) == 1.0
    assert agg.get_stat(Stat.UNIT_VALUE_BONUS) == 0.0


def test_requirements_grow_with_level():
    orch, _, _, _, _, _, _ = _make_orchestrator()
    assert orch.requirements() == (100000, 500)
    orch.state.level = 2
    assert orch.requirements() == (900000, 1000)


def test_can_prestige_needs_both_currencies():
    orch, store, _, _, _, _, _ = _make_orchestrator()
    store.add(MONEY, 100000)
    assert not orch.can_prestige()
    store.add(DM, 500)
    assert orch.can_prestige()


def test_preview_reward():
    orch, store, _, _, _, _, _ = _make_orchestrator()
    _fund(store, money=200000, dm=505)
    # floor(10 + 0 + 50.5 + 20)
    assert orch.preview_reward() == 80


def test_failed_prestige_changes_nothing():
    orch, store, agg, units, _, _, bus = _make_orchestrator()
    store.add(MONEY, 99999)
    rec = EventRecorder(bus, (CurrencyChanged, PrestigeCompleted))
    result = orch.perform_prestige()
    assert not result.success
    assert result.reason
    assert orch.level == 0
    assert store.get_amount(MONEY) == 99999
    assert rec.events == []


def test_prestige_resets_and_rewards():
    orch, store, agg, units, skills, helpers, bus = _make_orchestrator()
    _fund(store)
    units.add_unit(UnitTier.GOLD)
    skills.unlock("big")
    agg.apply_modifier(Modifier.mult(Stat.GLOBAL_MONEY_MULTIPLIER, 2.0).bind("big"))
    rec = EventRecorder(bus, (PrestigeCompleted,))

    reward = orch.preview_reward()
    result = orch.perform_prestige()

    assert result.success
    assert result.reward_amount == reward
    assert result.new_level == 1
    assert result.skipped_steps == ()
    assert store.get_amount(SHARDS) == reward
    assert store.get_amount(MONEY) == 100
    assert store.get_amount(DM) == 0
    assert store.get_lifetime(MONEY) == 100000
    assert units.count() == 1
    assert units.list_units()[0].tier is UnitTier.BASIC
    assert skills.list_unlocked() == []
    assert "big" not in agg.sources()
    assert helpers.count == 0
    assert rec.events == [PrestigeCompleted(1, reward)]
    assert orch.state == PrestigeState(level=1, total_prestiges=1, lifetime_reward=reward)


def test_prestige_modifier_replaced_not_compounded():
    orch, store, agg, _, _, _, _ = _make_orchestrator()
    _fund(store)
    orch.perform_prestige()
    assert agg.get_stat(Stat.GLOBAL_MONEY_MULTIPLIER) == 1.1

    _fund(store, money=300000, dm=750)
    assert orch.perform_prestige().success
    assert agg.get_stat(Stat.GLOBAL_MONEY_MULTIPLIER) == 1.2
    mods = [m for m in agg.modifiers_for(Stat.GLOBAL_MONEY_MULTIPLIER) if m.source_id == "prestige"]
    assert len(mods) == 1
    assert mods[0].magnitude == 1.2


def test_bonuses_for_level():
    cfg = PrestigeConfig()
    b = PrestigeBonuses.for_level(3, cfg)
    assert b.money_multiplier == pytest.approx(1.3)
    assert b.dark_matter_multiplier == pytest.approx(1.15)
    assert b.unit_value_bonus == 3
    assert b.starting_money == 300
    assert b.skill_cost_reduction == pytest.approx(0.06)
    assert PrestigeBonuses.for_level(100, cfg).skill_cost_reduction == 0.5


def test_missing_collaborators_are_skipped():
    orch, store, _, _, _, _, _ = _make_orchestrator(with_skills=False, with_helpers=False)
    _fund(store)
    result = orch.perform_prestige()
    assert result.success
    assert result.skipped_steps == ("skills", "helpers")
    assert store.get_amount(MONEY) == 100


def test_snapshot_restore_reapplies_bonuses():
    orch, store, _, _, _, _, _ = _make_orchestrator()
    _fund(store)
    orch.perform_prestige()
    data = orch.snapshot()

    other, _, agg, _, _, _, _ = _make_orchestrator()
    other.restore(data)
    assert other.level == 1
    assert agg.get_stat(Stat.GLOBAL_MONEY_MULTIPLIER) == 1.1

    other.restore({"level": "bad"})
    assert other.level == 0
    assert agg.get_stat(Stat.GLOBAL_MONEY_MULTIPLIER) == 1.0
