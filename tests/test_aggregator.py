"""Tests for aggregator module."""
import random

import pytest

from idlecore.aggregator import ModifierAggregator, aggregate
from idlecore.modifier import ModifierMode, Stat, StatModifier

MULT = ModifierMode.MULTIPLICATIVE
ADD = ModifierMode.ADDITIVE
GMM = Stat.GLOBAL_MONEY_MULTIPLIER


def _mods() -> list[StatModifier]:
    return [
        StatModifier("skill_a", GMM, MULT, 1.1),
        StatModifier("skill_b", GMM, MULT, 1.3),
        StatModifier("prestige", GMM, MULT, 1.7),
        StatModifier("goal:x", GMM, MULT, 0.7),
        StatModifier("skill_c", GMM, ADD, 0.25),
    ]


def test_neutral_bases():
    agg = ModifierAggregator()
    assert agg.get_stat(GMM) == 1.0
    assert agg.get_stat(Stat.UNIT_VALUE_BONUS) == 0.0
    assert agg.get_stat(Stat.JACKPOT_MULTIPLIER) == 2.0
    assert agg.get_stat(Stat.OFFLINE_EFFICIENCY) == 0.25


def test_base_override():
    agg = ModifierAggregator(bases={Stat.OFFLINE_EFFICIENCY: 1.0})
    assert agg.get_stat(Stat.OFFLINE_EFFICIENCY) == 1.0
    assert agg.base(GMM) == 1.0


def test_multiplicative_then_additive():
    agg = ModifierAggregator()
    agg.apply_modifier(StatModifier("a", GMM, MULT, 2.0))
    agg.apply_modifier(StatModifier("b", GMM, ADD, 0.5))
    assert agg.get_stat(GMM) == 2.5


def test_same_key_replaces():
    agg = ModifierAggregator()
    agg.apply_modifier(StatModifier("prestige", GMM, MULT, 1.1))
    agg.apply_modifier(StatModifier("prestige", GMM, MULT, 1.2))
    assert agg.get_stat(GMM) == 1.2
    assert len(agg.modifiers_for(GMM)) == 1


def test_final_value_independent_of_order():
    rng = random.Random(7)
    reference = None
    for _ in range(20):
        mods = _mods()
        rng.shuffle(mods)
        agg = ModifierAggregator()
        for m in mods:
            agg.apply_modifier(m)
        # Interleave some noise that is removed again
        agg.apply_modifier(StatModifier("noise", GMM, MULT, 3.3))
        agg.remove_modifier("noise", GMM)
        value = agg.get_stat(GMM)
        if reference is None:
            reference = value
        assert value == reference
    assert reference == aggregate(1.0, _mods())


def test_value_matches_replay_of_active_set():
    agg = ModifierAggregator()
    for m in _mods():
        agg.apply_modifier(m)
    agg.remove_modifier("skill_b", GMM)
    fresh = ModifierAggregator()
    for m in agg.active_modifiers():
        fresh.apply_modifier(m)
    assert agg.get_stat(GMM) == fresh.get_stat(GMM)


def test_remove_all_then_reapply_round_trip():
    agg = ModifierAggregator()
    for m in _mods():
        agg.apply_modifier(m)
    agg.apply_modifier(StatModifier("skill_a", Stat.JACKPOT_CHANCE, ADD, 0.03))
    before = agg.get_stat(GMM)
    removed = agg.modifiers_from("skill_a")

    assert agg.remove_all_from_source("skill_a") == 2
    assert agg.get_stat(Stat.JACKPOT_CHANCE) == 0.0
    for m in removed:
        agg.apply_modifier(m)
    assert agg.get_stat(GMM) == before
    assert agg.get_stat(Stat.JACKPOT_CHANCE) == 0.03


def test_zero_magnitude_removal():
    agg = ModifierAggregator()
    agg.apply_modifier(StatModifier("a", GMM, MULT, 1.5))
    agg.apply_modifier(StatModifier("zero", GMM, MULT, 0.0))
    assert agg.get_stat(GMM) == 0.0
    assert agg.remove_modifier("zero", GMM)
    assert agg.get_stat(GMM) == 1.5


def test_remove_absent_is_noop():
    agg = ModifierAggregator()
    assert not agg.remove_modifier("missing", GMM)
    assert agg.remove_all_from_source("missing") == 0
    assert agg.get_stat(GMM) == 1.0


def test_replace_source():
    agg = ModifierAggregator()
    agg.apply_modifier(StatModifier("prestige", GMM, MULT, 1.1))
    agg.apply_modifier(StatModifier("prestige", Stat.UNIT_VALUE_BONUS, ADD, 1.0))
    agg.replace_source("prestige", [StatModifier("prestige", GMM, MULT, 1.2)])
    assert agg.get_stat(GMM) == 1.2
    assert agg.get_stat(Stat.UNIT_VALUE_BONUS) == 0.0


def test_replace_source_rejects_foreign_modifier():
    agg = ModifierAggregator()
    with pytest.raises(ValueError):
        agg.replace_source("prestige", [StatModifier("other", GMM, MULT, 1.2)])


def test_timed_modifier_expires():
    agg = ModifierAggregator()
    agg.apply_timed(StatModifier("goal:x:boost", GMM, MULT, 1.5), 10.0)
    assert agg.get_stat(GMM) == 1.5
    assert agg.advance(4.0) == []
    assert agg.timed_remaining("goal:x:boost", GMM) == pytest.approx(6.0)
    expired = agg.advance(6.0)
    assert [m.source_id for m in expired] == ["goal:x:boost"]
    assert agg.get_stat(GMM) == 1.0


def test_timed_with_nonpositive_duration_is_ignored():
    agg = ModifierAggregator()
    agg.apply_timed(StatModifier("t", GMM, MULT, 1.5), 0.0)
    assert agg.get_stat(GMM) == 1.0


def test_snapshot_excludes_timed_and_restores():
    agg = ModifierAggregator()
    for m in _mods():
        agg.apply_modifier(m)
    agg.apply_timed(StatModifier("boost", GMM, MULT, 2.0), 60.0)
    rows = agg.snapshot()
    assert all(r[0] != "boost" for r in rows)

    restored = ModifierAggregator()
    restored.restore(rows)
    assert restored.get_stat(GMM) == aggregate(1.0, _mods())


def test_restore_skips_bad_rows():
    agg = ModifierAggregator()
    agg.restore([
        ["a", "GLOBAL_MONEY_MULTIPLIER", "MULTIPLICATIVE", 2.0],
        ["b", "NOT_A_STAT", "MULTIPLICATIVE", 2.0],
        ["c", "GLOBAL_MONEY_MULTIPLIER"],
        "garbage",
    ])
    assert agg.get_stat(GMM) == 2.0
    assert agg.sources() == {"a"}
