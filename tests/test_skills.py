"""Tests for skills and helpers modules."""
from idlecore.currency import CurrencyKind, CurrencyStore
from idlecore.events import (
    EventBus,
    EventRecorder,
    SkillRevoked,
    SkillTreeReset,
    SkillUnlocked,
)
from idlecore.helpers import HelperPool
from idlecore.modifier import Modifier, Stat
from idlecore.skills import SkillNodeDef, SkillRegistry


def _make_registry(dark_matter: float = 0.0):
    bus = EventBus()
    store = CurrencyStore(bus)
    store.add(CurrencyKind.DARK_MATTER, dark_matter)
    reg = SkillRegistry(
        [
            SkillNodeDef("core", cost=0),
            SkillNodeDef(
                "loose_change",
                cost=100,
                prerequisites=["core"],
                modifiers=[Modifier.add(Stat.GLOBAL_MONEY_MULTIPLIER, 0.25)],
            ),
        ],
        bus,
        store,
    )
    rec = EventRecorder(bus, (SkillUnlocked, SkillRevoked, SkillTreeReset))
    return reg, store, rec


def test_bound_modifiers_carry_skill_id():
    sdef = SkillNodeDef("x", modifiers=[Modifier.mult(Stat.JACKPOT_MULTIPLIER, 5.0)])
    mods = sdef.bound_modifiers()
    assert mods[0].source_id == "x"
    assert mods[0].magnitude == 5.0


def test_feature_gated_only_when_some_node_unlocks_it():
    bus = EventBus()
    reg = SkillRegistry(
        [SkillNodeDef("burst", unlocks=["roll_burst"])], bus, CurrencyStore(bus)
    )
    assert reg.feature_available("daily_login")
    assert not reg.feature_available("roll_burst")
    reg.unlock("burst")
    assert reg.unlocked_features() == {"roll_burst"}
    assert reg.feature_available("roll_burst")
    reg.clear()
    assert not reg.feature_available("roll_burst")


def test_purchase_requires_prerequisites():
    reg, store, _ = _make_registry(dark_matter=1000)
    assert not reg.purchase("loose_change")
    assert reg.purchase("core")
    assert reg.purchase("loose_change")
    assert store.get_amount(CurrencyKind.DARK_MATTER) == 900
    assert reg.list_unlocked() == ["core", "loose_change"]


def test_purchase_with_cost_reduction():
    reg, store, _ = _make_registry(dark_matter=60)
    reg.unlock("core")
    assert not reg.can_purchase("loose_change")
    assert reg.current_cost("loose_change", 0.5) == 50
    assert reg.purchase("loose_change", cost_reduction=0.5)
    assert store.get_amount(CurrencyKind.DARK_MATTER) == 10


def test_purchase_twice_fails():
    reg, _, _ = _make_registry()
    assert reg.purchase("core")
    assert not reg.purchase("core")


def test_unlock_and_revoke_publish():
    reg, store, rec = _make_registry()
    reg.unlock("core")
    reg.unlock("loose_change")
    assert reg.revoke("loose_change", refund=True)
    assert not reg.revoke("loose_change")
    assert store.get_amount(CurrencyKind.DARK_MATTER) == 100
    assert rec.events == [
        SkillUnlocked("core"),
        SkillUnlocked("loose_change"),
        SkillRevoked("loose_change"),
    ]


def test_clear_does_not_refund():
    reg, store, rec = _make_registry(dark_matter=100)
    reg.purchase("core")
    reg.purchase("loose_change")
    cleared = reg.clear()
    assert cleared == ["core", "loose_change"]
    assert reg.list_unlocked() == []
    assert store.get_amount(CurrencyKind.DARK_MATTER) == 0
    assert rec.events[-1] == SkillTreeReset(("core", "loose_change"))


def test_restore_is_silent_and_drops_unknown():
    reg, _, rec = _make_registry()
    reg.restore(["core", "ghost", "core"])
    assert reg.list_unlocked() == ["core"]
    assert rec.events == []


def test_helper_pool_capacity_comes_from_stat():
    pool = HelperPool()
    assert not pool.add()
    assert pool.add(max_count=1)
    assert not pool.add(max_count=1)
    assert pool.add(max_count=5)
    assert pool.count == 2
    assert pool.trim(max_count=0) == 2
    assert pool.count == 0
    assert HelperPool.capacity(-3) == 0


def test_helper_pool_reset_and_restore():
    pool = HelperPool(count=3)
    data = pool.snapshot()
    assert data == {"count": 3}
    pool.reset()
    assert pool.count == 0
    pool.restore(data)
    assert pool.count == 3
    pool.restore({"count": 2, "base_max": 9})
    assert pool.count == 2
    pool.restore({"count": "x"})
    assert pool.count == 0
