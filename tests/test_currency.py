"""Tests for currency module."""
from idlecore.currency import CurrencyKind, CurrencyStore
from idlecore.events import CurrencyChanged, EventBus, EventRecorder

MONEY = CurrencyKind.MONEY
DM = CurrencyKind.DARK_MATTER


def _make_store():
    bus = EventBus()
    return CurrencyStore(bus), EventRecorder(bus, (CurrencyChanged,))


def test_add_counts_lifetime():
    store, rec = _make_store()
    store.add(MONEY, 100)
    assert store.get_amount(MONEY) == 100
    assert store.get_lifetime(MONEY) == 100
    assert rec.events == [CurrencyChanged(MONEY, 100, 100, 100)]


def test_add_without_lifetime():
    store, _ = _make_store()
    store.add(MONEY, 50, count_lifetime=False)
    assert store.get_amount(MONEY) == 50
    assert store.get_lifetime(MONEY) == 0


def test_add_nonpositive_ignored():
    store, rec = _make_store()
    store.add(MONEY, 0)
    store.add(MONEY, -5)
    assert store.get_amount(MONEY) == 0
    assert rec.events == []


def test_spend():
    store, rec = _make_store()
    store.add(MONEY, 100)
    assert store.spend(MONEY, 40, reason="unit")
    assert store.get_amount(MONEY) == 60
    assert store.get_lifetime(MONEY) == 100
    assert rec.events[-1].delta == -40
    assert rec.events[-1].reason == "unit"


def test_spend_unaffordable_leaves_state():
    store, rec = _make_store()
    store.add(MONEY, 10)
    rec.clear()
    assert not store.spend(MONEY, 11)
    assert store.get_amount(MONEY) == 10
    assert rec.events == []


def test_zero_keeps_lifetime():
    store, rec = _make_store()
    store.add(DM, 30)
    store.zero(DM)
    assert store.get_amount(DM) == 0
    assert store.get_lifetime(DM) == 30
    assert rec.events[-1].reason == "reset"


def test_snapshot_restore():
    store, _ = _make_store()
    store.add(MONEY, 100)
    store.spend(MONEY, 25)
    rows = store.snapshot()

    other, rec = _make_store()
    other.restore(rows + [["BOGUS", 1, 1], ["MONEY"]])
    assert other.get_amount(MONEY) == 75
    assert other.get_lifetime(MONEY) == 100
    assert all(e.reason == "restore" for e in rec.events)
