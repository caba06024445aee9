"""Tests for events module."""
from idlecore.events import (
    EventBus,
    EventRecorder,
    SkillRevoked,
    SkillUnlocked,
)


def test_publish_dispatches_by_exact_type():
    bus = EventBus()
    seen = []
    bus.subscribe(SkillUnlocked, seen.append)
    bus.publish(SkillUnlocked("a"))
    bus.publish(SkillRevoked("a"))
    assert seen == [SkillUnlocked("a")]
    assert bus.published_count == 2


def test_handlers_run_in_subscription_order():
    bus = EventBus()
    order = []
    bus.subscribe(SkillUnlocked, lambda e: order.append("first"))
    bus.subscribe(SkillUnlocked, lambda e: order.append("second"))
    bus.publish(SkillUnlocked("x"))
    assert order == ["first", "second"]


def test_unsubscribe():
    bus = EventBus()
    seen = []
    unsub = bus.subscribe(SkillUnlocked, seen.append)
    assert bus.handler_count(SkillUnlocked) == 1
    unsub()
    unsub()  # second call is harmless
    bus.publish(SkillUnlocked("a"))
    assert seen == []
    assert bus.handler_count(SkillUnlocked) == 0


def test_unsubscribe_during_dispatch():
    bus = EventBus()
    seen = []
    unsubs = []

    def once(event):
        seen.append(event)
        unsubs[0]()

    unsubs.append(bus.subscribe(SkillUnlocked, once))
    bus.publish(SkillUnlocked("a"))
    bus.publish(SkillUnlocked("b"))
    assert seen == [SkillUnlocked("a")]


def test_nested_publish_of_other_type():
    bus = EventBus()
    seen = []
    bus.subscribe(SkillUnlocked, lambda e: bus.publish(SkillRevoked(e.skill_id)))
    bus.subscribe(SkillRevoked, seen.append)
    bus.publish(SkillUnlocked("a"))
    assert seen == [SkillRevoked("a")]


def test_recorder():
    bus = EventBus()
    rec = EventRecorder(bus, (SkillUnlocked, SkillRevoked))
    bus.publish(SkillUnlocked("a"))
    bus.publish(SkillRevoked("a"))
    assert rec.of_type(SkillUnlocked) == [SkillUnlocked("a")]
    assert len(rec.events) == 2
    rec.clear()
    assert rec.events == []
    rec.close()
    bus.publish(SkillUnlocked("b"))
    assert rec.events == []
