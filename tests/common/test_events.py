from __future__ import annotations

from production_tracker.common.events import CollectionChanged, EventBus, Notification, SyncCompleted
from production_tracker.core.enums import NotificationLevel


def test_subscribers_receive_only_their_event_type():
    bus = EventBus()
    changes, notes = [], []
    bus.subscribe(CollectionChanged, changes.append)
    bus.subscribe(Notification, notes.append)

    bus.publish(CollectionChanged("production"))
    bus.publish(Notification("SAVED", NotificationLevel.INFO))
    bus.publish(SyncCompleted())

    assert changes == [CollectionChanged("production", "local")]
    assert notes[0].level == NotificationLevel.INFO


def test_unsubscribe_stops_delivery():
    bus = EventBus()
    seen = []
    unsubscribe = bus.subscribe(CollectionChanged, seen.append)

    unsubscribe()
    unsubscribe()
    bus.publish(CollectionChanged("users"))

    assert seen == []


def test_failing_handler_does_not_block_others():
    bus = EventBus()
    seen = []

    def broken(event):
        raise RuntimeError("boom")

    bus.subscribe(Notification, broken)
    bus.subscribe(Notification, seen.append)
    bus.publish(Notification("hello"))

    assert [n.message for n in seen] == ["hello"]


def test_clear_drops_all_subscriptions():
    bus = EventBus()
    seen = []
    bus.subscribe(Notification, seen.append)
    bus.clear()
    bus.publish(Notification("ignored"))

    assert seen == []
