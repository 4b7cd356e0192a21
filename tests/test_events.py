"""Unit tests for :mod:`resumer.events`."""

from __future__ import annotations

import gc
from datetime import datetime, timezone

from resumer.events import (
    DocumentChanged,
    DocumentSaved,
    Event,
    EventBus,
    ExportFailed,
    SaveFailed,
    SaveStateChanged,
)


# =============================================================================
# Subscription
# =============================================================================


class TestEventBusSubscription:
    def test_subscribe_counts_handlers_per_type(self) -> None:
        bus: EventBus[Event] = EventBus()

        bus.subscribe(DocumentChanged, lambda e: None)
        bus.subscribe(DocumentChanged, lambda e: None)
        bus.subscribe(SaveFailed, lambda e: None)

        assert bus.handler_count(DocumentChanged) == 2
        assert bus.handler_count(SaveFailed) == 1
        assert bus.handler_count() == 3

    def test_unsubscribe_removes_one_registration(self) -> None:
        bus: EventBus[Event] = EventBus()

        def handler(event: DocumentChanged) -> None:
            pass

        bus.subscribe(DocumentChanged, handler)
        bus.subscribe(DocumentChanged, handler)
        bus.unsubscribe(DocumentChanged, handler)

        assert bus.handler_count(DocumentChanged) == 1

    def test_unsubscribe_unknown_handler_is_safe(self) -> None:
        bus: EventBus[Event] = EventBus()

        bus.unsubscribe(DocumentChanged, lambda e: None)

        assert bus.handler_count() == 0

    def test_clear_removes_everything(self) -> None:
        bus: EventBus[Event] = EventBus()
        bus.subscribe(DocumentChanged, lambda e: None)
        bus.subscribe(ExportFailed, lambda e: None)

        bus.clear()

        assert bus.handler_count() == 0


# =============================================================================
# Publishing
# =============================================================================


class TestEventBusPublish:
    def test_publish_delivers_in_subscription_order(self) -> None:
        bus: EventBus[Event] = EventBus()
        order: list[int] = []
        bus.subscribe(DocumentChanged, lambda e: order.append(1))
        bus.subscribe(DocumentChanged, lambda e: order.append(2))

        bus.publish(DocumentChanged("s1", "add_section", 1))

        assert order == [1, 2]

    def test_publish_only_reaches_matching_type(self) -> None:
        bus: EventBus[Event] = EventBus()
        saved: list[DocumentSaved] = []
        failed: list[SaveFailed] = []
        bus.subscribe(DocumentSaved, saved.append)
        bus.subscribe(SaveFailed, failed.append)

        bus.publish(SaveFailed("build-1", "offline"))

        assert saved == []
        assert failed[0].message == "offline"

    def test_failing_handler_does_not_stop_others(self) -> None:
        bus: EventBus[Event] = EventBus()
        received: list[str] = []

        def broken(event: SaveStateChanged) -> None:
            raise ValueError("boom")

        bus.subscribe(SaveStateChanged, broken)
        bus.subscribe(SaveStateChanged, lambda e: received.append(e.state))

        bus.publish(SaveStateChanged("saving", None, True))

        assert received == ["saving"]

    def test_publish_without_handlers_is_safe(self) -> None:
        bus: EventBus[Event] = EventBus()

        bus.publish(DocumentSaved("build-1", datetime.now(timezone.utc)))


# =============================================================================
# Weak references
# =============================================================================


class TestEventBusWeakReferences:
    def test_bound_method_dropped_after_owner_collected(self) -> None:
        bus: EventBus[Event] = EventBus()
        received: list[DocumentChanged] = []

        class Subscriber:
            def handle(self, event: DocumentChanged) -> None:
                received.append(event)

        subscriber = Subscriber()
        bus.subscribe(DocumentChanged, subscriber.handle)
        bus.publish(DocumentChanged("s1", "set_title", 1))

        del subscriber
        gc.collect()
        bus.publish(DocumentChanged("s1", "set_title", 2))

        assert [event.revision for event in received] == [1]
        assert bus.handler_count(DocumentChanged) == 0

    def test_bound_method_can_be_unsubscribed(self) -> None:
        bus: EventBus[Event] = EventBus()

        class Subscriber:
            def handle(self, event: DocumentChanged) -> None:
                pass

        subscriber = Subscriber()
        bus.subscribe(DocumentChanged, subscriber.handle)
        bus.unsubscribe(DocumentChanged, subscriber.handle)

        assert bus.handler_count(DocumentChanged) == 0
