"""Tests for NotificationStore mutations, expiry and fan-out."""

from __future__ import annotations

from typing import List

import pytest

from gp_common.config.settings import NotificationSettings
from gp_common.scheduling import ManualScheduler
from gp_notify.models import Notification, NotificationAction, NotificationType
from gp_notify.persistence import InMemoryKeyValueStore, decode_notifications
from gp_notify.store import NotificationStore


pytestmark = pytest.mark.unit_notify


@pytest.fixture
def backend() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def store(backend: InMemoryKeyValueStore, scheduler: ManualScheduler) -> NotificationStore:
    return NotificationStore(backend, scheduler=scheduler)


def _persisted(backend: InMemoryKeyValueStore) -> List[Notification]:
    return decode_notifications(backend.get("gst-notifications"))


def test_add_prepends_unread_entry_and_persists(store, backend, scheduler) -> None:
    first = store.add("One", "first", persistent=True)
    scheduler.advance(0.001)
    second = store.add("Two", "second", NotificationType.SUCCESS, persistent=True)

    ids = [n.id for n in store.notifications]
    assert ids == [second, first]
    assert store.notifications[0].timestamp > store.notifications[1].timestamp
    assert all(not n.read for n in store.notifications)
    assert [n.id for n in _persisted(backend)] == [second, first]


def test_ids_are_unique(store) -> None:
    ids = {store.add("t", "m", persistent=True) for _ in range(50)}
    assert len(ids) == 50


def test_transient_notification_defaults_to_five_seconds(store, scheduler) -> None:
    notification_id = store.add("X", "Y", NotificationType.WARNING, persistent=False)
    assert store.get(notification_id).duration_ms == 5000
    assert store.unread_count == 1

    scheduler.advance(4.999)
    assert store.get(notification_id) is not None

    scheduler.advance(0.001)
    assert store.get(notification_id) is None
    assert store.unread_count == 0


@pytest.mark.parametrize("duration_ms", [0, 1, 250, 10_000])
def test_transient_notification_lives_exactly_its_duration(store, scheduler, duration_ms) -> None:
    notification_id = store.add("t", "m", duration_ms=duration_ms)
    if duration_ms:
        scheduler.advance(duration_ms / 1000.0 - 0.0005)
        assert store.get(notification_id) is not None
        scheduler.advance(0.0005)
    else:
        scheduler.run_pending()
    assert store.get(notification_id) is None


def test_persistent_notification_never_expires(store, scheduler) -> None:
    notification_id = store.add("keep", "me", persistent=True)
    assert scheduler.pending == 0
    scheduler.advance(3600)
    assert store.get(notification_id) is not None


def test_negative_duration_is_rejected(store) -> None:
    with pytest.raises(ValueError):
        store.add("t", "m", duration_ms=-1)


def test_remove_is_idempotent(store, scheduler) -> None:
    keep = store.add("keep", "m", persistent=True)
    gone = store.add("gone", "m")
    events: List[int] = []
    store.subscribe(lambda items: events.append(len(items)))

    store.remove(gone)
    store.remove(gone)
    store.remove("missing")

    assert [n.id for n in store.notifications] == [keep]
    assert events == [1]
    # the expiry task of the removed entry is a no-op
    scheduler.advance(10)
    assert len(store) == 1


def test_mark_read_and_mark_all_read_track_unread_count(store, backend) -> None:
    a = store.add("a", "m", persistent=True)
    store.add("b", "m", persistent=True)
    store.add("c", "m", persistent=True)
    assert store.unread_count == 3

    store.mark_read(a)
    store.mark_read(a)
    store.mark_read("missing")
    assert store.unread_count == 2
    assert store.get(a).read is True
    assert sum(1 for n in _persisted(backend) if not n.read) == 2

    store.mark_all_read()
    assert store.unread_count == 0
    assert all(n.read for n in store.notifications)


def test_clear_all_empties_list_and_neutralises_pending_expiry(store, scheduler, backend) -> None:
    for i in range(3):
        store.add(f"p{i}", "m", persistent=True)
    for i in range(2):
        store.add(f"t{i}", "m")
    snapshots: List[int] = []
    store.subscribe(lambda items: snapshots.append(len(items)))

    store.clear_all()
    assert len(store) == 0
    assert _persisted(backend) == []

    scheduler.advance(60)
    assert snapshots == [0]


def test_subscribers_see_post_mutation_state(store) -> None:
    seen: List[List[str]] = []
    store.subscribe(lambda items: seen.append([n.title for n in items]))

    store.add("first", "m", persistent=True)
    store.add("second", "m", persistent=True)

    assert seen == [["first"], ["second", "first"]]


def test_toasts_show_three_newest_transient_entries(store) -> None:
    store.add("p", "m", persistent=True)
    transient_ids = [store.add(f"t{i}", "m") for i in range(5)]

    toasts = store.toasts
    assert [n.id for n in toasts] == list(reversed(transient_ids))[:3]
    assert len(store) == 6


def test_toast_limit_comes_from_settings(backend, scheduler) -> None:
    store = NotificationStore(backend, scheduler=scheduler, settings=NotificationSettings(toast_limit=1))
    store.add("a", "m")
    store.add("b", "m")
    assert [n.title for n in store.toasts] == ["b"]


def test_length_equals_adds_minus_removals(store, scheduler) -> None:
    ids = [store.add(f"n{i}", "m", duration_ms=(i + 1) * 1000) for i in range(6)]
    store.remove(ids[5])
    scheduler.advance(2.0)  # expires n0 and n1
    assert len(store) == 6 - 1 - 2
    stamps = [n.timestamp for n in store.notifications]
    assert stamps == sorted(stamps, reverse=True)


def test_action_is_kept_in_memory(store) -> None:
    clicked: List[bool] = []
    notification_id = store.add(
        "Payment Required",
        "Pay now",
        NotificationType.WARNING,
        persistent=True,
        action=NotificationAction("Make Payment", lambda: clicked.append(True)),
        category="payment",
        priority="high",
    )
    notification = store.get(notification_id)
    assert notification.category.value == "payment"
    assert notification.priority.value == "high"
    assert notification.action.invoke() is True
    assert clicked == [True]


def test_shortcuts_set_type_and_error_is_persistent(store, scheduler) -> None:
    ok = store.success("Saved", "done")
    err = store.error("Failed", "oops")
    store.warning("Careful", "hmm")
    store.info("FYI", "note")

    assert store.get(ok).type is NotificationType.SUCCESS
    assert store.get(err).persistent is True
    scheduler.advance(10)
    assert [n.id for n in store.notifications] == [err]


class FailingBackend(InMemoryKeyValueStore):
    def set(self, key: str, value: str) -> None:
        raise OSError("quota exceeded")


def test_persistence_failure_keeps_in_memory_state(scheduler, caplog) -> None:
    store = NotificationStore(FailingBackend(), scheduler=scheduler)
    seen: List[int] = []
    store.subscribe(lambda items: seen.append(len(items)))

    notification_id = store.add("t", "m", persistent=True)

    assert store.get(notification_id) is not None
    assert seen == [1]
    assert "Could not persist notifications" in caplog.text


def test_listener_may_call_back_into_store(store) -> None:
    counts: List[int] = []
    store.subscribe(lambda items: counts.append(store.unread_count))
    store.add("t", "m", persistent=True)
    assert counts == [1]


class QuotaExceededBackend(InMemoryKeyValueStore):
    def set(self, key: str, value: str) -> None:
        raise RuntimeError("QuotaExceededError")


def test_non_os_backend_failure_still_expires_and_notifies(scheduler, caplog) -> None:
    store = NotificationStore(QuotaExceededBackend(), scheduler=scheduler)
    seen: List[int] = []
    store.subscribe(lambda items: seen.append(len(items)))

    notification_id = store.add("t", "m")
    assert store.get(notification_id) is not None
    assert seen == [1]
    assert "Could not persist notifications" in caplog.text

    scheduler.advance(5)
    assert store.get(notification_id) is None
    assert seen == [1, 0]

    store.add("p", "m", persistent=True)
    store.clear_all()
    assert len(store) == 0
