from datetime import datetime, timedelta, timezone

import pytest

from services.notifier import Notifier


class Clock:
    def __init__(self):
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        return self.now


def test_toasts_expire_after_duration():
    clock = Clock()
    notifier = Notifier(duration_sec=5, clock=clock)
    notifier.show("Added offline", "info")

    clock.now += timedelta(seconds=4)
    assert len(notifier.active()) == 1

    clock.now += timedelta(seconds=1)
    assert notifier.active() == []


def test_listeners_receive_snapshots():
    notifier = Notifier(duration_sec=5)
    seen = []
    notifier.subscribe(seen.append)

    toast = notifier.show("Item added", "success")
    notifier.dismiss(toast.id)

    assert [[t.message for t in batch] for batch in seen] == [["Item added"], []]

    notifier.unsubscribe(seen.append)
    notifier.show("again")
    assert len(seen) == 2


def test_unknown_kind():
    with pytest.raises(ValueError):
        Notifier().show("hi", "warning")


def test_broken_listener_does_not_block_others():
    notifier = Notifier()
    seen = []

    def broken(_):
        raise RuntimeError("ui gone")

    notifier.subscribe(broken)
    notifier.subscribe(seen.append)
    notifier.show("still delivered")
    assert len(seen) == 1
