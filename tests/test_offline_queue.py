import json

import pytest
from sqlmodel import Session

from models import QueuedAction
from services.actions import ActionType, InvalidActionError
from services.offline_queue import DuplicateKeyError, OfflineQueue, StorageError


MILK = {"name": "Milk", "listId": "L1"}


def test_enqueue_offline_item_is_pending(queue):
    action_id = queue.enqueue("create_item", MILK, timestamp=1_700_000_000_000)

    pending = queue.list_pending()
    assert len(pending) == 1
    entry = pending[0]
    assert entry.id == action_id
    assert entry.type == "create_item"
    assert entry.payload == MILK
    assert entry.synced is False
    assert entry.timestamp == 1_700_000_000_000


def test_action_id_format(queue):
    action_id = queue.enqueue(ActionType.CREATE_ITEM, MILK, timestamp=42)
    kind, ts, suffix = action_id.rsplit("-", 2)
    assert kind == "create_item"
    assert ts == "42"
    assert len(suffix) == 32


def test_same_tick_enqueues_do_not_collide(queue):
    ids = {queue.enqueue("create_item", MILK, timestamp=1) for _ in range(20)}
    assert len(ids) == 20
    assert queue.count_pending() == 20


def test_default_timestamp_is_epoch_millis(queue, monkeypatch):
    import services.offline_queue as offline_queue

    monkeypatch.setattr(offline_queue, "epoch_millis", lambda: 1234)
    queue.enqueue("create_item", MILK)
    assert queue.list_pending()[0].timestamp == 1234


def test_payload_round_trip_is_deep_equal(queue):
    payload = {
        "name": "Crème fraîche",
        "listId": "L1",
        "quantity": "2 pots",
        "categoryId": None,
        "meta": {"tags": ["dairy", "fresh"], "nested": {"n": 1.5}},
    }
    queue.enqueue("create_item", payload)
    assert queue.list_pending()[0].payload == payload


def test_list_pending_keeps_insertion_order(queue):
    first = queue.enqueue("create_item", MILK, timestamp=300)
    second = queue.enqueue("update_item_status", {"id": "i1", "status": "BOUGHT"}, timestamp=100)
    third = queue.enqueue("create_item", {"name": "Eggs", "listId": "L1"}, timestamp=200)

    assert [p.id for p in queue.list_pending()] == [first, second, third]


def test_mark_synced_is_idempotent(queue):
    action_id = queue.enqueue("create_item", MILK)
    queue.mark_synced(action_id)
    queue.mark_synced(action_id)

    assert queue.list_pending() == []
    with queue._session_factory() as session:
        row = session.get(QueuedAction, action_id)
        assert row.synced is True
        assert json.loads(row.payload) == MILK


def test_mark_synced_unknown_id_is_noop(queue):
    queue.enqueue("create_item", MILK)
    queue.mark_synced("create_item-0-missing")
    assert queue.count_pending() == 1


def test_purge_synced_removes_only_synced(queue):
    done = queue.enqueue("create_item", MILK)
    keep = queue.enqueue("update_item_status", {"id": "i1", "status": "MUST_BUY"})
    queue.mark_synced(done)

    assert queue.purge_synced() == 1
    assert [p.id for p in queue.list_pending()] == [keep]
    with queue._session_factory() as session:
        assert session.get(QueuedAction, done) is None


def test_purge_synced_without_synced_rows_is_noop(queue):
    queue.enqueue("create_item", MILK)
    assert queue.purge_synced() == 0
    assert queue.count_pending() == 1


def test_add_duplicate_id_raises(queue):
    action = QueuedAction(id="create_item-1-x", type="create_item", payload="{}", timestamp=1)
    queue.add(action)
    with pytest.raises(DuplicateKeyError) as err:
        queue.add(QueuedAction(id="create_item-1-x", type="create_item", payload="{}", timestamp=2))
    assert err.value.action_id == "create_item-1-x"


def test_add_forces_unsynced(queue):
    queue.add(QueuedAction(id="a", type="create_item", payload="{}", timestamp=1, synced=True))
    assert [p.id for p in queue.list_pending()] == ["a"]


@pytest.mark.parametrize(
    "action_type,payload",
    [
        ("delete_item", MILK),
        ("create_item", {"listId": "L1"}),
        ("create_item", {"name": "Milk"}),
        ("update_item_status", {"id": "i1", "status": "LOST"}),
        ("update_item_status", {"status": "HOME"}),
        ("create_item", ["Milk"]),
    ],
)
def test_enqueue_rejects_invalid_actions(queue, action_type, payload):
    with pytest.raises(InvalidActionError):
        queue.enqueue(action_type, payload)
    assert queue.count_pending() == 0


def test_corrupt_payload_reads_as_empty(queue):
    queue.add(QueuedAction(id="bad", type="create_item", payload="{not json", timestamp=1))
    assert queue.list_pending()[0].payload == {}


def test_storage_failure_is_wrapped(engine):
    from sqlalchemy.exc import OperationalError

    class BrokenSession(Session):
        def exec(self, *args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("disk I/O error"))

    broken = OfflineQueue(lambda: BrokenSession(engine))
    with pytest.raises(StorageError):
        broken.list_pending()


def test_queue_survives_reopen(tmp_path):
    from storage.db import create_db_engine, init_db, session_factory

    db_file = tmp_path / "offline.db"
    first = init_db(create_db_engine(db_file))
    action_id = OfflineQueue(session_factory(first)).enqueue("create_item", MILK)
    first.dispose()

    second = init_db(create_db_engine(db_file))
    pending = OfflineQueue(session_factory(second)).list_pending()
    second.dispose()

    assert [p.id for p in pending] == [action_id]
    assert pending[0].payload == MILK


def test_enqueue_rejects_unencodable_payload(queue):
    from datetime import datetime

    payload = {"name": "Milk", "listId": "L1", "quantity": datetime(2024, 1, 1)}
    with pytest.raises(InvalidActionError):
        queue.enqueue("create_item", payload)
    assert queue.count_pending() == 0
