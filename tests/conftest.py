import os
import sys
import tempfile
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# keep settings (and the sync log) away from the real user data dir
os.environ.setdefault("HOUSEHOLD_DATA_DIR", tempfile.mkdtemp(prefix="household-tests-"))

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

import models  # noqa: F401
from services.household_api import NetworkError, RemoteRejection
from services.offline_queue import OfflineQueue
from storage.db import session_factory


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def queue(engine):
    return OfflineQueue(session_factory(engine))


class FakeApi:
    """Records replayed calls; ``fail`` maps a method name to the error to raise."""

    def __init__(self, online=True):
        self.online = online
        self.calls: list[tuple[str, dict]] = []
        self.fail: dict[str, Exception] = {}

    def is_online(self):
        return self.online

    def _call(self, name, payload):
        self.calls.append((name, payload))
        if name in self.fail:
            raise self.fail[name]
        return {"id": f"srv-{len(self.calls)}", **payload}

    def create_grocery_item(self, payload):
        return self._call("create_grocery_item", payload)

    def update_grocery_item_status(self, payload):
        return self._call("update_grocery_item_status", payload)

    def list_groceries(self):
        return {"items": [], "categories": [], "list": None}


@pytest.fixture
def api():
    return FakeApi()


@pytest.fixture
def network_error():
    return NetworkError("POST /api/groceries: connection refused")


@pytest.fixture
def rejection():
    return RemoteRejection(500, "Internal server error", "POST", "/api/groceries")
