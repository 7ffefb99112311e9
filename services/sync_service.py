from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import Any, Callable, Dict, List, Optional, Type

from core.settings import OFFLINE_SYNC, SYNC_LOG_PATH
from datetime_utils import utc_now
from services.actions import Action, CreateItem, UpdateItemStatus, parse_action
from services.household_api import HouseholdApi, HouseholdApiError
from services.offline_queue import OfflineQueue, PendingAction, StorageError


def _ensure_logger() -> logging.Logger:
    logger = logging.getLogger("household.sync")
    if not logger.handlers:
        SYNC_LOG_PATH.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(SYNC_LOG_PATH, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
        formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    return logger


@dataclass
class SyncReport:
    attempted: int = 0
    synced: int = 0
    failed: int = 0
    given_up: int = 0
    purged: int = 0
    skipped_offline: bool = False
    synced_ids: List[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "attempted": self.attempted,
            "synced": self.synced,
            "failed": self.failed,
            "givenUp": self.given_up,
            "purged": self.purged,
            "skippedOffline": self.skipped_offline,
        }


class SyncService:
    """Replays queued mutations against the household API, one tick at a time."""

    EVENTS = ("after_sync",)

    def __init__(
        self,
        queue: OfflineQueue,
        api: HouseholdApi,
        is_online: Optional[Callable[[], bool]] = None,
        *,
        purge_synced: bool = OFFLINE_SYNC.purge_synced_after_tick,
        max_attempts: Optional[int] = OFFLINE_SYNC.max_attempts,
    ) -> None:
        self.queue = queue
        self.api = api
        self.is_online = is_online or api.is_online
        self.purge_synced = purge_synced
        self.max_attempts = max_attempts
        self.logger = _ensure_logger()
        self._handlers: Dict[Type[Any], Callable[[Dict[str, Any]], Any]] = {
            CreateItem: self.api.create_grocery_item,
            UpdateItemStatus: self.api.update_grocery_item_status,
        }
        self._listeners: Dict[str, List[Callable[[SyncReport], None]]] = {
            name: [] for name in self.EVENTS
        }
        self._attempts: Dict[str, int] = {}
        self.last_tick_at: Optional[datetime] = None
        self.last_report: Optional[SyncReport] = None

    # ------------------------------------------------------------------
    # Listeners
    def subscribe(self, event: str, callback: Callable[[SyncReport], None]) -> None:
        if event not in self._listeners:
            raise ValueError(f"Unsupported event: {event}")
        if callback not in self._listeners[event]:
            self._listeners[event].append(callback)

    def unsubscribe(self, event: str, callback: Callable[[SyncReport], None]) -> None:
        listeners = self._listeners.get(event)
        if listeners and callback in listeners:
            listeners.remove(callback)

    def _emit(self, event: str, report: SyncReport) -> None:
        for listener in list(self._listeners.get(event, [])):
            try:
                listener(report)
            except Exception:
                self.logger.exception("Listener %r failed on %s", listener, event)

    # ------------------------------------------------------------------
    # Tick
    def sync_pending(self) -> SyncReport:
        report = SyncReport()
        if not self.is_online():
            report.skipped_offline = True
            return report

        self.last_tick_at = utc_now()
        for entry in self.queue.list_pending():
            if self._given_up(entry):
                report.given_up += 1
                continue
            report.attempted += 1
            if self._replay(entry):
                try:
                    self.queue.mark_synced(entry.id)
                except StorageError as exc:
                    # replayed remotely but still pending locally: it goes out again next tick
                    self.logger.error("Could not mark %s (%s) as synced: %s", entry.id, entry.type, exc)
                    report.failed += 1
                    continue
                self._attempts.pop(entry.id, None)
                report.synced += 1
                report.synced_ids.append(entry.id)
            else:
                self._attempts[entry.id] = self._attempts.get(entry.id, 0) + 1
                report.failed += 1

        if self.purge_synced and report.synced:
            report.purged = self.queue.purge_synced()

        if report.attempted:
            self.logger.info(
                "Offline sync: %s synced, %s failed", report.synced, report.failed
            )
        self.last_report = report
        self._emit("after_sync", report)
        return report

    def _given_up(self, entry: PendingAction) -> bool:
        if self.max_attempts is None:
            return False
        return self._attempts.get(entry.id, 0) >= self.max_attempts

    def _replay(self, entry: PendingAction) -> bool:
        try:
            action: Action = parse_action(entry.type, entry.payload)
            handler = self._handlers[type(action)]
            handler(entry.payload)
        except HouseholdApiError as exc:
            self.logger.warning("Replay of %s (%s) failed: %s", entry.id, entry.type, exc)
            return False
        except ValueError as exc:
            self.logger.error("Queued action %s is not replayable: %s", entry.id, exc)
            return False
        except Exception:
            self.logger.exception("Replay of %s (%s) crashed", entry.id, entry.type)
            return False
        return True

    def status(self) -> dict:
        return {
            "pending": self.queue.count_pending(),
            "lastTickAt": self.last_tick_at.isoformat() if self.last_tick_at else None,
            "lastReport": self.last_report.as_dict() if self.last_report else None,
        }


__all__ = ["SyncReport", "SyncService"]
