from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import func, literal_column
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import select

from datetime_utils import epoch_millis
from models.queued_action import QueuedAction
from services.actions import ActionType, InvalidActionError, coerce_type, parse_action
from storage.db import SessionFactory, get_session


logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    """The local offline store could not be read or written."""


class DuplicateKeyError(StorageError):
    def __init__(self, action_id: str):
        super().__init__(f"Queued action already exists: {action_id}")
        self.action_id = action_id


@dataclass
class PendingAction:
    id: str
    type: str
    payload: Dict[str, Any] = field(default_factory=dict)
    timestamp: int = 0
    synced: bool = False


def make_action_id(action_type: str, timestamp: int) -> str:
    return f"{action_type}-{timestamp}-{uuid.uuid4().hex}"


def _decode_payload(raw: str) -> Dict[str, Any]:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def _to_pending(row: QueuedAction) -> PendingAction:
    return PendingAction(
        id=row.id,
        type=row.type,
        payload=_decode_payload(row.payload),
        timestamp=row.timestamp,
        synced=row.synced,
    )


class OfflineQueue:
    """Durable queue of mutations made while the API was unreachable.

    Every method opens its own short session, so one instance can be shared
    between UI handlers and the sync loop. Each operation is atomic on its
    own; nothing spans a whole replay batch.
    """

    def __init__(self, session_factory: SessionFactory = get_session):
        self._session_factory = session_factory

    def add(self, action: QueuedAction) -> str:
        record = QueuedAction(
            id=action.id,
            type=action.type,
            payload=action.payload,
            timestamp=action.timestamp,
            synced=False,
        )
        try:
            with self._session_factory() as session:
                session.add(record)
                session.commit()
        except IntegrityError as exc:
            raise DuplicateKeyError(action.id) from exc
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not queue action {action.id}: {exc}") from exc
        return action.id

    def enqueue(
        self,
        action_type: Union[str, ActionType],
        payload: Dict[str, Any],
        timestamp: Optional[int] = None,
    ) -> str:
        kind = coerce_type(action_type)
        parse_action(kind, payload)
        try:
            encoded = json.dumps(payload, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise InvalidActionError(f"{kind.value}: payload is not JSON serialisable: {exc}") from exc
        ts = epoch_millis() if timestamp is None else int(timestamp)
        action_id = make_action_id(kind.value, ts)
        self.add(
            QueuedAction(
                id=action_id,
                type=kind.value,
                payload=encoded,
                timestamp=ts,
            )
        )
        logger.debug("Queued %s as %s", kind.value, action_id)
        return action_id

    def list_pending(self) -> List[PendingAction]:
        stmt = (
            select(QueuedAction)
            .where(QueuedAction.synced == False)  # noqa: E712
            .order_by(literal_column("rowid"))
        )
        try:
            with self._session_factory() as session:
                return [_to_pending(row) for row in session.exec(stmt)]
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not read pending actions: {exc}") from exc

    # same contract under the name the web client used
    getPending = list_pending

    def mark_synced(self, action_id: str) -> None:
        try:
            with self._session_factory() as session:
                record = session.get(QueuedAction, action_id)
                if record is None or record.synced:
                    return
                record.synced = True
                session.add(record)
                session.commit()
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not mark {action_id} as synced: {exc}") from exc

    def purge_synced(self) -> int:
        stmt = select(QueuedAction).where(QueuedAction.synced == True)  # noqa: E712
        try:
            with self._session_factory() as session:
                rows = list(session.exec(stmt))
                for row in rows:
                    session.delete(row)
                session.commit()
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not purge synced actions: {exc}") from exc
        if rows:
            logger.debug("Purged %d synced actions", len(rows))
        return len(rows)

    def count_pending(self) -> int:
        stmt = (
            select(func.count())
            .select_from(QueuedAction)
            .where(QueuedAction.synced == False)  # noqa: E712
        )
        try:
            with self._session_factory() as session:
                return int(session.exec(stmt).one())
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not count pending actions: {exc}") from exc


__all__ = [
    "DuplicateKeyError",
    "OfflineQueue",
    "PendingAction",
    "StorageError",
    "make_action_id",
]
