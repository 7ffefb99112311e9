"""Write-side entry point: call the API now, or queue the mutation for later."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

from services.actions import ActionType, CreateItem, UpdateItemStatus, coerce_type, parse_action
from services.household_api import HouseholdApi, HouseholdApiError
from services.notifier import Notifier
from services.offline_queue import OfflineQueue


logger = logging.getLogger(__name__)


@dataclass
class MutationResult:
    queued: bool
    action_id: Optional[str] = None
    response: Optional[Dict[str, Any]] = None


QUEUED_MESSAGES = {
    ActionType.CREATE_ITEM: "Added offline, it will sync when the connection is back",
    ActionType.UPDATE_ITEM_STATUS: "Changed offline",
}


class MutationGateway:
    def __init__(
        self,
        queue: OfflineQueue,
        api: HouseholdApi,
        is_online: Optional[Callable[[], bool]] = None,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self.queue = queue
        self.api = api
        self.is_online = is_online or api.is_online
        self.notifier = notifier

    def _toast(self, message: str, kind: str) -> None:
        if self.notifier is not None:
            self.notifier.show(message, kind)

    def _call_remote(self, kind: ActionType, payload: Dict[str, Any]) -> Dict[str, Any]:
        action = parse_action(kind, payload)
        if isinstance(action, CreateItem):
            return self.api.create_grocery_item(payload)
        if isinstance(action, UpdateItemStatus):
            return self.api.update_grocery_item_status(payload)
        raise TypeError(f"No remote call for {type(action).__name__}")

    def submit(self, action_type: Union[str, ActionType], payload: Dict[str, Any]) -> MutationResult:
        kind = coerce_type(action_type)
        if self.is_online():
            try:
                response = self._call_remote(kind, payload)
            except HouseholdApiError as exc:
                self._toast(getattr(exc, "message", None) or str(exc), "error")
                raise
            return MutationResult(queued=False, response=response)

        action_id = self.queue.enqueue(kind, payload)
        logger.info("Offline: queued %s as %s", kind.value, action_id)
        self._toast(QUEUED_MESSAGES[kind], "info")
        return MutationResult(queued=True, action_id=action_id)

    # ------------------------------------------------------------------
    # Groceries
    def add_item(
        self,
        list_id: str,
        name: str,
        quantity: Optional[str] = None,
        category_id: Optional[str] = None,
    ) -> MutationResult:
        payload = {
            "name": name.strip(),
            "listId": list_id,
            "quantity": quantity or None,
            "categoryId": category_id or None,
        }
        return self.submit(ActionType.CREATE_ITEM, payload)

    def set_item_status(self, item_id: str, status: str) -> MutationResult:
        return self.submit(ActionType.UPDATE_ITEM_STATUS, {"id": item_id, "status": status})


__all__ = ["MutationGateway", "MutationResult"]
