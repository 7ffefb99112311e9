"""Typed variants of the mutations that can be queued while offline.

The queue stores the caller's payload verbatim as JSON. These variants
exist so that the type tag and the payload are validated once, at
enqueue time, and so the sync service can dispatch on a class instead of
comparing strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Union


GROCERY_STATUSES = ("HOME", "MUST_BUY", "BOUGHT")


class InvalidActionError(ValueError):
    """Unknown action type or a payload that does not fit its type."""


class ActionType(str, Enum):
    CREATE_ITEM = "create_item"
    UPDATE_ITEM_STATUS = "update_item_status"


@dataclass(frozen=True)
class CreateItem:
    name: str
    listId: str
    quantity: Optional[str] = None
    categoryId: Optional[str] = None


@dataclass(frozen=True)
class UpdateItemStatus:
    id: str
    status: str


Action = Union[CreateItem, UpdateItemStatus]


def _required_str(payload: Mapping[str, Any], key: str, action_type: ActionType) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise InvalidActionError(f"{action_type.value}: '{key}' is required")
    return value


def _optional_str(payload: Mapping[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    if value is None or value == "":
        return None
    return str(value)


def coerce_type(value: Union[str, ActionType]) -> ActionType:
    try:
        return ActionType(value)
    except ValueError:
        raise InvalidActionError(f"Unsupported action type: {value!r}") from None


def parse_action(action_type: Union[str, ActionType], payload: Any) -> Action:
    kind = coerce_type(action_type)
    if not isinstance(payload, Mapping):
        raise InvalidActionError(f"{kind.value}: payload must be an object")

    if kind is ActionType.CREATE_ITEM:
        return CreateItem(
            name=_required_str(payload, "name", kind),
            listId=_required_str(payload, "listId", kind),
            quantity=_optional_str(payload, "quantity"),
            categoryId=_optional_str(payload, "categoryId"),
        )

    status = _required_str(payload, "status", kind)
    if status not in GROCERY_STATUSES:
        raise InvalidActionError(f"{kind.value}: unknown status {status!r}")
    return UpdateItemStatus(id=_required_str(payload, "id", kind), status=status)


__all__ = [
    "Action",
    "ActionType",
    "CreateItem",
    "GROCERY_STATUSES",
    "InvalidActionError",
    "UpdateItemStatus",
    "coerce_type",
    "parse_action",
]
