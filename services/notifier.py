from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from core.settings import UI
from datetime_utils import utc_now


logger = logging.getLogger(__name__)

TOAST_KINDS = ("success", "error", "info")


@dataclass(frozen=True)
class Toast:
    id: str
    message: str
    kind: str
    created_at: datetime


Listener = Callable[[List[Toast]], None]


class Notifier:
    """Short-lived user notifications, shared by the UI and the mutation gateway."""

    def __init__(self, duration_sec: float | None = None, clock: Callable[[], datetime] = utc_now):
        self.duration = timedelta(seconds=duration_sec if duration_sec is not None else UI.toast.duration_sec)
        self._clock = clock
        self._toasts: List[Toast] = []
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        snapshot = list(self._toasts)
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Toast listener failed")

    def show(self, message: str, kind: str = "info") -> Toast:
        if kind not in TOAST_KINDS:
            raise ValueError(f"Unsupported toast kind: {kind}")
        toast = Toast(id=uuid.uuid4().hex[:8], message=message, kind=kind, created_at=self._clock())
        self._toasts.append(toast)
        self._notify()
        return toast

    def dismiss(self, toast_id: str) -> None:
        before = len(self._toasts)
        self._toasts = [t for t in self._toasts if t.id != toast_id]
        if len(self._toasts) != before:
            self._notify()

    def active(self, now: Optional[datetime] = None) -> List[Toast]:
        current = now or self._clock()
        alive = [t for t in self._toasts if current - t.created_at < self.duration]
        if len(alive) != len(self._toasts):
            self._toasts = alive
            self._notify()
        return list(alive)


__all__ = ["Notifier", "Toast", "TOAST_KINDS"]
