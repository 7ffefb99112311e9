"""SQLModel table for mutations waiting to be replayed against the API."""

from __future__ import annotations

from sqlmodel import Field, SQLModel


class QueuedAction(SQLModel, table=True):
    id: str = Field(primary_key=True)
    type: str = Field(index=True)
    payload: str
    timestamp: int
    synced: bool = Field(default=False, index=True)


__all__ = ["QueuedAction"]
