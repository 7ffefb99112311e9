"""ORM models exposed by the Household client."""
from .queued_action import QueuedAction

__all__ = ["QueuedAction"]
