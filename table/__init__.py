"""Table driver: runs hands on a Game with delayed policy turns and human input."""

from .session import ActionToken, PendingAction, TableError, TableSession, parse_amount

__all__ = ["ActionToken", "PendingAction", "TableError", "TableSession", "parse_amount"]
