"""Exception hierarchy shared by repositories, services and routes."""

from __future__ import annotations


class RouteLedgerError(Exception):
    """Base class for every error raised by the route ledger."""


class NotFoundError(RouteLedgerError):
    """A stop, owner or route run could not be resolved."""


class StopNotFound(NotFoundError):
    def __init__(self, stop_key: str, day: str | None = None) -> None:
        self.stop_key = stop_key
        self.day = day
        suffix = f" for day '{day}'" if day else ""
        super().__init__(f"Stop '{stop_key}' not found{suffix}")


class OwnerNotFound(NotFoundError):
    def __init__(self, owner_id: str, day: str | None = None) -> None:
        self.owner_id = owner_id
        self.day = day
        suffix = f" for day '{day}'" if day else ""
        super().__init__(f"Owner '{owner_id}' not found{suffix}")


class SnapshotNotFound(NotFoundError):
    def __init__(self, snapshot_id: str, day: str | None = None) -> None:
        self.snapshot_id = snapshot_id
        self.day = day
        suffix = f" for day '{day}'" if day else ""
        super().__init__(f"Route run '{snapshot_id}' not found{suffix}")


class InvalidInput(RouteLedgerError, ValueError):
    """A caller supplied a missing or malformed value."""


class InvalidDay(InvalidInput):
    def __init__(self, token: object) -> None:
        self.token = token
        super().__init__(f"Unrecognised day token '{token}'")


class InvalidSnapshot(InvalidInput):
    """A persisted route run cannot be decoded or applied."""


class PersistenceFailure(RouteLedgerError):
    """The storage backend failed while reading or writing."""

    def __init__(self, action: str, cause: BaseException | None = None) -> None:
        self.action = action
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Storage failure while trying to {action}{detail}")
