"""Stop ownership service."""

from .service import AssignmentStore

__all__ = ["AssignmentStore"]
