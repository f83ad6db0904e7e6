"""Route group exports."""

from . import assignment, health, progress, snapshots

__all__ = ["assignment", "health", "progress", "snapshots"]
