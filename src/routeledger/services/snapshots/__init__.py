"""Route run snapshot service."""

from .service import CaptureMode, CaptureResult, SnapshotManager

__all__ = ["CaptureMode", "CaptureResult", "SnapshotManager"]
