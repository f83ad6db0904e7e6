"""Route progress service."""

from .service import ProgressAggregator

__all__ = ["ProgressAggregator"]
