"""
ForemanBot.construction — worker pool and building placement.

Public API
----------
    from ForemanBot.construction import (
        Builder,
        BuilderError,
        BuilderManager,
        PendingTask,
        PlacementLocator,
    )
"""

from ForemanBot.construction.builder import Builder, BuilderError, PendingTask
from ForemanBot.construction.builder_manager import BuilderManager
from ForemanBot.construction.placement_locator import PlacementLocator

__all__ = [
    "Builder",
    "BuilderError",
    "BuilderManager",
    "PendingTask",
    "PlacementLocator",
]
