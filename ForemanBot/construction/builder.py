"""
Builder — one worker bound to the structure it calls home.

Lifecycle of a Builder's task
-----------------------------
  idle      → pending is None; the worker mines or waits
  PENDING   → BuilderManager issued a build command and reserved its cost;
              pending.confirmed is False until the worker is seen carrying
              the build order
  CONFIRMED → the worker reported constructing at least once
  (cleared) → one of:
                - the structure appeared at the site (engine charged the
                  cost, reservation released)
                - the worker was seen idle instead (refund)
                - the worker vanished and was pruned (release)

The pending task is cleared exactly once, by whichever path sees it first.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sc2.ids.unit_typeid import UnitTypeId as UnitID
from sc2.position import Point2

from ForemanBot.economy.resource_ledger import Cost
from ForemanBot.world import UnitRef, WorkerStatus, is_structure, is_worker


class BuilderError(ValueError):
    """A Builder was asked to wrap a unit that cannot fill the role."""


@dataclass
class PendingTask:
    """A build command that was accepted but is not yet resolved."""
    structure_type: UnitID
    cost: Cost
    tile: Optional[Point2] = None
    issued_frame: Optional[int] = None
    confirmed: bool = False


class Builder:
    """
    A worker tag plus its home structure tag.

    Only tags are stored; the units themselves are looked up through the
    world every tick.
    """

    def __init__(self, worker: UnitRef, home: UnitRef) -> None:
        if not is_worker(worker):
            raise BuilderError(
                f"A builder cannot be created with unit type {worker.type_id.name}"
            )
        if not is_structure(home):
            raise BuilderError(
                f"A builder cannot be created with home type {home.type_id.name}"
            )
        self.worker: int = worker.tag
        self.home: int = home.tag
        self.pending: Optional[PendingTask] = None

    @property
    def pending_task(self) -> Optional[UnitID]:
        return self.pending.structure_type if self.pending else None

    def building_started(self, status: Optional[WorkerStatus]) -> bool:
        return self.pending is not None and status is not None and status.is_constructing

    def migrate_to_new_home(self, new_home: UnitRef) -> bool:
        """Validate ``new_home``. Re-homing itself is not yet implemented."""
        if not is_structure(new_home):
            raise BuilderError(
                f"A builder cannot migrate to a unit with type {new_home.type_id.name}"
            )
        return False

    def __repr__(self) -> str:
        task = self.pending_task.name if self.pending_task else None
        return f"Builder(worker={self.worker}, home={self.home}, pending={task})"
