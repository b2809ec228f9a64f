"""
BuilderManager — the worker pool that turns "we need a depot" into a
dispatched SCV and a reserved budget.

Per-tick call order (ForemanBot.on_step)
----------------------------------------
    ledger.observe(...)                 # balances first
    manager.prune_missing_workers()     # drop dead / morphed workers
    manager.register_workers(...)       # pick up new workers
    manager.reconcile_pending_tasks()   # settle last tick's build orders
    manager.assign_default_gathering()  # idle workers → nearest minerals
    manager.attempt_build_supply_structure()

Reservation flow
----------------
attempt_build() dispatches a worker and, if the engine accepts the command,
tells the listener (the ResourceLedger) to spend the structure's cost. The
Builder keeps a PendingTask for it, including the site tile.

reconcile_pending_tasks() settles each pending task in one of three ways:

  - the structure is under construction at the site: the engine has now
    charged its cost, so the reservation is released and the task cleared
  - the worker still carries the build order: the task is marked confirmed
    and the reservation kept
  - otherwise the order failed: the reservation is refunded and the task
    cleared

A reservation therefore never outlives the engine's own deduction by more
than the tick in which both are observed.

Grace rule: when frames are supplied, a task is not reconciled on the
frame it was issued, nor until ``refund_grace_frames`` frames have passed.
The worker usually cannot report "constructing" in the same frame it
received the order, and refunding then would immediately free the money
for a second dispatch. Calls made without a frame treat the grace period
as already served.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from sc2.ids.unit_typeid import UnitTypeId as UnitID

from ForemanBot.constants import TOWNHALL_TYPES
from ForemanBot.construction.builder import Builder, BuilderError, PendingTask
from ForemanBot.construction.placement_locator import PlacementLocator
from ForemanBot.economy.resource_ledger import ResourceLedger, ResourceListener
from ForemanBot.logger import get_logger
from ForemanBot.world import UnitCommands, UnitRef, WorldQuery, is_worker

log = get_logger()


class BuilderManager:
    """
    Owns every registered Builder (one per worker tag) and drives their
    gather / build / refund lifecycle.

    Thread-safety: not required (SC2 bots are single-threaded).
    """

    # Frames a fresh build order is exempt from reconciliation.
    refund_grace_frames: int = 1

    def __init__(
        self,
        world: WorldQuery,
        commands: UnitCommands,
        locator: PlacementLocator,
        ledger: Optional[ResourceLedger] = None,
        supply_structure: Optional[UnitID] = UnitID.SUPPLYDEPOT,
        refund_grace_frames: Optional[int] = None,
    ) -> None:
        self.world = world
        self.commands = commands
        self.locator = locator
        self.ledger = ledger
        self.supply_structure = supply_structure
        if refund_grace_frames is not None:
            self.refund_grace_frames = refund_grace_frames

        self._callbacks: Optional[ResourceListener] = None
        self._builders: List[Builder] = []
        self._requested: List[UnitID] = []

    def set_callbacks(self, listener: Optional[ResourceListener]) -> None:
        """Install (or clear, with None) the spend / refund listener."""
        self._callbacks = listener

    # ------------------------------------------------------------------
    # Read API
    # ------------------------------------------------------------------

    @property
    def builders(self) -> Tuple[Builder, ...]:
        return tuple(self._builders)

    @property
    def requested_structures(self) -> Tuple[UnitID, ...]:
        """Every structure type dispatched so far, in dispatch order."""
        return tuple(self._requested)

    def has_worker(self, tag: int) -> bool:
        return any(b.worker == tag for b in self._builders)

    def builder_for(self, tag: int) -> Optional[Builder]:
        for b in self._builders:
            if b.worker == tag:
                return b
        return None

    def pending_count(self, structure_type: Optional[UnitID] = None) -> int:
        """Unresolved build orders, optionally only of one structure type."""
        return sum(
            1 for b in self._builders
            if b.pending is not None
            and (structure_type is None or b.pending.structure_type == structure_type)
        )

    def worker_count(self) -> int:
        return len(self._builders)

    def worker_summary(self) -> str:
        return f"{len(self._builders)} workers"

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_worker(self, unit: UnitRef) -> bool:
        """
        Wrap a worker in a Builder bound to our main townhall.

        Raises BuilderError for non-workers. Returns False if the worker is
        already registered or no townhall is visible.
        """
        if not is_worker(unit):
            raise BuilderError(
                f"You cannot add a unit of type {unit.type_id.name} to the BuilderManager's workers"
            )
        if self.has_worker(unit.tag):
            return False

        home = self._find_home()
        if home is None:
            log.debug("BuilderManager: no townhall to home worker %d", unit.tag)
            return False

        self._builders.append(Builder(unit, home))
        log.debug("BuilderManager: registered worker %d (home=%d)", unit.tag, home.tag)
        return True

    def register_workers(self, units: Iterable[UnitRef]) -> int:
        """Register every worker among ``units``; other units are skipped."""
        added = 0
        for unit in units:
            if is_worker(unit) and self.register_worker(unit):
                added += 1
        return added

    def _find_home(self) -> Optional[UnitRef]:
        for unit in self.world.own_units():
            if unit.type_id in TOWNHALL_TYPES and unit.is_structure:
                return unit
        return None

    def prune_missing_workers(self, frame: Optional[int] = None) -> int:
        """
        Drop Builders whose worker no longer exists.

        A vanished worker either died or (Zerg) morphed into the structure;
        in both cases its reservation is no longer outstanding.
        """
        kept: List[Builder] = []
        dropped = 0
        for builder in self._builders:
            if self.world.unit(builder.worker) is not None:
                kept.append(builder)
                continue
            if builder.pending is not None:
                self._refund(builder, frame)
            dropped += 1
            log.debug("BuilderManager: worker %d gone — builder dropped", builder.worker, frame=frame)
        self._builders = kept
        return dropped

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def attempt_build_supply_structure(self, frame: Optional[int] = None) -> bool:
        if self.supply_structure is None:
            return False
        return self.attempt_build(self.supply_structure, frame=frame)

    def attempt_build(self, structure_type: UnitID, frame: Optional[int] = None) -> bool:
        """
        Dispatch the first free worker to build ``structure_type``.

        Returns False, with no side effects, if no worker is free, the
        structure is unaffordable, or no site exists. Otherwise returns the
        engine's acceptance of the build command.
        """
        builder = self._first_free_builder()
        if builder is None:
            return False

        spec = self.world.building_spec(structure_type)
        if self.ledger is not None and not self.ledger.can_afford(spec.cost):
            return False

        tile = self.locator.find_site(structure_type, builder)
        if tile is None:
            return False

        built = self.commands.build(builder.worker, structure_type, tile)
        if built:
            if self._callbacks is not None:
                self._callbacks.spend_resources(spec.cost, frame=frame)
            builder.pending = PendingTask(structure_type, spec.cost, tile=tile, issued_frame=frame)
            self._requested.append(structure_type)
            log.game_event(
                "BUILD_DISPATCHED",
                f"{structure_type.name} @ {tile} | worker={builder.worker}",
                frame=frame,
            )
        else:
            log.debug(
                "BuilderManager: engine rejected %s @ %s for worker %d",
                structure_type.name,
                tile,
                builder.worker,
                frame=frame,
            )
        return built

    def _first_free_builder(self) -> Optional[Builder]:
        for builder in self._builders:
            if builder.pending is not None:
                continue
            status = self.commands.worker_status(builder.worker)
            if status is None or status.is_constructing:
                continue
            return builder
        return None

    # ------------------------------------------------------------------
    # Mining
    # ------------------------------------------------------------------

    def assign_default_gathering(self) -> int:
        """Send every idle Builder to its nearest mineral field."""
        sent = 0
        for builder in self._builders:
            if builder.pending is not None:
                continue
            status = self.commands.worker_status(builder.worker)
            if status is None or status.is_gathering or status.is_constructing:
                continue
            mineral = self.locator.find_mineral_for(builder)
            if mineral is None:
                continue
            if self.commands.gather(builder.worker, mineral):
                sent += 1
        return sent

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def reconcile_pending_tasks(self, frame: Optional[int] = None) -> int:
        """
        Settle every pending task that is past its grace period.

        Returns the number of reservations given back, whether because the
        structure started (the engine charged it) or the order failed.
        """
        settled = 0
        for builder in self._builders:
            task = builder.pending
            if task is None or self._in_grace(task, frame):
                continue

            if task.tile is not None and self.world.construction_started(task.structure_type, task.tile):
                log.game_event(
                    "BUILD_STARTED",
                    f"{task.structure_type.name} @ {task.tile} | worker={builder.worker}",
                    frame=frame,
                )
                self._refund(builder, frame)
                settled += 1
                continue

            status = self.commands.worker_status(builder.worker)
            if builder.building_started(status):
                if not task.confirmed:
                    task.confirmed = True
                    log.game_event(
                        "BUILD_CONFIRMED",
                        f"{task.structure_type.name} | worker={builder.worker}",
                        frame=frame,
                    )
                continue

            log.warning(
                "Worker %d never started %s — refunding %dm %dg",
                builder.worker,
                task.structure_type.name,
                task.cost.minerals,
                task.cost.gas,
                frame=frame,
            )
            self._refund(builder, frame)
            settled += 1
        return settled

    def _in_grace(self, task: PendingTask, frame: Optional[int]) -> bool:
        if frame is None or task.issued_frame is None:
            return False
        age = frame - task.issued_frame
        return age <= 0 or age < self.refund_grace_frames

    def _refund(self, builder: Builder, frame: Optional[int]) -> None:
        task = builder.pending
        builder.pending = None
        if task is not None and self._callbacks is not None:
            self._callbacks.refund_resources(task.cost, frame=frame)
