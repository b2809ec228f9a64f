"""Shared fixtures for the Foreman Bot test suite.

``FakeWorld`` implements all three world interfaces in memory: a rectangular
build grid with optional unbuildable tiles, a creep set, unit lists and a log
of every command the core issued.
"""

from typing import Callable, Dict, List, Optional, Set, Tuple

import pytest
from sc2.ids.unit_typeid import UnitTypeId as UnitID
from sc2.position import Point2

from ForemanBot.construction import BuilderManager, PlacementLocator
from ForemanBot.economy import ResourceLedger
from ForemanBot.world import (
    BuildingSpec,
    ResourceObserver,
    UnitCommands,
    UnitRef,
    WorkerStatus,
    WorldQuery,
)


SPECS: Dict[UnitID, BuildingSpec] = {
    UnitID.SUPPLYDEPOT: BuildingSpec(UnitID.SUPPLYDEPOT, 100, 0, 2, 2),
    UnitID.BARRACKS:    BuildingSpec(UnitID.BARRACKS, 150, 0, 3, 3),
    UnitID.PYLON:       BuildingSpec(UnitID.PYLON, 100, 0, 2, 2),
    UnitID.REFINERY:    BuildingSpec(UnitID.REFINERY, 75, 0, 3, 3, is_gas_structure=True),
    UnitID.SPAWNINGPOOL: BuildingSpec(UnitID.SPAWNINGPOOL, 200, 0, 3, 3, requires_creep=True),
    UnitID.FACTORY:     BuildingSpec(UnitID.FACTORY, 150, 100, 3, 3),
}


class FakeWorld(WorldQuery, UnitCommands, ResourceObserver):

    def __init__(self, width: int = 64, height: int = 64) -> None:
        self.width = width
        self.height = height
        self.own: List[UnitRef] = []
        self.neutral: List[UnitRef] = []
        self.enemy: List[UnitRef] = []
        self.unbuildable: Set[Tuple[int, int]] = set()
        self.creep: Set[Tuple[int, int]] = set()
        self.build_predicate: Optional[Callable[[Point2], bool]] = None
        self.statuses: Dict[int, WorkerStatus] = {}
        self.accept_builds = True
        self.builds: List[Tuple[int, UnitID, Point2]] = []
        self.gathers: List[Tuple[int, int]] = []
        self.under_construction: Set[Tuple[UnitID, Tuple[int, int]]] = set()
        self.mineral_total = 0
        self.gas_total = 0

    # ── population helpers ──────────────────────────────────────────────

    def add_worker(self, tag: int, x: float, y: float, type_id: UnitID = UnitID.SCV) -> UnitRef:
        unit = UnitRef(tag, type_id, Point2((x, y)))
        self.own.append(unit)
        self.statuses[tag] = WorkerStatus()
        return unit

    def add_townhall(self, tag: int, x: float, y: float, type_id: UnitID = UnitID.COMMANDCENTER) -> UnitRef:
        unit = UnitRef(tag, type_id, Point2((x, y)), is_structure=True)
        self.own.append(unit)
        return unit

    def add_mineral(self, tag: int, x: float, y: float) -> UnitRef:
        unit = UnitRef(tag, UnitID.MINERALFIELD, Point2((x, y)))
        self.neutral.append(unit)
        return unit

    def add_geyser(self, tag: int, x: float, y: float) -> UnitRef:
        unit = UnitRef(tag, UnitID.VESPENEGEYSER, Point2((x, y)))
        self.neutral.append(unit)
        return unit

    def add_enemy(self, tag: int, x: float, y: float, type_id: UnitID = UnitID.MARINE) -> UnitRef:
        unit = UnitRef(tag, type_id, Point2((x, y)))
        self.enemy.append(unit)
        return unit

    def remove(self, tag: int) -> None:
        self.own = [u for u in self.own if u.tag != tag]
        self.statuses.pop(tag, None)

    def set_status(self, tag: int, **flags) -> None:
        self.statuses[tag] = WorkerStatus(**flags)

    def place_structure(self, structure_type: UnitID, tile: Point2) -> None:
        """Mark a structure as under construction on the site anchored at ``tile``."""
        self.under_construction.add((structure_type, (int(tile.x), int(tile.y))))

    # ── WorldQuery ──────────────────────────────────────────────────────

    def own_units(self) -> List[UnitRef]:
        return list(self.own)

    def neutral_units(self) -> List[UnitRef]:
        return list(self.neutral)

    def all_units(self) -> List[UnitRef]:
        return self.own + self.neutral + self.enemy

    def unit(self, tag: int) -> Optional[UnitRef]:
        for u in self.all_units():
            if u.tag == tag:
                return u
        return None

    def can_build_here(self, tile: Point2, structure_type: UnitID, builder_tag: int) -> bool:
        if self.build_predicate is not None:
            return self.build_predicate(tile)
        spec = SPECS[structure_type]
        x0, y0 = int(tile.x), int(tile.y)
        for x in range(x0, x0 + spec.width):
            for y in range(y0, y0 + spec.height):
                if not (0 <= x < self.width and 0 <= y < self.height):
                    return False
                if (x, y) in self.unbuildable:
                    return False
        return True

    def has_creep(self, tile: Point2) -> bool:
        return (int(tile.x), int(tile.y)) in self.creep

    def building_spec(self, structure_type: UnitID) -> BuildingSpec:
        return SPECS[structure_type]

    def construction_started(self, structure_type: UnitID, tile: Point2) -> bool:
        return (structure_type, (int(tile.x), int(tile.y))) in self.under_construction

    # ── UnitCommands ────────────────────────────────────────────────────

    def build(self, worker_tag: int, structure_type: UnitID, tile: Point2) -> bool:
        if not self.accept_builds:
            return False
        self.builds.append((worker_tag, structure_type, tile))
        return True

    def gather(self, worker_tag: int, resource_tag: int) -> bool:
        self.gathers.append((worker_tag, resource_tag))
        return True

    def worker_status(self, worker_tag: int) -> Optional[WorkerStatus]:
        return self.statuses.get(worker_tag)

    # ── ResourceObserver ────────────────────────────────────────────────

    def minerals(self) -> int:
        return self.mineral_total

    def gas(self) -> int:
        return self.gas_total


@pytest.fixture
def world():
    """64x64 fully buildable map with a Command Center at tile (32, 32)."""
    w = FakeWorld()
    w.add_townhall(1, 32.5, 32.5)
    return w


@pytest.fixture
def big_world():
    """128x128 map, for searches that run out to the radius cap."""
    w = FakeWorld(width=128, height=128)
    w.add_townhall(1, 32.5, 32.5)
    return w


@pytest.fixture
def ledger():
    return ResourceLedger()


@pytest.fixture
def locator(world):
    return PlacementLocator(world)


@pytest.fixture
def manager(world, locator, ledger):
    """BuilderManager wired the way ForemanBot wires it: ledger gates and listens."""
    m = BuilderManager(world, world, locator, ledger=ledger)
    m.set_callbacks(ledger)
    return m
