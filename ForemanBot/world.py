"""
World interfaces — the only doors between the construction core and the game.

Design principles
-----------------
- The core never holds a game handle. Each component receives only the
  narrow surface it needs: the placement locator needs ``WorldQuery``, the
  builder manager additionally needs ``UnitCommands``, the bot feeds the
  ledger from ``ResourceObserver``.
- Units are referenced by tag. ``UnitRef`` is a snapshot that is only valid
  for the tick it was read in; anything kept across ticks is a tag, resolved
  again through ``WorldQuery.unit(tag)``.
- Tile coordinates are ``Point2`` with integer components, the lower-left
  corner of a structure's footprint.

``SC2World`` (ForemanBot/sc2_world.py) implements all three interfaces on a
python-sc2 ``BotAI``. The tests implement them in memory.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from sc2.ids.unit_typeid import UnitTypeId as UnitID
from sc2.position import Point2

from ForemanBot.constants import GEYSER_TYPES, MINERAL_FIELD_TYPES, WORKER_TYPES
from ForemanBot.economy.resource_ledger import Cost


def to_tile(position: Point2) -> Point2:
    """Snap a world position to the build-grid tile containing it."""
    return Point2((math.floor(position.x), math.floor(position.y)))


def chebyshev(a: Point2, b: Point2) -> float:
    """Chessboard distance: the larger of the x and y gaps."""
    return max(abs(a.x - b.x), abs(a.y - b.y))


# ---------------------------------------------------------------------------
# Snapshot value types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UnitRef:
    """One unit as seen this tick."""
    tag: int
    type_id: UnitID
    position: Point2
    is_structure: bool = False

    @property
    def tile(self) -> Point2:
        return to_tile(self.position)


@dataclass(frozen=True)
class WorkerStatus:
    """Engine-side activity flags of a worker, read fresh every tick."""
    is_gathering: bool = False
    is_constructing: bool = False
    target_tag: Optional[int] = None


@dataclass(frozen=True)
class BuildingSpec:
    """
    Static metadata for one structure type.

    Fields
    ------
    width, height : int
        Footprint in tiles, measured from the lower-left placement tile.
    is_gas_structure : bool
        Refinery / Assimilator / Extractor — must sit on a geyser.
    requires_creep : bool
        Every footprint tile must have creep.
    """
    type_id: UnitID
    minerals: int
    gas: int
    width: int
    height: int
    is_gas_structure: bool = False
    requires_creep: bool = False

    @property
    def cost(self) -> Cost:
        return Cost(self.minerals, self.gas)


# ---------------------------------------------------------------------------
# Capability predicates
# ---------------------------------------------------------------------------

def is_worker(unit: UnitRef) -> bool:
    """Harvest/construct capable, as opposed to combat or transport units."""
    return unit.type_id in WORKER_TYPES


def is_structure(unit: UnitRef) -> bool:
    """Static structure, as opposed to anything that moves."""
    return unit.is_structure


def is_geyser(unit: UnitRef) -> bool:
    return unit.type_id in GEYSER_TYPES


def is_mineral_field(unit: UnitRef) -> bool:
    return unit.type_id in MINERAL_FIELD_TYPES


# ---------------------------------------------------------------------------
# Interfaces
# ---------------------------------------------------------------------------

class WorldQuery(ABC):
    """Read-only view of the world."""

    @abstractmethod
    def own_units(self) -> List[UnitRef]:
        """All units and structures we control."""

    @abstractmethod
    def neutral_units(self) -> List[UnitRef]:
        """Neutral resource markers: mineral fields and vespene geysers."""

    @abstractmethod
    def all_units(self) -> List[UnitRef]:
        """Every visible unit, any owner. Used for collision checks."""

    @abstractmethod
    def unit(self, tag: int) -> Optional[UnitRef]:
        """Resolve a tag, or None if the unit is no longer visible."""

    @abstractmethod
    def can_build_here(self, tile: Point2, structure_type: UnitID, builder_tag: int) -> bool:
        """
        The engine's own buildability verdict for placing ``structure_type``
        with its lower-left corner at ``tile``, built by ``builder_tag``.
        Terrain, resource proximity and tech are the engine's business.
        """

    @abstractmethod
    def has_creep(self, tile: Point2) -> bool:
        """True if the tile is covered by creep."""

    @abstractmethod
    def building_spec(self, structure_type: UnitID) -> BuildingSpec:
        """Static cost / footprint metadata for a structure type."""

    @abstractmethod
    def construction_started(self, structure_type: UnitID, tile: Point2) -> bool:
        """
        True if one of our ``structure_type`` structures is under
        construction (build progress below 1) on the site anchored at
        ``tile``. Once it is, the engine has charged the structure's cost.
        """


class UnitCommands(ABC):
    """Actions the core may ask the engine to perform for a unit."""

    @abstractmethod
    def build(self, worker_tag: int, structure_type: UnitID, tile: Point2) -> bool:
        """Order a worker to build. Returns True if the engine accepted it."""

    @abstractmethod
    def gather(self, worker_tag: int, resource_tag: int) -> bool:
        """Order a worker to harvest from a resource."""

    @abstractmethod
    def worker_status(self, worker_tag: int) -> Optional[WorkerStatus]:
        """Live status flags, or None if the worker is gone."""


class ResourceObserver(ABC):
    """The faction's current resource totals, read once per tick."""

    @abstractmethod
    def minerals(self) -> int:
        ...

    @abstractmethod
    def gas(self) -> int:
        ...
