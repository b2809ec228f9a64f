"""
SC2World — python-sc2 implementation of the world interfaces.

The construction core only ever sees ``WorldQuery`` / ``UnitCommands`` /
``ResourceObserver``. This adapter is where those calls meet a live
``BotAI``. It is built once in on_start. Unit lookups go through a tag
index rebuilt whenever the game loop advances, so nothing unit-related
outlives a tick; only static building specs are cached for the game.

Placement check
---------------
python-sc2's own ``can_place`` is an async engine query. The core's search
runs synchronously inside one step, so ``can_build_here`` answers from the
static placement grid instead:

  - every footprint tile must be inside the map and placeable
  - Terran / Protoss structures may not touch creep
  - Protoss structures other than Pylon / Nexus / Assimilator need power

Structures placed after game start are not on the static grid; the core's
unit clearance buffer keeps candidates away from them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Optional

from sc2.ids.unit_typeid import UnitTypeId as UnitID
from sc2.position import Point2

from ForemanBot.constants import (
    CREEP_STRUCTURE_TYPES,
    GAS_STRUCTURE_TYPES,
)
from ForemanBot.logger import get_logger
from ForemanBot.world import (
    BuildingSpec,
    ResourceObserver,
    UnitCommands,
    UnitRef,
    WorkerStatus,
    WorldQuery,
    to_tile,
)

if TYPE_CHECKING:
    from sc2.bot_ai import BotAI
    from sc2.unit import Unit

log = get_logger()

# Protoss structures that do not need a pylon's power field.
_UNPOWERED_PROTOSS: frozenset = frozenset({
    UnitID.PYLON,
    UnitID.NEXUS,
    UnitID.ASSIMILATOR,
})

# Order ability names that mean "on the way to build, or building".
_BUILD_ABILITY_KEYWORDS = ("BUILD", "ZERGBUILD")

# A structure this close to the expected footprint centre is ours.
_SITE_MATCH_RADIUS = 1.0


def unit_ref(unit: "Unit") -> UnitRef:
    return UnitRef(
        tag=unit.tag,
        type_id=unit.type_id,
        position=unit.position,
        is_structure=unit.is_structure,
    )


class SC2World(WorldQuery, UnitCommands, ResourceObserver):
    """All three world interfaces over one python-sc2 bot."""

    def __init__(self, bot: "BotAI") -> None:
        self.bot = bot
        # Cost and footprint are static game data; read once per type.
        self._specs: Dict[UnitID, BuildingSpec] = {}
        self._index: Dict[int, "Unit"] = {}
        self._index_loop: Optional[int] = None

    # ------------------------------------------------------------------
    # WorldQuery
    # ------------------------------------------------------------------

    def own_units(self) -> List[UnitRef]:
        return [unit_ref(u) for u in self.bot.all_own_units]

    def neutral_units(self) -> List[UnitRef]:
        resources = list(self.bot.mineral_field) + list(self.bot.vespene_geyser)
        return [unit_ref(u) for u in resources]

    def all_units(self) -> List[UnitRef]:
        return [unit_ref(u) for u in self.bot.all_units]

    def unit(self, tag: int) -> Optional[UnitRef]:
        found = self._find(tag)
        return unit_ref(found) if found is not None else None

    def can_build_here(self, tile: Point2, structure_type: UnitID, builder_tag: int) -> bool:
        spec = self.building_spec(structure_type)
        worker = self._find(builder_tag)
        builder_type = worker.type_id if worker is not None else None
        avoid_creep = (
            not spec.requires_creep
            and builder_type is not None
            and builder_type != UnitID.DRONE
        )

        grid = self.bot.game_info.placement_grid
        x0, y0 = int(tile.x), int(tile.y)
        for x in range(x0, x0 + spec.width):
            for y in range(y0, y0 + spec.height):
                if not (0 <= x < grid.width and 0 <= y < grid.height):
                    return False
                point = Point2((x, y))
                if grid[point] == 0:
                    return False
                if avoid_creep and self.has_creep(point):
                    return False

        if builder_type == UnitID.PROBE and structure_type not in _UNPOWERED_PROTOSS:
            return self.bot.state.psionic_matrix.covers(self._center(tile, spec))
        return True

    def has_creep(self, tile: Point2) -> bool:
        return self.bot.has_creep(tile)

    def building_spec(self, structure_type: UnitID) -> BuildingSpec:
        spec = self._specs.get(structure_type)
        if spec is not None:
            return spec

        cost = self.bot.calculate_cost(structure_type)
        radius = self.bot.game_data.units[structure_type.value].footprint_radius or 0.5
        size = max(1, int(round(radius * 2)))
        spec = BuildingSpec(
            type_id=structure_type,
            minerals=int(cost.minerals),
            gas=int(cost.vespene),
            width=size,
            height=size,
            is_gas_structure=structure_type in GAS_STRUCTURE_TYPES,
            requires_creep=structure_type in CREEP_STRUCTURE_TYPES,
        )
        self._specs[structure_type] = spec
        return spec

    def construction_started(self, structure_type: UnitID, tile: Point2) -> bool:
        if structure_type in GAS_STRUCTURE_TYPES:
            # Gas sites are anchored at the geyser's own tile
            site = Point2((tile.x + 0.5, tile.y + 0.5))
        else:
            site = self._center(tile, self.building_spec(structure_type))
        return any(
            s.build_progress < 1.0
            and s.position.distance_to(site) < _SITE_MATCH_RADIUS
            for s in self.bot.structures(structure_type)
        )

    # ------------------------------------------------------------------
    # UnitCommands
    # ------------------------------------------------------------------

    def build(self, worker_tag: int, structure_type: UnitID, tile: Point2) -> bool:
        worker = self._find(worker_tag)
        if worker is None:
            return False

        if structure_type in GAS_STRUCTURE_TYPES:
            geyser = next(
                (g for g in self.bot.vespene_geyser if to_tile(g.position) == tile),
                None,
            )
            if geyser is None:
                log.debug("SC2World: no geyser at %s", tile)
                return False
            return bool(worker.build_gas(geyser, can_afford_check=True))

        spec = self.building_spec(structure_type)
        return bool(
            worker.build(structure_type, self._center(tile, spec), can_afford_check=True)
        )

    def gather(self, worker_tag: int, resource_tag: int) -> bool:
        worker = self._find(worker_tag)
        resource = self._find(resource_tag)
        if worker is None or resource is None:
            return False
        return bool(worker.gather(resource))

    def worker_status(self, worker_tag: int) -> Optional[WorkerStatus]:
        worker = self._find(worker_tag)
        if worker is None:
            return None
        target = worker.order_target
        return WorkerStatus(
            is_gathering=worker.is_gathering or worker.is_returning,
            is_constructing=self._has_build_order(worker),
            target_tag=target if isinstance(target, int) else None,
        )

    # ------------------------------------------------------------------
    # ResourceObserver
    # ------------------------------------------------------------------

    def minerals(self) -> int:
        return self.bot.minerals

    def gas(self) -> int:
        return self.bot.vespene

    # ------------------------------------------------------------------
    # Utilities
    # ------------------------------------------------------------------

    def _find(self, tag: int) -> Optional["Unit"]:
        """Tag lookup through an index rebuilt once per game loop."""
        loop = self.bot.state.game_loop
        if loop != self._index_loop:
            self._index = {u.tag: u for u in self.bot.all_units}
            self._index_loop = loop
        return self._index.get(tag)

    @staticmethod
    def _center(tile: Point2, spec: BuildingSpec) -> Point2:
        """Engine build position: the middle of the footprint."""
        return Point2((tile.x + spec.width / 2, tile.y + spec.height / 2))

    @staticmethod
    def _has_build_order(worker: "Unit") -> bool:
        """
        True if the worker's order queue holds a build command, including
        while it is still walking to the site.
        """
        if worker.is_constructing_scv:
            return True
        for order in worker.orders:
            ability_name = order.ability.id.name.upper()
            if any(kw in ability_name for kw in _BUILD_ABILITY_KEYWORDS):
                return True
        return False
