"""
PlacementLocator — finds a legal tile for a new structure.

Search
------
Gas structures skip the search entirely: they go on the first geyser within
SEARCH_STOP_RADIUS tiles (Chebyshev) of the builder's home.

Everything else is an expanding square search around the home tile:

    radius 3, 5, 7, ... while radius < SEARCH_STOP_RADIUS
        for x in [cx - r, cx + r]:          # row-major,
            for y in [cy - r, cy + r]:      # x then y ascending
                engine says buildable?
                no other unit within UNIT_CLEARANCE tiles?
                creep under every footprint tile (if required)?
                → first hit wins

Tiles already tested at the previous radius are skipped, so each round only
walks the new two-tile band around the old square. Placement legality does
not change within a call, so the result is identical to rescanning the whole
square: nearest radius first, then lexicographically smallest (x, y).

The radius cap bounds the worst case. Past it the area is treated as
unbuildable and the caller retries on a later tick. Nothing is cached
between calls.

Unit clearance
--------------
The engine's placement check does not reliably account for units that are
still walking off a tile, so we keep a manual buffer: any unit except the
builder itself whose tile is closer than UNIT_CLEARANCE (Chebyshev) blocks
the candidate.

Usage
-----
    locator = PlacementLocator(world)
    tile = locator.find_site(UnitID.SUPPLYDEPOT, builder)
    mineral_tag = locator.find_mineral_for(builder)
"""

from __future__ import annotations

from typing import Iterator, List, Optional

from sc2.ids.unit_typeid import UnitTypeId as UnitID
from sc2.position import Point2

from ForemanBot.constants import (
    SEARCH_RADIUS_STEP,
    SEARCH_START_RADIUS,
    SEARCH_STOP_RADIUS,
    UNIT_CLEARANCE,
)
from ForemanBot.construction.builder import Builder
from ForemanBot.logger import get_logger
from ForemanBot.world import (
    BuildingSpec,
    WorldQuery,
    chebyshev,
    is_geyser,
    is_mineral_field,
)

log = get_logger()


def ring_tiles(center: Point2, radius: int, inner: int) -> Iterator[Point2]:
    """
    Tiles of the square of ``radius`` around ``center`` that lie outside the
    square of ``inner``, in row-major order. ``inner < 0`` yields the whole
    square.
    """
    cx, cy = int(center.x), int(center.y)
    for x in range(cx - radius, cx + radius + 1):
        for y in range(cy - radius, cy + radius + 1):
            if inner >= 0 and max(abs(x - cx), abs(y - cy)) <= inner:
                continue
            yield Point2((x, y))


class PlacementLocator:
    """
    Stateless placement search.

    One instance is shared by the BuilderManager. All world access goes
    through the WorldQuery it was built with.
    """

    def __init__(
        self,
        world: WorldQuery,
        start_radius: int = SEARCH_START_RADIUS,
        radius_step: int = SEARCH_RADIUS_STEP,
        stop_radius: int = SEARCH_STOP_RADIUS,
        clearance: int = UNIT_CLEARANCE,
    ) -> None:
        self.world = world
        self.start_radius = start_radius
        self.radius_step = radius_step
        self.stop_radius = stop_radius
        self.clearance = clearance

    # ------------------------------------------------------------------
    # Structure placement
    # ------------------------------------------------------------------

    def find_site(self, structure_type: UnitID, builder: Builder) -> Optional[Point2]:
        """
        Return a tile where ``builder`` can place ``structure_type``, or None.

        Does NOT issue any command.
        """
        home = self.world.unit(builder.home)
        if home is None:
            log.debug("PlacementLocator: home %d of worker %d not visible", builder.home, builder.worker)
            return None

        spec = self.world.building_spec(structure_type)
        if spec.is_gas_structure:
            return self._find_geyser(home.tile)

        blockers = [
            u.tile for u in self.world.all_units()
            if u.tag != builder.worker
        ]

        radius = self.start_radius
        inner = -1
        while radius < self.stop_radius:
            for tile in ring_tiles(home.tile, radius, inner):
                if self._is_legal(tile, spec, builder, blockers):
                    log.debug(
                        "PlacementLocator: %s → %s (radius %d)",
                        structure_type.name,
                        tile,
                        radius,
                    )
                    return tile
            inner = radius
            radius += self.radius_step

        log.debug(
            "PlacementLocator: no site for %s within %d tiles of %s",
            structure_type.name,
            self.stop_radius,
            home.tile,
        )
        return None

    def _find_geyser(self, around: Point2) -> Optional[Point2]:
        for resource in self.world.neutral_units():
            if is_geyser(resource) and chebyshev(resource.tile, around) < self.stop_radius:
                return resource.tile
        log.debug("PlacementLocator: no geyser within %d tiles of %s", self.stop_radius, around)
        return None

    def _is_legal(
        self,
        tile: Point2,
        spec: BuildingSpec,
        builder: Builder,
        blockers: List[Point2],
    ) -> bool:
        if not self.world.can_build_here(tile, spec.type_id, builder.worker):
            return False

        if any(chebyshev(b, tile) < self.clearance for b in blockers):
            return False

        if spec.requires_creep and not self._has_creep_under(tile, spec):
            return False

        return True

    def _has_creep_under(self, tile: Point2, spec: BuildingSpec) -> bool:
        x0, y0 = int(tile.x), int(tile.y)
        return all(
            self.world.has_creep(Point2((x, y)))
            for x in range(x0, x0 + spec.width)
            for y in range(y0, y0 + spec.height)
        )

    # ------------------------------------------------------------------
    # Mining
    # ------------------------------------------------------------------

    def find_mineral_for(self, builder: Builder) -> Optional[int]:
        """
        Tag of the mineral field nearest to the builder's worker, or None.

        Linear scan; on equal distance the first field seen wins.
        """
        worker = self.world.unit(builder.worker)
        if worker is None:
            return None

        closest: Optional[int] = None
        smallest = float("inf")
        for resource in self.world.neutral_units():
            if not is_mineral_field(resource):
                continue
            dist = worker.position.distance_to_point2(resource.position)
            if dist < smallest:
                smallest = dist
                closest = resource.tag
        return closest
