"""
Unit-type classification and search tunables for the construction core.

Everything here is static game knowledge. The core never asks the engine
"is this a worker?"; it checks the type against these sets, so the fakes in
the test suite and the live adapter classify units identically.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Optional

from sc2.data import Race
from sc2.ids.unit_typeid import UnitTypeId as UnitID


# ── Workers ──────────────────────────────────────────────────────────────────

# Harvest + construct capable. MULEs harvest but cannot build.
WORKER_TYPES: FrozenSet[UnitID] = frozenset({
    UnitID.SCV,
    UnitID.PROBE,
    UnitID.DRONE,
})

# ── Home structures ──────────────────────────────────────────────────────────

TOWNHALL_TYPES: FrozenSet[UnitID] = frozenset({
    UnitID.COMMANDCENTER, UnitID.ORBITALCOMMAND, UnitID.PLANETARYFORTRESS,
    UnitID.NEXUS,
    UnitID.HATCHERY, UnitID.LAIR, UnitID.HIVE,
})

# ── Neutral resources ────────────────────────────────────────────────────────

GEYSER_TYPES: FrozenSet[UnitID] = frozenset({
    UnitID.VESPENEGEYSER,
    UnitID.SPACEPLATFORMGEYSER,
    UnitID.RICHVESPENEGEYSER,
    UnitID.PROTOSSVESPENEGEYSER,
    UnitID.PURIFIERVESPENEGEYSER,
    UnitID.SHAKURASVESPENEGEYSER,
})

MINERAL_FIELD_TYPES: FrozenSet[UnitID] = frozenset({
    UnitID.MINERALFIELD, UnitID.MINERALFIELD750,
    UnitID.RICHMINERALFIELD, UnitID.RICHMINERALFIELD750,
    UnitID.LABMINERALFIELD, UnitID.LABMINERALFIELD750,
    UnitID.PURIFIERMINERALFIELD, UnitID.PURIFIERMINERALFIELD750,
    UnitID.PURIFIERRICHMINERALFIELD, UnitID.PURIFIERRICHMINERALFIELD750,
    UnitID.BATTLESTATIONMINERALFIELD, UnitID.BATTLESTATIONMINERALFIELD750,
})

# ── Structure metadata ───────────────────────────────────────────────────────

# Must be placed exactly on top of a geyser.
GAS_STRUCTURE_TYPES: FrozenSet[UnitID] = frozenset({
    UnitID.REFINERY,
    UnitID.ASSIMILATOR,
    UnitID.EXTRACTOR,
})

# Zerg structures that can only be placed on creep. Hatcheries and
# extractors are the exceptions and are deliberately absent.
CREEP_STRUCTURE_TYPES: FrozenSet[UnitID] = frozenset({
    UnitID.SPAWNINGPOOL,
    UnitID.EVOLUTIONCHAMBER,
    UnitID.ROACHWARREN,
    UnitID.BANELINGNEST,
    UnitID.HYDRALISKDEN,
    UnitID.LURKERDENMP,
    UnitID.SPIRE,
    UnitID.INFESTATIONPIT,
    UnitID.ULTRALISKCAVERN,
    UnitID.NYDUSNETWORK,
    UnitID.SPINECRAWLER,
    UnitID.SPORECRAWLER,
})

# Zerg supply comes from Overlords (a unit), so there is no supply structure.
SUPPLY_STRUCTURE: Dict[Race, Optional[UnitID]] = {
    Race.Terran:  UnitID.SUPPLYDEPOT,
    Race.Protoss: UnitID.PYLON,
    Race.Zerg:    None,
}

# ── Placement search ─────────────────────────────────────────────────────────

SEARCH_START_RADIUS: int = 3     # tiles
SEARCH_RADIUS_STEP:  int = 2     # tiles added per round
SEARCH_STOP_RADIUS:  int = 40    # radius cap, also the gas-geyser range
UNIT_CLEARANCE:      int = 4     # Chebyshev buffer kept clear of other units
