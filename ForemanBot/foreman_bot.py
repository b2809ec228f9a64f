"""
Foreman Bot - Main Bot Class

Thin per-tick driver around the construction core:
- Feed resource totals to the ResourceLedger
- Keep the BuilderManager's worker pool in sync with the world
- Refund build orders that never started
- Send idle workers mining
- Dispatch a supply structure when supply runs low
- Draw the ledger's balances as debug text
"""

from typing import Optional

from sc2.bot_ai import BotAI
from sc2.data import Result

from ForemanBot.constants import SUPPLY_STRUCTURE
from ForemanBot.construction import BuilderManager, PlacementLocator
from ForemanBot.economy import ResourceLedger
from ForemanBot.logger import get_logger
from ForemanBot.sc2_world import SC2World


log = get_logger()

# Supply cap can never exceed this; no depots past it.
_MAX_SUPPLY = 200


class ForemanBot(BotAI):
    """
    python-sc2 bot that owns one SC2World, ResourceLedger, PlacementLocator
    and BuilderManager, and calls them in a fixed order every step.
    """

    def __init__(
        self,
        supply_headroom: int = 4,
        refund_grace_frames: Optional[int] = None,
        debug_overlay: bool = True,
    ):
        log.info("=" * 50)
        log.info("FOREMAN BOT INITIALIZING")
        log.info("=" * 50)
        super().__init__()

        self.supply_headroom = supply_headroom
        self.refund_grace_frames = refund_grace_frames
        self.debug_overlay = debug_overlay

        # Created in on_start, once the game state exists
        self.world: Optional[SC2World] = None
        self.ledger = ResourceLedger()
        self.locator: Optional[PlacementLocator] = None
        self.builder_manager: Optional[BuilderManager] = None

    async def on_start(self) -> None:
        self.world = SC2World(self)
        self.locator = PlacementLocator(self.world)
        self.builder_manager = BuilderManager(
            self.world,
            self.world,
            self.locator,
            ledger=self.ledger,
            supply_structure=SUPPLY_STRUCTURE.get(self.race),
            refund_grace_frames=self.refund_grace_frames,
        )
        self.builder_manager.set_callbacks(self.ledger)

        log.game_event("GAME_START", f"Race: {self.race.name}", frame=0)

    async def on_step(self, iteration: int) -> None:
        frame = self.state.game_loop
        manager = self.builder_manager

        # Balances must be current before anything checks affordability
        self.ledger.observe(self.world.minerals(), self.world.gas())

        manager.prune_missing_workers(frame=frame)
        manager.register_workers(self.world.own_units())
        manager.reconcile_pending_tasks(frame=frame)
        manager.assign_default_gathering()

        if self._needs_supply():
            manager.attempt_build_supply_structure(frame=frame)

        if self.debug_overlay:
            self._draw_debug()

    def _needs_supply(self) -> bool:
        if self.builder_manager.supply_structure is None:
            return False
        if self.supply_cap >= _MAX_SUPPLY:
            return False
        supply = self.builder_manager.supply_structure
        # Our own unsettled orders, then anything the engine already has in progress
        if self.builder_manager.pending_count(supply) or self.already_pending(supply):
            return False
        return self.supply_left < self.supply_headroom

    def _draw_debug(self) -> None:
        lines = [self.builder_manager.worker_summary()] + self.ledger.debug_lines()
        for i, text in enumerate(lines):
            self.client.debug_text_screen(text, pos=(0.02, 0.05 + 0.025 * i), size=12)

    async def on_end(self, game_result: Result) -> None:
        dispatched = len(self.builder_manager.requested_structures) if self.builder_manager else 0
        log.game_event(
            "GAME_END",
            f"{game_result} | dispatched={dispatched}",
            frame=self.state.game_loop,
        )
