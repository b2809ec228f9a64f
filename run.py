"""
Run script for Foreman Bot using config.py settings.
"""

import os
import random
from pathlib import Path

from sc2 import maps
from sc2.data import Difficulty, Race
from sc2.main import run_game
from sc2.player import Bot, Computer

from ForemanBot.foreman_bot import ForemanBot
from ForemanBot.logger import get_logger
from config import (
    BOT_NAME,
    BOT_RACE,
    DEBUG_OVERLAY,
    MAP_PATH,
    MAP_POOL,
    OPPONENT_DIFFICULTY,
    OPPONENT_RACE,
    REALTIME,
    REFUND_GRACE_FRAMES,
    SUPPLY_HEADROOM,
)

log = get_logger()


def _parse_race(name: str, fallback: Race) -> Race:
    try:
        return Race[name.capitalize()]
    except KeyError:
        log.warning("Invalid race: %s. Using %s.", name, fallback.name)
        return fallback


def _load_map(map_name: str):
    if MAP_PATH and os.path.exists(os.path.expanduser(MAP_PATH)):
        map_file = Path(MAP_PATH).expanduser() / f"{map_name}.SC2Map"
        if map_file.exists():
            log.info("Loading map from: %s", map_file)
            return maps.Map(map_file)
        log.warning("Map not found: %s — falling back to default SC2 maps", map_file)
    return maps.get(map_name)


def main():
    """Run a single game for testing"""

    log.info("=" * 50)
    log.info("%s (%s)", BOT_NAME, BOT_RACE)
    log.info("=" * 50)

    bot_race = _parse_race(BOT_RACE, Race.Terran)
    opponent_race = _parse_race(OPPONENT_RACE, Race.Random)

    try:
        difficulty = Difficulty[OPPONENT_DIFFICULTY]
    except KeyError:
        log.warning("Invalid difficulty: %s. Using Easy.", OPPONENT_DIFFICULTY)
        difficulty = Difficulty.Easy

    map_name = random.choice(MAP_POOL)
    log.info("Map: %s", map_name)
    log.info("Opponent: %s %s", opponent_race.name, difficulty.name)
    log.info("Realtime: %s", REALTIME)

    bot = ForemanBot(
        supply_headroom=SUPPLY_HEADROOM,
        refund_grace_frames=REFUND_GRACE_FRAMES,
        debug_overlay=DEBUG_OVERLAY,
    )

    log.info("Starting game on %s ...", map_name)
    run_game(
        _load_map(map_name),
        [
            Bot(bot_race, bot),
            Computer(opponent_race, difficulty),
        ],
        realtime=REALTIME,
        save_replay_as="foreman_test.SC2Replay",
    )

    log.info("Game finished!")


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        log.info("Game stopped by user")
    except Exception as e:
        log.exception("Unexpected error in main: %s", e)
