"""
ForemanBot Logger - Persistent file-based logging.

Every reservation, refund and dispatched build lands in a rotating log file,
so a game's economy can be replayed line by line after the match instead of
squinting at the in-game debug overlay.

Usage
-----
    from ForemanBot.logger import get_logger

    log = get_logger()          # module-level logger
    log.info("Game started")
    log.debug("Search radius %d exhausted", radius)
    log.warning("Build order for %s never started", name)

    # Game-specific helpers
    log.game_event("BUILD_DISPATCHED", "SUPPLYDEPOT @ (40, 52)", frame=1234)
    log.economy("RESERVE", minerals=100, gas=0, spendable=(50, 0), frame=1234)

The log file lives at  logs/foreman_<timestamp>.log  next to run.py.
Old log files are kept for up to LOG_BACKUP_COUNT runs before being deleted.
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple


# ── Configuration ────────────────────────────────────────────────────────────

LOG_DIR          = Path("logs")         # Relative to CWD (i.e. project root)
LOG_LEVEL        = logging.DEBUG        # File log level  (very verbose)
CONSOLE_LEVEL    = logging.INFO         # Console level   (INFO and above)
LOG_BACKUP_COUNT = 10                   # How many old log files to keep
MAX_BYTES        = 5 * 1024 * 1024      # 5 MB per file before rotating


# ── Custom log levels ─────────────────────────────────────────────────────────

GAME_EVENT_LEVEL = 25   # between INFO (20) and WARNING (30)
ECONOMY_LEVEL    = 15   # between DEBUG (10) and INFO (20)

logging.addLevelName(GAME_EVENT_LEVEL, "GAME")
logging.addLevelName(ECONOMY_LEVEL,    "ECON")


# ── Custom formatter ──────────────────────────────────────────────────────────

class ForemanFormatter(logging.Formatter):
    """
    Adds a [frame] column when a 'frame' extra field is present, so ledger
    movements can be lined up with the game loop that caused them.

    Example output:
        2026-10-19 21:14:03.412 | INFO    |       - | Game started
        2026-10-19 21:14:05.001 | GAME    |    1280 | BUILD_DISPATCHED | SUPPLYDEPOT @ (40, 52)
        2026-10-19 21:14:05.002 | ECON    |    1280 | RESERVE | 100m 0g → spendable 50m 0g
    """

    BASE_FMT  = "%(asctime)s.%(msecs)03d | %(levelname)-7s | %(frame_col)8s | %(message)s"
    DATE_FMT  = "%Y-%m-%d %H:%M:%S"

    def format(self, record: logging.LogRecord) -> str:
        frame = getattr(record, "frame", None)
        record.frame_col = "-" if frame is None else str(frame)
        record.levelname = record.levelname[:7]
        return super().format(record)


# ── Logger factory ────────────────────────────────────────────────────────────

_logger_instance: Optional["ForemanLogger"] = None


def get_logger(name: str = "foreman") -> "ForemanLogger":
    """
    Return the singleton ForemanLogger, creating it on first call.

    Call this once at module level in each file that needs logging:

        log = get_logger()
    """
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = ForemanLogger(name)
    return _logger_instance


class ForemanLogger:
    """
    Thin wrapper around Python's standard logging that adds game-specific
    helpers and wires up both a rotating file handler and a console handler.
    """

    def __init__(self, name: str = "foreman") -> None:
        self._logger = logging.getLogger(name)
        self._logger.setLevel(LOG_LEVEL)

        if self._logger.handlers:
            return

        self._setup_handlers()

    # ── Setup ─────────────────────────────────────────────────────────────────

    def _setup_handlers(self) -> None:
        LOG_DIR.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file  = LOG_DIR / f"foreman_{timestamp}.log"

        formatter = ForemanFormatter(
            fmt     = ForemanFormatter.BASE_FMT,
            datefmt = ForemanFormatter.DATE_FMT,
        )

        # ── Rotating file handler ──────────────────────────────────────────
        file_handler = logging.handlers.RotatingFileHandler(
            filename    = log_file,
            maxBytes    = MAX_BYTES,
            backupCount = LOG_BACKUP_COUNT,
            encoding    = "utf-8",
        )
        file_handler.setLevel(LOG_LEVEL)
        file_handler.setFormatter(formatter)

        # ── Console handler ────────────────────────────────────────────────
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(CONSOLE_LEVEL)
        console_handler.setFormatter(formatter)

        self._logger.addHandler(file_handler)
        self._logger.addHandler(console_handler)

        self._logger.info(
            "Logger initialised — writing to %s",
            log_file.resolve(),
        )

    # ── Standard log levels ───────────────────────────────────────────────────

    def debug(self, msg: str, *args, frame: Optional[int] = None, **kwargs) -> None:
        self._logger.debug(msg, *args, extra={"frame": frame}, **kwargs)

    def info(self, msg: str, *args, frame: Optional[int] = None, **kwargs) -> None:
        self._logger.info(msg, *args, extra={"frame": frame}, **kwargs)

    def warning(self, msg: str, *args, frame: Optional[int] = None, **kwargs) -> None:
        self._logger.warning(msg, *args, extra={"frame": frame}, **kwargs)

    def error(self, msg: str, *args, frame: Optional[int] = None, **kwargs) -> None:
        self._logger.error(msg, *args, extra={"frame": frame}, **kwargs)

    def exception(self, msg: str, *args, frame: Optional[int] = None, **kwargs) -> None:
        self._logger.exception(msg, *args, extra={"frame": frame}, **kwargs)

    # ── Game-specific helpers ─────────────────────────────────────────────────

    def game_event(
        self,
        event_type: str,
        detail: str,
        frame: Optional[int] = None,
    ) -> None:
        """
        Log a significant named game event (dispatched builds, game end, ...).

        Example:
            log.game_event("BUILD_DISPATCHED", "SUPPLYDEPOT @ (40, 52)", frame=1280)
            log.game_event("GAME_END", "Result.Victory", frame=45000)
        """
        self._logger.log(
            GAME_EVENT_LEVEL,
            "%s | %s",
            event_type.upper(),
            detail,
            extra={"frame": frame},
        )

    def economy(
        self,
        movement: str,
        minerals: int,
        gas: int,
        spendable: Tuple[int, int],
        frame: Optional[int] = None,
    ) -> None:
        """
        Log one ledger movement (reserve or release) with the balance it left.

        Example:
            log.economy("RESERVE", minerals=100, gas=0, spendable=(50, 0), frame=1280)
        """
        self._logger.log(
            ECONOMY_LEVEL,
            "%s | %dm %dg → spendable %dm %dg",
            movement.upper(),
            minerals,
            gas,
            spendable[0],
            spendable[1],
            extra={"frame": frame},
        )
