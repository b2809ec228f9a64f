"""
ResourceLedger — optimistic spend accounting.

Why this exists
---------------
The engine only deducts a structure's cost once the worker actually starts
building it, which can be many frames after the command was issued. If the
bot gated build attempts on the raw balance it would happily issue the same
150 minerals to three workers in a row.

The ledger keeps two balances per resource:

  observed   — what the engine reports, updated once per tick
  spendable  — observed minus every reservation still outstanding

Income and engine-side deductions arrive through the observed setters and
are applied to both balances as a delta. Reservations and refunds only ever
touch the spendable side. That keeps the invariant

    spendable == observed - outstanding reservations

true no matter how the two kinds of update interleave.

Usage
-----
    ledger = ResourceLedger()
    ledger.observe(minerals=bot.minerals, gas=bot.vespene)   # every tick, first
    if ledger.can_afford(Cost(100, 0)):
        ...                                                  # dispatch
        ledger.reserve(100, 0)
    ...
    ledger.release(100, 0)                                   # build never started
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, NamedTuple, Optional

from ForemanBot.logger import get_logger

log = get_logger()


class Cost(NamedTuple):
    minerals: int
    gas: int


class ResourceListener(ABC):
    """
    Receives spend / refund notifications from the builder manager.

    The ledger is the production implementation; anything else that wants
    to watch construction spending (e.g. a stats tracker) can implement it.
    """

    @abstractmethod
    def spend_resources(self, cost: Cost, frame: Optional[int] = None) -> None:
        """A build command was accepted; its cost is now committed."""

    @abstractmethod
    def refund_resources(self, cost: Cost, frame: Optional[int] = None) -> None:
        """A committed build was resolved; give its cost back."""


class ResourceLedger(ResourceListener):
    """
    Observed vs. spendable mineral and gas balances.

    Arithmetic only: the ledger reports affordability but never refuses a
    reserve, and never raises.
    """

    def __init__(self) -> None:
        self._minerals: int = 0
        self._gas: int = 0
        self._spendable_minerals: int = 0
        self._spendable_gas: int = 0

    # ------------------------------------------------------------------
    # Observation — called once per tick before anything else
    # ------------------------------------------------------------------

    @property
    def minerals(self) -> int:
        return self._minerals

    @minerals.setter
    def minerals(self, value: int) -> None:
        delta = value - self._minerals
        self._spendable_minerals += delta
        self._minerals = value

    @property
    def gas(self) -> int:
        return self._gas

    @gas.setter
    def gas(self, value: int) -> None:
        delta = value - self._gas
        self._spendable_gas += delta
        self._gas = value

    def set_observed_minerals(self, value: int) -> None:
        self.minerals = value

    def set_observed_gas(self, value: int) -> None:
        self.gas = value

    def observe(self, minerals: int, gas: int) -> None:
        self.minerals = minerals
        self.gas = gas

    # ------------------------------------------------------------------
    # Read API
    # ------------------------------------------------------------------

    @property
    def spendable_minerals(self) -> int:
        return self._spendable_minerals

    @property
    def spendable_gas(self) -> int:
        return self._spendable_gas

    @property
    def reserved_minerals(self) -> int:
        return self._minerals - self._spendable_minerals

    @property
    def reserved_gas(self) -> int:
        return self._gas - self._spendable_gas

    def can_afford(self, cost: Cost) -> bool:
        """True iff reserving ``cost`` would leave both spendable balances >= 0."""
        return (
            cost.minerals <= self._spendable_minerals
            and cost.gas <= self._spendable_gas
        )

    # ------------------------------------------------------------------
    # Write API
    # ------------------------------------------------------------------

    def reserve(self, minerals: int, gas: int, frame: Optional[int] = None) -> None:
        self._spendable_minerals -= minerals
        self._spendable_gas -= gas
        log.economy("RESERVE", minerals, gas, self.spendable, frame=frame)

    def release(self, minerals: int, gas: int, frame: Optional[int] = None) -> None:
        self._spendable_minerals += minerals
        self._spendable_gas += gas
        log.economy("RELEASE", minerals, gas, self.spendable, frame=frame)

    # ResourceListener

    def spend_resources(self, cost: Cost, frame: Optional[int] = None) -> None:
        self.reserve(cost.minerals, cost.gas, frame=frame)

    def refund_resources(self, cost: Cost, frame: Optional[int] = None) -> None:
        self.release(cost.minerals, cost.gas, frame=frame)

    # ------------------------------------------------------------------
    # Debug
    # ------------------------------------------------------------------

    @property
    def spendable(self) -> Cost:
        return Cost(self._spendable_minerals, self._spendable_gas)

    def debug_lines(self) -> List[str]:
        return [
            f"minerals: {self._minerals}",
            f"minerals after spending: {self._spendable_minerals}",
            f"gas: {self._gas}",
            f"gas after spending: {self._spendable_gas}",
        ]
