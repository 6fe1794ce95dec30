"""
Abstract base class for trading strategies.

A strategy decides what to buy and sell on a fixed set of markets. It only
uses the public market surface (quotes, locks, redemptions, holdings) and
mutates the trader's goods in place.

The Trader drives a strategy by calling apply() several times per simulated
day and sell_remaining_goods() once at the end of the run.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List, Sequence

from ..core import Good, GoodKind, InvariantViolation
from ..events import subscribe_each_other, wait_one_day
from ..market import SGX


def find_good(goods: Sequence[Good], kind: GoodKind) -> Good:
    """Return the trader's parcel of kind."""
    for good in goods:
        if good.kind == kind:
            return good
    raise InvariantViolation(f"Trader holds no parcel of {kind}")


class Strategy(ABC):
    """
    Base class for all strategies.

    Attributes:
        markets: Markets the strategy trades on
        trader_name: Name used on every lock, and therefore in every token
    """

    def __init__(self, markets: List[SGX], trader_name: str) -> None:
        if not markets:
            raise ValueError("A strategy needs at least one market")
        self.markets = list(markets)
        self.trader_name = trader_name

    def increase_day_by_one(self) -> None:
        """Advance every market by one day."""
        wait_one_day(*self.markets)

    def subscribe_all_markets(self) -> None:
        """Make every market react to the trades of every other market."""
        subscribe_each_other(*self.markets)

    @abstractmethod
    def apply(self, goods: List[Good]) -> None:
        """Run one step of the strategy, buying and selling with goods."""

    @abstractmethod
    def sell_remaining_goods(self, goods: List[Good]) -> None:
        """Try to turn every non-settlement holding back into the settlement good."""
