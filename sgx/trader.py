"""
trader.py - Simulation driver

A Trader owns one parcel per good kind and a strategy bound to a set of
markets. apply_strategy() runs the simulation day by day: the strategy is
applied a fixed number of times per day, every market then advances one
day, and a snapshot of the trader's goods is recorded.
"""

from __future__ import annotations
from decimal import Decimal
from typing import Any, Callable, Dict, List
import json
import logging

from .core import SETTLEMENT_KIND, Good, GoodKind, to_decimal
from .market import SGX
from .strategies.strategy import Strategy

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60

TraderHistory = List[List[Good]]
StrategyFactory = Callable[[List[SGX], str], Strategy]


def _snapshot(goods: List[Good]) -> List[Good]:
    return [Good(good.kind, good.quantity) for good in goods]


class Trader:
    """
    Runs a strategy against a set of markets.

    Example:
        markets = [SGX.new_randomized(name=f"SGX{i}") for i in range(3)]
        trader = Trader(StingyStrategy, 100_000, markets, "stingy")
        trader.apply_strategy(max_days=30, apply_every_minutes=60)
        print(trader.history_as_json())
    """

    def __init__(
        self,
        strategy: StrategyFactory,
        starting_capital: Any,
        markets: List[SGX],
        name: str,
    ):
        """
        Create a trader holding starting_capital of the settlement good.

        Args:
            strategy: Strategy class (or any factory taking markets and a trader name)
            starting_capital: Initial settlement balance (> 0)
            markets: Markets to trade on (at least one); they are subscribed to each other
            name: Trader name, used on every lock

        Raises:
            ValueError: If starting_capital <= 0 or markets is empty
        """
        starting_capital = to_decimal(starting_capital)
        if starting_capital <= 0:
            raise ValueError(f"starting_capital must be positive, got {starting_capital}")
        if not markets:
            raise ValueError("markets cannot be empty")

        self.name = name
        self.strategy = strategy(list(markets), name)
        self.goods: List[Good] = [
            Good(kind, starting_capital if kind == SETTLEMENT_KIND else 0)
            for kind in GoodKind
        ]
        self._history: TraderHistory = [_snapshot(self.goods)]
        self._days = 0
        self.strategy.subscribe_all_markets()

    @property
    def days(self) -> int:
        """Days simulated so far."""
        return self._days

    @property
    def history(self) -> TraderHistory:
        """The starting goods followed by one snapshot per simulated day."""
        return [_snapshot(goods) for goods in self._history]

    def balance(self, kind: GoodKind = SETTLEMENT_KIND) -> Decimal:
        for good in self.goods:
            if good.kind == kind:
                return good.quantity
        return Decimal("0")

    def apply_strategy(self, max_days: int, apply_every_minutes: int) -> None:
        """
        Run the simulation until max_days days have elapsed.

        The strategy is applied MINUTES_PER_DAY // apply_every_minutes times
        per day. On the last day the strategy liquidates its remaining
        non-settlement goods before the snapshot is taken.

        Raises:
            ValueError: If max_days < 1 or apply_every_minutes is outside [1, 1440]
        """
        if max_days < 1:
            raise ValueError(f"The trader has to run at least 1 day, got {max_days}")
        if apply_every_minutes < 1:
            raise ValueError(
                f"apply_every_minutes must be at least 1, got {apply_every_minutes}"
            )
        if apply_every_minutes > MINUTES_PER_DAY:
            raise ValueError(
                f"apply_every_minutes cannot exceed {MINUTES_PER_DAY}, got {apply_every_minutes}"
            )

        steps_per_day = MINUTES_PER_DAY // apply_every_minutes
        while self._days < max_days:
            for _ in range(steps_per_day):
                self.strategy.apply(self.goods)

            self._days += 1
            self.strategy.increase_day_by_one()

            if self._days >= max_days:
                self.strategy.sell_remaining_goods(self.goods)

            self._history.append(_snapshot(self.goods))
            logger.debug("%s finished day %d with %s %s", self.name, self._days, self.balance(), SETTLEMENT_KIND)

    def history_as_json(self) -> str:
        """History as a JSON list of {kind: quantity} objects, quantities as strings."""
        return json.dumps([
            {str(good.kind): str(good.quantity) for good in goods}
            for goods in self._history
        ])

    def __repr__(self) -> str:
        return f"Trader({self.name!r}, days={self._days}, {self.balance()} {SETTLEMENT_KIND})"
