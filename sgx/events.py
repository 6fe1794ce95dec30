"""
events.py - Market event feed

Markets tell each other about trades and about the passage of time by
pushing Event values to their subscribers. A subscriber is anything with an
on_event(event) method; markets are the usual subscribers.

Core concepts:
1. Event: Immutable record of what happened (kind, good, quantity, price)
2. TradeObserver: The one-method interface subscribers implement
3. subscribe_each_other / wait_one_day: helpers for wiring and driving markets
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Protocol, runtime_checkable

from .core import GoodKind, SETTLEMENT_KIND


class EventKind(Enum):
    BOUGHT = "bought"
    SOLD = "sold"
    LOCKED_BUY = "locked_buy"
    LOCKED_SELL = "locked_sell"
    WAIT = "wait"


@dataclass(frozen=True, slots=True)
class Event:
    """
    Immutable market event.

    Attributes:
        kind: What happened
        good_kind: Good traded (settlement kind for WAIT)
        quantity: Quantity traded (0 for WAIT)
        price: Settlement amount of the trade (0 for WAIT)
    """
    kind: EventKind
    good_kind: GoodKind
    quantity: Decimal
    price: Decimal

    @property
    def is_trade(self) -> bool:
        return self.kind is not EventKind.WAIT

    @classmethod
    def wait(cls) -> Event:
        """The day-tick event."""
        return cls(EventKind.WAIT, SETTLEMENT_KIND, Decimal("0"), Decimal("0"))


@runtime_checkable
class TradeObserver(Protocol):
    """Anything that wants to hear about market events."""

    def on_event(self, event: Event) -> None:
        ...


def subscribe_each_other(*markets) -> None:
    """
    Subscribe every market to every other market.

    A market is never subscribed to itself, and a pair that is already
    subscribed is not subscribed twice.
    """
    for market in markets:
        for other in markets:
            if other is market:
                continue
            if any(sub is other for sub in market.subscribers):
                continue
            market.subscribe(other)


def wait_one_day(*markets) -> None:
    """Deliver one WAIT event to each market."""
    event = Event.wait()
    for market in markets:
        market.on_event(event)
