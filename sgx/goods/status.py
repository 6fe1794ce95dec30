"""
status.py - Reservation records and per-side lock status

A side of a good (buy or sell) is either Available or Locked(GoodLock).
The two cases are separate types, so a locked side always carries its lock
and an available side never does.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Union

from ..core import GoodKind, to_decimal


def generate_token(trader_name: str, kind: GoodKind, locked_quantity: Decimal) -> str:
    """
    Derive the token for a reservation.

    Format: {trader_name}-{kind}-{locked_quantity}
    The same triple always yields the same string.
    """
    return f"{trader_name}-{kind}-{locked_quantity.normalize():f}"


@dataclass(frozen=True, slots=True)
class GoodLock:
    """
    One outstanding reservation.

    Attributes:
        locked_quantity: Quantity of the traded good covered by the lock
        kind: The reserved good
        agreed_price: Settlement amount agreed at lock time (bid or offer)
        token: Capability that authorizes exactly one redemption
        age_in_days: 1 at creation, incremented once per simulated day
    """
    locked_quantity: Decimal
    kind: GoodKind
    agreed_price: Decimal
    token: str
    age_in_days: int = 1

    def __post_init__(self):
        if not isinstance(self.locked_quantity, Decimal):
            object.__setattr__(self, 'locked_quantity', to_decimal(self.locked_quantity))
        if not isinstance(self.agreed_price, Decimal):
            object.__setattr__(self, 'agreed_price', to_decimal(self.agreed_price))
        if not self.token:
            raise ValueError("GoodLock token cannot be empty")
        if self.age_in_days < 1:
            raise ValueError(f"age_in_days must be >= 1, got {self.age_in_days}")

    def aged(self) -> GoodLock:
        """Return a copy of this lock one day older."""
        return replace(self, age_in_days=self.age_in_days + 1)


@dataclass(frozen=True, slots=True)
class Available:
    """The side is free to be locked."""

    def __repr__(self) -> str:
        return "Available"


@dataclass(frozen=True, slots=True)
class Locked:
    """The side is reserved by lock."""
    lock: GoodLock

    def __repr__(self) -> str:
        return f"Locked({self.lock.token}, age={self.lock.age_in_days})"


GoodStatus = Union[Available, Locked]

AVAILABLE = Available()
