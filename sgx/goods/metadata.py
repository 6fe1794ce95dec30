"""
metadata.py - Per-good ledger entry

GoodMetadata holds the mutable state the market keeps for one good:
base rates, one lock status per side, and the tokens each side has retired.
"""

from __future__ import annotations
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from ..core import GoodKind, InvariantViolation, to_decimal
from .status import AVAILABLE, GoodLock, GoodStatus, Locked, generate_token


class Side(Enum):
    """Which half of a good a reservation applies to."""
    BUY = "buy"
    SELL = "sell"


class GoodMetadata:
    """
    Ledger entry for one good.

    Rates are reciprocal at creation: base_buy_price = exchange_rate and
    base_sell_price = 1 / exchange_rate.

    Invariants:
        - Each side is Locked by at most one token at a time.
        - A retired token never becomes live again. Retired tokens are kept
          in order (for inspection) and in a set (for lookups).
    """

    def __init__(self, exchange_rate: Any):
        exchange_rate = to_decimal(exchange_rate)
        if exchange_rate <= 0:
            raise ValueError(f"exchange_rate must be positive, got {exchange_rate}")
        self.base_buy_price: Decimal = exchange_rate
        self.base_sell_price: Decimal = Decimal("1") / exchange_rate
        self._status: Dict[Side, GoodStatus] = {Side.BUY: AVAILABLE, Side.SELL: AVAILABLE}
        self._expired: Dict[Side, List[str]] = {Side.BUY: [], Side.SELL: []}
        self._expired_set: Dict[Side, Set[str]] = {Side.BUY: set(), Side.SELL: set()}

    # ========================================================================
    # STATUS
    # ========================================================================

    @property
    def buy_status(self) -> GoodStatus:
        return self._status[Side.BUY]

    @property
    def sell_status(self) -> GoodStatus:
        return self._status[Side.SELL]

    @property
    def expired_buy_tokens(self) -> List[str]:
        return list(self._expired[Side.BUY])

    @property
    def expired_sell_tokens(self) -> List[str]:
        return list(self._expired[Side.SELL])

    def is_locked(self, side: Side) -> bool:
        return isinstance(self._status[side], Locked)

    def get_lock(self, side: Side) -> Optional[GoodLock]:
        """Return the lock on side, or None if the side is available."""
        status = self._status[side]
        if isinstance(status, Locked):
            return status.lock
        return None

    def has_expired_token(self, side: Side, token: str) -> bool:
        return token in self._expired_set[side]

    # ========================================================================
    # LOCKING (Mutating)
    # ========================================================================

    def _fresh_token(self, side: Side, base: str) -> str:
        """
        Return base, or base with the first '#n' suffix not yet retired.

        Repeating a (trader, kind, quantity) triple after its first token
        expired would otherwise revive that token.
        """
        expired = self._expired_set[side]
        if base not in expired:
            return base
        n = 2
        while f"{base}#{n}" in expired:
            n += 1
        return f"{base}#{n}"

    def lock(
        self,
        side: Side,
        locked_quantity: Decimal,
        kind: GoodKind,
        agreed_price: Decimal,
        trader_name: str,
    ) -> str:
        """
        Reserve side and return the new token.

        Raises:
            InvariantViolation: If side is already locked (callers check first)
        """
        if self.is_locked(side):
            raise InvariantViolation(f"{kind} is already locked for {side.value}")
        token = self._fresh_token(side, generate_token(trader_name, kind, locked_quantity))
        self._status[side] = Locked(GoodLock(
            locked_quantity=locked_quantity,
            kind=kind,
            agreed_price=agreed_price,
            token=token,
        ))
        return token

    def unlock(self, side: Side) -> str:
        """
        Release the lock on side and retire its token.

        Returns:
            The retired token

        Raises:
            InvariantViolation: If side is not locked
        """
        lock = self.get_lock(side)
        if lock is None:
            raise InvariantViolation(f"Cannot unlock {side.value}: no lock present")
        self._expired[side].append(lock.token)
        self._expired_set[side].add(lock.token)
        self._status[side] = AVAILABLE
        return lock.token

    def age_locks(self, max_age_days: int) -> List[str]:
        """
        Advance every lock by one day.

        A lock younger than max_age_days gets one day older; a lock that has
        already reached max_age_days is released.

        Returns:
            Tokens released by this call
        """
        released = []
        for side in (Side.SELL, Side.BUY):
            lock = self.get_lock(side)
            if lock is None:
                continue
            if lock.age_in_days < max_age_days:
                self._status[side] = Locked(lock.aged())
            else:
                released.append(self.unlock(side))
        return released

    # ========================================================================
    # PRICE FLUCTUATION
    # ========================================================================

    def fluctuate_buy_price(self, factor: Decimal) -> None:
        self.base_buy_price *= factor

    def fluctuate_sell_price(self, factor: Decimal) -> None:
        self.base_sell_price *= factor

    def __repr__(self) -> str:
        return (
            f"GoodMetadata(buy={self.base_buy_price:.6f}, sell={self.base_sell_price:.6f}, "
            f"buy_status={self.buy_status!r}, sell_status={self.sell_status!r})"
        )
