"""
storage.py - Market inventory

GoodStorage keeps the market's (Good, GoodMetadata) pairs, one per kind,
and answers lookups by kind or by live token. It only does bookkeeping;
pricing and validation live in the market.
"""

from __future__ import annotations
from decimal import Decimal
from typing import Iterator, List, Optional

from ..core import (
    SETTLEMENT_KIND, Good, GoodKind, GoodLabel, InvariantViolation,
)
from .factory import GoodWithMeta
from .metadata import GoodMetadata, Side


class GoodStorage:
    """
    Ordered collection of (Good, GoodMetadata) pairs keyed by kind.

    The set of kinds is fixed at construction and must contain every
    GoodKind exactly once.
    """

    def __init__(self, goods: List[GoodWithMeta]):
        kinds = [good.kind for good, _ in goods]
        if sorted(kinds, key=lambda k: k.value) != sorted(GoodKind, key=lambda k: k.value):
            raise InvariantViolation(
                f"Storage needs exactly one entry per kind, got {[str(k) for k in kinds]}"
            )
        self._goods: List[GoodWithMeta] = list(goods)

    def __len__(self) -> int:
        return len(self._goods)

    def __iter__(self) -> Iterator[GoodWithMeta]:
        return iter(self._goods)

    # ========================================================================
    # LOOKUP
    # ========================================================================

    def get(self, kind: GoodKind) -> GoodWithMeta:
        """
        Return the pair for kind.

        Raises:
            InvariantViolation: If kind is missing (construction guarantees it is not)
        """
        for entry in self._goods:
            if entry[0].kind == kind:
                return entry
        raise InvariantViolation(f"Good {kind} not found in storage")

    def settlement(self) -> GoodWithMeta:
        """Return the settlement good's pair."""
        return self.get(SETTLEMENT_KIND)

    def find_by_token(self, side: Side, token: str) -> Optional[GoodWithMeta]:
        """Return the pair whose lock on side carries token, if any."""
        for good, meta in self._goods:
            lock = meta.get_lock(side)
            if lock is not None and lock.token == token:
                return good, meta
        return None

    def has_expired_token(self, side: Side, token: str) -> bool:
        """True if any good has retired token on side."""
        return any(meta.has_expired_token(side, token) for _, meta in self._goods)

    def lock_count(self, side: Side) -> int:
        """Number of goods currently locked on side."""
        return sum(1 for _, meta in self._goods if meta.is_locked(side))

    @property
    def buy_lock_count(self) -> int:
        return self.lock_count(Side.BUY)

    @property
    def sell_lock_count(self) -> int:
        return self.lock_count(Side.SELL)

    def labels(self) -> List[GoodLabel]:
        """Snapshot of every holding with its current rates."""
        return [
            GoodLabel(
                kind=good.kind,
                quantity=good.quantity,
                exchange_rate_buy=meta.base_buy_price,
                exchange_rate_sell=meta.base_sell_price,
            )
            for good, meta in self._goods
        ]

    def quantity(self, kind: GoodKind) -> Decimal:
        return self.get(kind)[0].quantity

    def metadata(self, kind: GoodKind) -> GoodMetadata:
        return self.get(kind)[1]

    def good(self, kind: GoodKind) -> Good:
        return self.get(kind)[0]
