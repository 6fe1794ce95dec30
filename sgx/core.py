"""
Core types for the SGX market engine.

This module provides the foundational data structures shared by every other module:
1. Decimal context and constants (settlement kind, default rates, capital)
2. GoodKind enumeration and the mutable Good parcel
3. GoodLabel: read-only snapshot of a market holding
4. MarketConfig: immutable pricing and reservation parameters
5. Exceptions: MarketError and the per-operation error taxonomies

Quantities and prices are Decimal everywhere. Public entry points accept
int, float, str or Decimal and normalise through to_decimal().
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_EVEN, getcontext
from enum import Enum
from typing import Any


# ============================================================================
# DECIMAL CONTEXT CONFIGURATION
# ============================================================================
#
# Prices are products and quotients of rates and quantities; the context is
# configured once at import time so every module computes with the same
# precision and rounding.
#
_SGX_DECIMAL_CONTEXT = getcontext()
_SGX_DECIMAL_CONTEXT.prec = 50
_SGX_DECIMAL_CONTEXT.rounding = ROUND_HALF_EVEN


# ============================================================================
# GOOD KINDS
# ============================================================================

class GoodKind(Enum):
    """
    The four tradable goods. EUR is the settlement currency.
    """
    EUR = "EUR"
    USD = "USD"
    YEN = "YEN"
    YUAN = "YUAN"

    def __str__(self) -> str:
        return self.value


# ============================================================================
# CONSTANTS
# ============================================================================

# Every trade clears through this kind.
SETTLEMENT_KIND = GoodKind.EUR

# Exchange rates against the settlement currency used at market creation.
DEFAULT_EXCHANGE_RATES = {
    GoodKind.EUR: Decimal("1"),
    GoodKind.USD: Decimal("1.0"),
    GoodKind.YEN: Decimal("142.73"),
    GoodKind.YUAN: Decimal("7.09"),
}

# Settlement budget partitioned across goods by SGX.new_randomized().
STARTING_CAPITAL = Decimal("1000000")

DEFAULT_MARKET_NAME = "SGX"


def to_decimal(value: Any) -> Decimal:
    """
    Convert a numeric input to Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1"), not its binary
    expansion.

    Raises:
        ValueError: If the value is not numeric or not finite
    """
    if isinstance(value, bool):
        raise ValueError(f"Expected a number, got {value!r}")
    if not isinstance(value, Decimal):
        try:
            value = Decimal(str(value))
        except ArithmeticError:
            raise ValueError(f"Expected a number, got {value!r}") from None
    if value.is_nan() or value.is_infinite():
        raise ValueError(f"Value must be finite, got {value}")
    return value


# ============================================================================
# EXCEPTIONS
# ============================================================================

class MarketError(Exception):
    """Base exception for every recoverable market error."""
    pass


class InvariantViolation(Exception):
    """
    Raised when the market's internal state contradicts itself.

    Not a MarketError: callers are not expected to catch it. It indicates a
    bug in the engine, not a mistake by the trader.
    """
    pass


class QuoteError(MarketError):
    """Raised by quote_buy() / quote_sell()."""
    pass


class LockError(MarketError):
    """Raised by lock_buy() / lock_sell()."""
    pass


class RedeemError(MarketError):
    """Raised by buy() / sell()."""
    pass


class GoodError(MarketError):
    """Raised by Good parcel operations."""
    pass


class NonPositiveQuantity(QuoteError, LockError):
    """The requested quantity is zero or negative."""

    def __init__(self, quantity: Decimal):
        self.quantity = quantity
        super().__init__(f"Quantity must be positive, got {quantity}")


class InsufficientQuantity(QuoteError, LockError):
    """The market does not hold enough of the good to sell the requested quantity."""

    def __init__(self, kind: GoodKind, requested: Decimal, available: Decimal):
        self.kind = kind
        self.requested = requested
        self.available = available
        super().__init__(
            f"Requested {requested} {kind}, market holds {available}"
        )


class GoodAlreadyLocked(LockError):
    """The side of the good is already reserved by another token."""

    def __init__(self, token: str):
        self.token = token
        super().__init__(f"Good already locked by token {token}")


class MaxLocksReached(LockError):
    """Locking another good would leave fewer than the required goods unlocked."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"At most {limit} goods can be locked per side")


class NonPositiveBid(LockError):
    def __init__(self, bid: Decimal):
        self.bid = bid
        super().__init__(f"Bid must be positive, got {bid}")


class BidTooLow(LockError):
    def __init__(
        self,
        kind: GoodKind,
        quantity: Decimal,
        bid: Decimal,
        lowest_acceptable_bid: Decimal,
    ):
        self.kind = kind
        self.quantity = quantity
        self.bid = bid
        self.lowest_acceptable_bid = lowest_acceptable_bid
        super().__init__(
            f"Bid {bid} for {quantity} {kind} is below {lowest_acceptable_bid}"
        )


class NonPositiveOffer(LockError):
    def __init__(self, offer: Decimal):
        self.offer = offer
        super().__init__(f"Offer must be positive, got {offer}")


class OfferTooHigh(LockError):
    def __init__(
        self,
        kind: GoodKind,
        quantity: Decimal,
        offer: Decimal,
        highest_acceptable_offer: Decimal,
    ):
        self.kind = kind
        self.quantity = quantity
        self.offer = offer
        self.highest_acceptable_offer = highest_acceptable_offer
        super().__init__(
            f"Offer {offer} for {quantity} {kind} is above {highest_acceptable_offer}"
        )


class InsufficientSettlementBalance(LockError, RedeemError):
    """The market cannot pay the requested settlement amount."""

    def __init__(self, available: Decimal, requested: Decimal):
        self.available = available
        self.requested = requested
        super().__init__(
            f"Market holds {available} {SETTLEMENT_KIND}, {requested} required"
        )


class UnrecognizedToken(RedeemError):
    """The token was never issued by this market."""

    def __init__(self, token: str):
        self.token = token
        super().__init__(f"Unrecognized token {token}")


class ExpiredToken(RedeemError):
    """The token was issued but has been redeemed or timed out."""

    def __init__(self, token: str):
        self.token = token
        super().__init__(f"Token {token} has expired")


class WrongGoodKind(RedeemError):
    def __init__(self, given: GoodKind, expected: GoodKind):
        self.given = given
        self.expected = expected
        super().__init__(f"Expected a parcel of {expected}, got {given}")


class InsufficientGoodQuantity(RedeemError):
    """The parcel handed over is smaller than what was agreed at lock time."""

    def __init__(self, contained: Decimal, pre_agreed: Decimal):
        self.contained = contained
        self.pre_agreed = pre_agreed
        super().__init__(f"Parcel holds {contained}, {pre_agreed} agreed")


class GoodKindNotDefault(RedeemError):
    """Payment must be made in the settlement kind."""

    def __init__(self, given: GoodKind):
        self.given = given
        super().__init__(f"Payment must be in {SETTLEMENT_KIND}, got {given}")


class SplitError(GoodError):
    def __init__(self, kind: GoodKind, requested: Decimal, available: Decimal):
        self.kind = kind
        self.requested = requested
        self.available = available
        super().__init__(f"Cannot split {requested} from {available} {kind}")


class MergeError(GoodError):
    def __init__(self, kind: GoodKind, other: GoodKind):
        self.kind = kind
        self.other = other
        super().__init__(f"Cannot merge {other} into {kind}")


# ============================================================================
# GOOD PARCEL
# ============================================================================

class Good:
    """
    A quantity of a single good kind.

    Parcels are mutable: split() moves quantity out into a new parcel and
    merge() absorbs another parcel of the same kind. The total quantity of a
    kind is conserved by both operations.

    Example:
        cash = Good(GoodKind.EUR, 500)
        payment = cash.split(120)    # cash now holds 380
        wallet.merge(payment)        # payment now holds 0
    """

    __slots__ = ("kind", "quantity")

    def __init__(self, kind: GoodKind, quantity: Any = 0):
        quantity = to_decimal(quantity)
        if quantity < 0:
            raise ValueError(f"Good quantity cannot be negative, got {quantity}")
        self.kind = kind
        self.quantity = quantity

    def split(self, quantity: Any) -> Good:
        """
        Remove quantity from this parcel and return it as a new parcel.

        Raises:
            SplitError: If quantity is not positive or exceeds this parcel
        """
        quantity = to_decimal(quantity)
        if quantity <= 0 or quantity > self.quantity:
            raise SplitError(self.kind, quantity, self.quantity)
        self.quantity -= quantity
        return Good(self.kind, quantity)

    def merge(self, other: Good) -> None:
        """
        Move the whole of other into this parcel.

        Raises:
            MergeError: If the kinds differ
        """
        if other.kind != self.kind:
            raise MergeError(self.kind, other.kind)
        self.quantity += other.quantity
        other.quantity = Decimal("0")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Good):
            return NotImplemented
        return self.kind == other.kind and self.quantity == other.quantity

    def __repr__(self) -> str:
        return f"Good({self.quantity} {self.kind})"


@dataclass(frozen=True, slots=True)
class GoodLabel:
    """
    Snapshot of one market holding, as returned by SGX.current_holdings().

    Attributes:
        kind: The good
        quantity: Quantity the market holds
        exchange_rate_buy: Base buy rate at snapshot time
        exchange_rate_sell: Base sell rate at snapshot time
    """
    kind: GoodKind
    quantity: Decimal
    exchange_rate_buy: Decimal
    exchange_rate_sell: Decimal


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass(frozen=True, slots=True)
class MarketConfig:
    """
    Immutable pricing and reservation parameters for one market.

    Attributes:
        buy_margin: Fraction added to the exchange price of quote_buy()
        sell_margin: Fraction added to the exchange price of quote_sell()
        buy_decay: Daily factor applied to non-settlement buy rates
        sell_decay: Daily factor applied to non-settlement sell rates
        event_reaction: Factor applied to the opposite-side rate on a trade event
        max_lock_age_days: Age at which a lock is released on the next day tick
        min_unlocked_goods: Goods per side that must always stay unlocked
    """
    buy_margin: Decimal = Decimal("0.05")
    sell_margin: Decimal = Decimal("0.15")
    buy_decay: Decimal = Decimal("0.9")
    sell_decay: Decimal = Decimal("0.95")
    event_reaction: Decimal = Decimal("1.05")
    max_lock_age_days: int = 15
    min_unlocked_goods: int = 2

    def __post_init__(self):
        for name in ("buy_margin", "sell_margin", "buy_decay", "sell_decay", "event_reaction"):
            value = getattr(self, name)
            if not isinstance(value, Decimal):
                object.__setattr__(self, name, to_decimal(value))

        if self.buy_margin < 0 or self.sell_margin < 0:
            raise ValueError("Margins cannot be negative")
        if not (0 < self.buy_decay < self.sell_decay <= 1):
            raise ValueError(
                f"Decays must satisfy 0 < buy_decay < sell_decay <= 1, "
                f"got {self.buy_decay} and {self.sell_decay}"
            )
        if self.event_reaction < 1:
            raise ValueError(f"event_reaction must be >= 1, got {self.event_reaction}")
        if self.max_lock_age_days < 1:
            raise ValueError(f"max_lock_age_days must be >= 1, got {self.max_lock_age_days}")
        if self.min_unlocked_goods < 1:
            raise ValueError(f"min_unlocked_goods must be >= 1, got {self.min_unlocked_goods}")
