"""
sgx - Currency Exchange Market Simulator

A market engine holding four goods (EUR settlement, USD, YEN, YUAN) with a
two-phase lock/redeem trading protocol, event-driven price reactions between
markets, and a simple day-by-day trader simulation.

Usage:
    from sgx import SGX, Good, GoodKind

    market = SGX.new_with_quantities(1000, 1000, 1000, 1000, log_path="log_SGX.txt")

    # Quote, reserve, then redeem
    price = market.quote_buy(GoodKind.USD, 100)
    token = market.lock_buy(GoodKind.USD, 100, price, "bob")

    cash = Good(GoodKind.EUR, price)
    usd = market.buy(token, cash)     # usd holds 100 USD, cash is now empty

    # Advance time: locks age, rates decay
    market.on_day_elapsed()
"""

# Core types
from .core import (
    GoodKind,
    Good,
    GoodLabel,
    MarketConfig,
    SETTLEMENT_KIND,
    DEFAULT_EXCHANGE_RATES,
    STARTING_CAPITAL,
    DEFAULT_MARKET_NAME,
    to_decimal,
    MarketError,
    InvariantViolation,
    QuoteError,
    LockError,
    RedeemError,
    GoodError,
    NonPositiveQuantity,
    InsufficientQuantity,
    GoodAlreadyLocked,
    MaxLocksReached,
    NonPositiveBid,
    BidTooLow,
    NonPositiveOffer,
    OfferTooHigh,
    InsufficientSettlementBalance,
    UnrecognizedToken,
    ExpiredToken,
    WrongGoodKind,
    InsufficientGoodQuantity,
    GoodKindNotDefault,
    SplitError,
    MergeError,
)

# Inventory
from .goods import (
    GoodLock,
    GoodStatus,
    Available,
    Locked,
    AVAILABLE,
    generate_token,
    GoodMetadata,
    Side,
    GoodStorage,
    all_with_quantities,
    random_goods,
    random_quantities,
)

# Pricing
from .pricing import (
    compute_buy_price,
    compute_sell_price,
    buy_fluctuation,
    sell_fluctuation,
)

# Events
from .events import (
    Event,
    EventKind,
    TradeObserver,
    subscribe_each_other,
    wait_one_day,
)

# Audit trail
from .audit_log import AuditLog

# Market
from .market import SGX

# Simulation
from .strategies import Strategy, StingyStrategy
from .trader import Trader

__version__ = "0.1.0"

__all__ = [
    # Core
    'GoodKind', 'Good', 'GoodLabel', 'MarketConfig',
    'SETTLEMENT_KIND', 'DEFAULT_EXCHANGE_RATES', 'STARTING_CAPITAL', 'DEFAULT_MARKET_NAME',
    'to_decimal',
    # Errors
    'MarketError', 'InvariantViolation',
    'QuoteError', 'LockError', 'RedeemError', 'GoodError',
    'NonPositiveQuantity', 'InsufficientQuantity',
    'GoodAlreadyLocked', 'MaxLocksReached',
    'NonPositiveBid', 'BidTooLow', 'NonPositiveOffer', 'OfferTooHigh',
    'InsufficientSettlementBalance',
    'UnrecognizedToken', 'ExpiredToken', 'WrongGoodKind',
    'InsufficientGoodQuantity', 'GoodKindNotDefault',
    'SplitError', 'MergeError',
    # Inventory
    'GoodLock', 'GoodStatus', 'Available', 'Locked', 'AVAILABLE', 'generate_token',
    'GoodMetadata', 'Side', 'GoodStorage',
    'all_with_quantities', 'random_goods', 'random_quantities',
    # Pricing
    'compute_buy_price', 'compute_sell_price', 'buy_fluctuation', 'sell_fluctuation',
    # Events
    'Event', 'EventKind', 'TradeObserver', 'subscribe_each_other', 'wait_one_day',
    # Audit
    'AuditLog',
    # Market
    'SGX',
    # Simulation
    'Strategy', 'StingyStrategy', 'Trader',
]
