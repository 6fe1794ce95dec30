"""
pricing.py - Pure quote functions for the SGX market

Quotes are computed from a good's current stock and its ledger entry's base
rates. Nothing here mutates state; the market applies the fluctuation
factors after a trade.

Functions:
- compute_buy_price: price a trader pays to buy quantity of a good
- compute_sell_price: price the market pays to receive quantity of a good
- buy_fluctuation / sell_fluctuation: multiplicative rate adjustments after a trade

Example:
    price = compute_buy_price(usd, usd_meta, Decimal("100"), MarketConfig())
"""

from __future__ import annotations
from decimal import Decimal
from typing import Any

from .core import (
    Good, MarketConfig,
    NonPositiveQuantity, InsufficientQuantity,
    to_decimal,
)
from .goods.metadata import GoodMetadata


def _positive_quantity(quantity: Any) -> Decimal:
    quantity = to_decimal(quantity)
    if quantity <= 0:
        raise NonPositiveQuantity(quantity)
    return quantity


def compute_buy_price(
    good: Good,
    meta: GoodMetadata,
    quantity: Any,
    config: MarketConfig,
) -> Decimal:
    """
    Price of buying quantity of good from the market.

    exchange_price = quantity * base_buy_price
    demand_factor = available / (available - quantity)
    price = exchange_price * (1 + buy_margin) * demand_factor

    The demand factor grows without bound as the trade approaches the whole
    stock, so quantities that would empty the good are rejected.

    Raises:
        NonPositiveQuantity: If quantity <= 0
        InsufficientQuantity: If quantity >= available
    """
    quantity = _positive_quantity(quantity)
    available = good.quantity
    if quantity >= available:
        raise InsufficientQuantity(good.kind, quantity, available)

    exchange_price = quantity * meta.base_buy_price
    margin = exchange_price * config.buy_margin
    demand_factor = available / (available - quantity)
    return (exchange_price + margin) * demand_factor


def compute_sell_price(
    good: Good,
    meta: GoodMetadata,
    quantity: Any,
    config: MarketConfig,
) -> Decimal:
    """
    Price the market pays for receiving quantity of good.

    exchange_price = quantity * base_sell_price
    demand_factor = available / (available + quantity)
    price = exchange_price * (1 + sell_margin) * demand_factor

    Supply is not checked: the market always accepts inventory.

    Raises:
        NonPositiveQuantity: If quantity <= 0
    """
    quantity = _positive_quantity(quantity)
    available = good.quantity

    exchange_price = quantity * meta.base_sell_price
    margin = exchange_price * config.sell_margin
    demand_factor = available / (available + quantity)
    return (exchange_price + margin) * demand_factor


def buy_fluctuation(available: Decimal, quantity: Decimal) -> Decimal:
    """Factor applied to the buy rate when quantity leaves a stock of available."""
    return available / (available - quantity)


def sell_fluctuation(available: Decimal, quantity: Decimal) -> Decimal:
    """Factor applied to the sell rate when quantity joins a stock of available."""
    return available / (available + quantity)
