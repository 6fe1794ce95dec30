"""
stingy.py - A cautious reference strategy

Each step the stingy trader spends a small fraction of its settlement
balance on the cheapest deal it can find across all markets, then sells a
small fraction of one holding to the market that pays best. Deals are
preferred when their rate beats the recent average rate of that good.

All decisions are logged at INFO; rejected trades at WARNING.
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass
from decimal import Decimal
from typing import Deque, Dict, List, Optional
import logging

from numpy.random import Generator, default_rng

from ..core import SETTLEMENT_KIND, Good, GoodKind, MarketError, QuoteError
from ..market import SGX
from .strategy import Strategy, find_good

logger = logging.getLogger(__name__)

# Fraction of the settlement balance spent per step.
PERCENTAGE_BUY = Decimal("0.01")
# Fraction of one holding sold per step.
PERCENTAGE_SELL = Decimal("0.01")
PERCENTAGE_SELL_ALL_GOODS = Decimal("1")

# Observed rates kept per good and market.
RATE_HISTORY_PER_MARKET = 10
LIQUIDATION_ATTEMPTS = 3


@dataclass(frozen=True, slots=True)
class Deal:
    """A quote the strategy may act on."""
    market: SGX
    good_kind: GoodKind
    quantity: Decimal
    price: Decimal

    @property
    def exchange_rate(self) -> Decimal:
        return self.price / self.quantity


class StingyStrategy(Strategy):
    """
    Spend little, sell little.

    Attributes:
        buy_history: Deals bought, oldest first
        sell_history: Deals sold, oldest first
    """

    def __init__(self, markets: List[SGX], trader_name: str, rng: Optional[Generator] = None):
        super().__init__(markets, trader_name)
        self.rng = rng if rng is not None else default_rng()
        maxlen = RATE_HISTORY_PER_MARKET * len(self.markets)
        foreign = [kind for kind in GoodKind if kind != SETTLEMENT_KIND]
        self._buy_rates: Dict[GoodKind, Deque[Decimal]] = {k: deque(maxlen=maxlen) for k in foreign}
        self._sell_rates: Dict[GoodKind, Deque[Decimal]] = {k: deque(maxlen=maxlen) for k in foreign}
        self.buy_history: List[Deal] = []
        self.sell_history: List[Deal] = []

    def _visit_order(self) -> List[SGX]:
        """Markets in a random order, so ties do not always favour the first market."""
        return [self.markets[i] for i in self.rng.permutation(len(self.markets))]

    # ========================================================================
    # RATE HISTORY
    # ========================================================================

    def record_rates(self) -> None:
        """Append every market's current non-settlement rates to the history."""
        for market in self.markets:
            for label in market.goods():
                if label.kind == SETTLEMENT_KIND:
                    continue
                self._buy_rates[label.kind].append(label.exchange_rate_buy)
                self._sell_rates[label.kind].append(label.exchange_rate_sell)

    @staticmethod
    def _average(rates: Deque[Decimal]) -> Optional[Decimal]:
        if not rates:
            return None
        return sum(rates, Decimal("0")) / len(rates)

    def average_buy_rate(self, kind: GoodKind) -> Optional[Decimal]:
        return self._average(self._buy_rates[kind])

    def average_sell_rate(self, kind: GoodKind) -> Optional[Decimal]:
        return self._average(self._sell_rates[kind])

    # ========================================================================
    # BUYING
    # ========================================================================

    def find_buy_deals(self, balance: Decimal, percentage: Decimal) -> List[Deal]:
        """
        Quote every foreign good on every market for a spend of balance * percentage.

        Deals costing more than balance are dropped.
        """
        if not 0 < percentage <= 1:
            raise ValueError(f"percentage must be in (0, 1], got {percentage}")
        spend = balance * percentage
        deals = []
        for market in self._visit_order():
            for label in market.goods():
                if label.kind == SETTLEMENT_KIND:
                    continue
                quantity = spend / label.exchange_rate_buy
                try:
                    price = market.quote_buy(label.kind, quantity)
                except QuoteError:
                    continue
                if 0 < price <= balance:
                    deals.append(Deal(market, label.kind, quantity, price))
        return deals

    def best_buy_deal(self, deals: List[Deal]) -> Optional[Deal]:
        """Cheapest deal, preferring those at or below the average buy rate."""
        good_deals = []
        for deal in deals:
            avg = self.average_buy_rate(deal.good_kind)
            if avg is not None and deal.exchange_rate <= avg:
                good_deals.append(deal)
        candidates = good_deals or deals
        if not candidates:
            return None
        return min(candidates, key=lambda deal: deal.exchange_rate)

    def buy_deal(self, goods: List[Good], percentage: Decimal) -> Optional[Deal]:
        """Lock and buy the best deal with the trader's settlement parcel."""
        cash = find_good(goods, SETTLEMENT_KIND)
        deal = self.best_buy_deal(self.find_buy_deals(cash.quantity, percentage))
        if deal is None:
            logger.info("%s found nothing to buy", self.trader_name)
            return None

        logger.info(
            "%s buying %s %s for %s on %s",
            self.trader_name, deal.quantity, deal.good_kind, deal.price, deal.market.name,
        )
        try:
            token = deal.market.lock_buy(deal.good_kind, deal.quantity, deal.price, self.trader_name)
            bought = deal.market.buy(token, cash)
        except MarketError as e:
            logger.warning("%s could not buy %s: %s", self.trader_name, deal.good_kind, e)
            return None

        find_good(goods, bought.kind).merge(bought)
        self.buy_history.append(deal)
        return deal

    # ========================================================================
    # SELLING
    # ========================================================================

    def find_sell_deals(self, goods: List[Good], percentage: Decimal) -> List[Deal]:
        """
        Quote a sale of percentage of each foreign holding on every market.

        A market is skipped when it holds less of the good than would be
        sold to it, or cannot pay the quoted price.
        """
        if not 0 < percentage <= 1:
            raise ValueError(f"percentage must be in (0, 1], got {percentage}")
        deals = []
        for market in self._visit_order():
            stock = {label.kind: label.quantity for label in market.goods()}
            for good in goods:
                if good.kind == SETTLEMENT_KIND or good.quantity <= 0:
                    continue
                quantity = good.quantity * percentage
                if stock[good.kind] < quantity:
                    continue
                try:
                    price = market.quote_sell(good.kind, quantity)
                except QuoteError:
                    continue
                if 0 < price <= market.budget():
                    deals.append(Deal(market, good.kind, quantity, price))
        return deals

    def best_sell_deal(self, deals: List[Deal]) -> Optional[Deal]:
        """Best-paying deal, preferring those above the average sell rate."""
        good_deals = []
        for deal in deals:
            avg = self.average_sell_rate(deal.good_kind)
            if avg is not None and deal.exchange_rate > avg:
                good_deals.append(deal)
        candidates = good_deals or deals
        if not candidates:
            return None
        return max(candidates, key=lambda deal: deal.exchange_rate)

    def sell_deal(self, goods: List[Good], percentage: Decimal) -> Optional[Deal]:
        """Lock and sell the best deal, merging the payment into the settlement parcel."""
        deal = self.best_sell_deal(self.find_sell_deals(goods, percentage))
        if deal is None:
            logger.info("%s found nothing to sell", self.trader_name)
            return None

        logger.info(
            "%s selling %s %s for %s on %s",
            self.trader_name, deal.quantity, deal.good_kind, deal.price, deal.market.name,
        )
        try:
            token = deal.market.lock_sell(deal.good_kind, deal.quantity, deal.price, self.trader_name)
            payment = deal.market.sell(token, find_good(goods, deal.good_kind))
        except MarketError as e:
            logger.warning("%s could not sell %s: %s", self.trader_name, deal.good_kind, e)
            return None

        find_good(goods, SETTLEMENT_KIND).merge(payment)
        self.sell_history.append(deal)
        return deal

    # ========================================================================
    # STRATEGY INTERFACE
    # ========================================================================

    def apply(self, goods: List[Good]) -> None:
        self.buy_deal(goods, PERCENTAGE_BUY)
        self.sell_deal(goods, PERCENTAGE_SELL)
        self.record_rates()

    def sell_remaining_goods(self, goods: List[Good]) -> None:
        """Offer every remaining holding in full, a few times over."""
        for _ in range(LIQUIDATION_ATTEMPTS):
            if all(g.quantity == 0 for g in goods if g.kind != SETTLEMENT_KIND):
                break
            self.sell_deal(goods, PERCENTAGE_SELL_ALL_GOODS)
        logger.info(
            "%s finished with %s",
            self.trader_name, ", ".join(f"{g.quantity} {g.kind}" for g in goods),
        )
