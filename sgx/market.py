"""
market.py - The SGX market engine

SGX is the stateful service of the package. It owns the inventory, answers
quotes, runs the two-phase lock/redeem protocol, and reacts to events from
subscribed markets and to day ticks.

Key responsibilities:
    - Quotes are pure (see pricing.py); only lock/buy/sell and events mutate state
    - Every lock and redemption attempt, and every public quote failure,
      is written to the market's audit file before the call returns
    - Expected rejections raise a MarketError subclass; a rejected quote or lock
      leaves state untouched, a rejected redemption only releases its lock
    - Successful trades are pushed to every subscriber as an Event
"""

from __future__ import annotations
from decimal import Decimal
from pathlib import Path
from typing import Any, List, Optional, Union
import logging

from numpy.random import Generator, default_rng

from .core import (
    # Types
    Good, GoodKind, GoodLabel, MarketConfig,
    # Constants
    DEFAULT_MARKET_NAME, SETTLEMENT_KIND, STARTING_CAPITAL,
    # Exceptions
    QuoteError, LockError, RedeemError, GoodError,
    NonPositiveQuantity, GoodAlreadyLocked, MaxLocksReached,
    NonPositiveBid, BidTooLow, NonPositiveOffer, OfferTooHigh,
    InsufficientSettlementBalance, UnrecognizedToken, ExpiredToken,
    WrongGoodKind, InsufficientGoodQuantity, GoodKindNotDefault,
    # Helpers
    to_decimal,
)
from .goods import (
    GoodLock, GoodStorage, GoodWithMeta, Side,
    all_with_quantities, random_goods,
)
from .pricing import (
    compute_buy_price, compute_sell_price, buy_fluctuation, sell_fluctuation,
)
from .events import Event, EventKind, TradeObserver
from .audit_log import AuditLog

logger = logging.getLogger(__name__)


class SGX:
    """
    A market holding one parcel of each GoodKind.

    Trading is two-phase: lock_buy/lock_sell reserve a quantity at an agreed
    price and return a token; buy/sell redeem the token. A side of a good
    carries at most one lock, and at least config.min_unlocked_goods goods
    per side always stay unlocked.

    Thread Safety:
        Not thread-safe. Markets are driven by one caller at a time.

    Example:
        market = SGX.new_with_quantities(1000, 1000, 1000, 1000)
        price = market.quote_buy(GoodKind.USD, 100)
        token = market.lock_buy(GoodKind.USD, 100, price, "bob")
        usd = market.buy(token, Good(GoodKind.EUR, price))
    """

    def __init__(
        self,
        goods: List[GoodWithMeta],
        name: str = DEFAULT_MARKET_NAME,
        log_path: Optional[Union[str, Path]] = None,
        config: Optional[MarketConfig] = None,
    ):
        """
        Create a market and write its opening inventory to the audit file.

        Args:
            goods: One (Good, GoodMetadata) pair per GoodKind
            name: Market name stamped on every audit line
            log_path: Audit file (default: log_<name>.txt in the working directory)
            config: Pricing and reservation parameters (default: MarketConfig())
        """
        self._name = name
        self.config = config or MarketConfig()
        self.storage = GoodStorage(goods)
        self._subscribers: List[TradeObserver] = []
        self.audit = AuditLog(log_path or f"log_{name}.txt", name)
        self.audit.log_market_init(self.storage.labels())

    @classmethod
    def new_with_quantities(
        cls,
        eur: Any,
        usd: Any,
        yen: Any,
        yuan: Any,
        name: str = DEFAULT_MARKET_NAME,
        log_path: Optional[Union[str, Path]] = None,
        config: Optional[MarketConfig] = None,
    ) -> SGX:
        """Create a market holding the given quantities at the default exchange rates."""
        return cls(all_with_quantities(eur, usd, yen, yuan), name, log_path, config)

    @classmethod
    def new_randomized(
        cls,
        total: Any = STARTING_CAPITAL,
        rng: Optional[Generator] = None,
        seed: Optional[int] = None,
        name: str = DEFAULT_MARKET_NAME,
        log_path: Optional[Union[str, Path]] = None,
        config: Optional[MarketConfig] = None,
    ) -> SGX:
        """
        Create a market whose four quantities sum exactly to total.

        Args:
            total: Budget to partition across the goods
            rng: numpy Generator to draw from (takes precedence over seed)
            seed: Seed for a fresh Generator, for reproducible markets
        """
        rng = rng if rng is not None else default_rng(seed)
        return cls(random_goods(total, rng), name, log_path, config)

    # ========================================================================
    # READ-ONLY VIEW
    # ========================================================================

    @property
    def name(self) -> str:
        return self._name

    @property
    def subscribers(self) -> List[TradeObserver]:
        return list(self._subscribers)

    def current_holdings(self) -> List[GoodLabel]:
        """Snapshot of every good with its quantity and current rates."""
        return self.storage.labels()

    def goods(self) -> List[GoodLabel]:
        return self.current_holdings()

    def settlement_balance(self) -> Decimal:
        """Quantity of the settlement good the market holds."""
        return self.storage.quantity(SETTLEMENT_KIND)

    def budget(self) -> Decimal:
        return self.settlement_balance()

    def lock_count(self, side: Side) -> int:
        return self.storage.lock_count(side)

    def get_lock(self, kind: GoodKind, side: Side) -> Optional[GoodLock]:
        """Return the outstanding lock on one side of kind, if any."""
        return self.storage.metadata(kind).get_lock(side)

    @property
    def max_locks(self) -> int:
        """Goods per side that may be locked at the same time."""
        return len(self.storage) - self.config.min_unlocked_goods

    # ========================================================================
    # QUOTES
    # ========================================================================

    def quote_buy(self, kind: GoodKind, quantity: Any) -> Decimal:
        """
        Settlement amount a trader must bid to buy quantity of kind.

        Raises:
            NonPositiveQuantity: If quantity <= 0
            InsufficientQuantity: If the market does not hold more than quantity
        """
        quantity = to_decimal(quantity)
        good, meta = self.storage.get(kind)
        try:
            return compute_buy_price(good, meta, quantity, self.config)
        except QuoteError:
            self.audit.log_quote_buy_error(kind, quantity)
            raise

    def quote_sell(self, kind: GoodKind, quantity: Any) -> Decimal:
        """
        Highest settlement amount the market pays for quantity of kind.

        Raises:
            NonPositiveQuantity: If quantity <= 0
        """
        quantity = to_decimal(quantity)
        good, meta = self.storage.get(kind)
        try:
            return compute_sell_price(good, meta, quantity, self.config)
        except QuoteError:
            self.audit.log_quote_sell_error(kind, quantity)
            raise

    # ========================================================================
    # LOCKS (Mutating)
    # ========================================================================

    def _check_lockable(self, side: Side, kind: GoodKind) -> None:
        lock = self.storage.metadata(kind).get_lock(side)
        if lock is not None:
            raise GoodAlreadyLocked(lock.token)
        if self.storage.lock_count(side) >= self.max_locks:
            raise MaxLocksReached(self.max_locks)

    def lock_buy(
        self,
        kind_to_buy: GoodKind,
        quantity_to_buy: Any,
        bid: Any,
        trader_name: str,
    ) -> str:
        """
        Reserve quantity_to_buy of kind_to_buy for trader_name at bid.

        Checks run in order: side already locked, lock limit, quantity,
        bid against quote_buy(). On success the buy rate tightens by
        available / (available - quantity) and a LOCKED_BUY event is sent.

        Returns:
            Token to pass to buy()

        Raises:
            GoodAlreadyLocked, MaxLocksReached, NonPositiveQuantity,
            InsufficientQuantity, NonPositiveBid, BidTooLow
        """
        quantity = to_decimal(quantity_to_buy)
        bid = to_decimal(bid)
        try:
            token = self._lock_buy(kind_to_buy, quantity, bid, trader_name)
        except LockError:
            self.audit.log_lock_buy(trader_name, kind_to_buy, quantity, bid, None)
            raise
        self.audit.log_lock_buy(trader_name, kind_to_buy, quantity, bid, token)
        return token

    def _lock_buy(self, kind: GoodKind, quantity: Decimal, bid: Decimal, trader_name: str) -> str:
        self._check_lockable(Side.BUY, kind)
        good, meta = self.storage.get(kind)
        lowest_acceptable_bid = compute_buy_price(good, meta, quantity, self.config)
        if bid <= 0:
            raise NonPositiveBid(bid)
        if bid < lowest_acceptable_bid:
            raise BidTooLow(kind, quantity, bid, lowest_acceptable_bid)

        token = meta.lock(Side.BUY, quantity, kind, bid, trader_name)
        meta.fluctuate_buy_price(buy_fluctuation(good.quantity, quantity))
        logger.debug("%s: %s locked %s %s for %s (%s)", self._name, trader_name, quantity, kind, bid, token)
        self._notify(Event(EventKind.LOCKED_BUY, kind, quantity, bid))
        return token

    def lock_sell(
        self,
        kind_to_sell: GoodKind,
        quantity_to_sell: Any,
        offer: Any,
        trader_name: str,
    ) -> str:
        """
        Reserve the purchase of quantity_to_sell of kind_to_sell from trader_name.

        Checks run in order: side already locked, lock limit, quantity,
        settlement balance, offer against quote_sell(). On success the sell
        rate drops by available / (available + quantity) and a LOCKED_SELL
        event is sent.

        Returns:
            Token to pass to sell()

        Raises:
            GoodAlreadyLocked, MaxLocksReached, NonPositiveQuantity,
            InsufficientSettlementBalance, NonPositiveOffer, OfferTooHigh
        """
        quantity = to_decimal(quantity_to_sell)
        offer = to_decimal(offer)
        try:
            token = self._lock_sell(kind_to_sell, quantity, offer, trader_name)
        except LockError:
            self.audit.log_lock_sell(trader_name, kind_to_sell, quantity, offer, None)
            raise
        self.audit.log_lock_sell(trader_name, kind_to_sell, quantity, offer, token)
        return token

    def _lock_sell(self, kind: GoodKind, quantity: Decimal, offer: Decimal, trader_name: str) -> str:
        self._check_lockable(Side.SELL, kind)
        if quantity <= 0:
            raise NonPositiveQuantity(quantity)
        balance = self.settlement_balance()
        if offer > balance:
            raise InsufficientSettlementBalance(balance, offer)
        good, meta = self.storage.get(kind)
        highest_acceptable_offer = compute_sell_price(good, meta, quantity, self.config)
        if offer <= 0:
            raise NonPositiveOffer(offer)
        if offer > highest_acceptable_offer:
            raise OfferTooHigh(kind, quantity, offer, highest_acceptable_offer)

        token = meta.lock(Side.SELL, quantity, kind, offer, trader_name)
        meta.fluctuate_sell_price(sell_fluctuation(good.quantity, quantity))
        logger.debug("%s: %s locked sale of %s %s for %s (%s)", self._name, trader_name, quantity, kind, offer, token)
        self._notify(Event(EventKind.LOCKED_SELL, kind, quantity, offer))
        return token

    # ========================================================================
    # REDEMPTION (Mutating)
    # ========================================================================

    def _find_lock(self, side: Side, token: str) -> GoodWithMeta:
        entry = self.storage.find_by_token(side, token)
        if entry is None:
            if self.storage.has_expired_token(side, token):
                raise ExpiredToken(token)
            raise UnrecognizedToken(token)
        return entry

    def buy(self, token: str, cash: Good) -> Good:
        """
        Redeem a buy lock.

        agreed_price is split out of cash and kept by the market; the locked
        quantity is returned as a new parcel. Any failure after the token is
        found releases the lock and expires the token; cash is left untouched.
        InsufficientGoodQuantity is also raised when the market no longer
        holds more than the locked quantity.

        Raises:
            UnrecognizedToken, ExpiredToken, GoodKindNotDefault,
            InsufficientGoodQuantity
        """
        try:
            bought = self._buy(token, cash)
        except (RedeemError, GoodError):
            self.audit.log_buy(token, ok=False)
            raise
        self.audit.log_buy(token, ok=True)
        return bought

    def _buy(self, token: str, cash: Good) -> Good:
        good, meta = self._find_lock(Side.BUY, token)
        lock = meta.get_lock(Side.BUY)
        if cash.kind != SETTLEMENT_KIND:
            meta.unlock(Side.BUY)
            raise GoodKindNotDefault(cash.kind)
        if cash.quantity < lock.agreed_price:
            meta.unlock(Side.BUY)
            raise InsufficientGoodQuantity(cash.quantity, lock.agreed_price)

        # Buy locks do not reserve stock, so sells paid in the settlement
        # good can drain it below the locked quantity.
        available = good.quantity
        if available <= lock.locked_quantity:
            meta.unlock(Side.BUY)
            raise InsufficientGoodQuantity(available, lock.locked_quantity)

        bought = good.split(lock.locked_quantity)
        meta.fluctuate_buy_price(buy_fluctuation(available, lock.locked_quantity))
        meta.unlock(Side.BUY)
        self.storage.good(SETTLEMENT_KIND).merge(cash.split(lock.agreed_price))

        logger.debug("%s: sold %s to token %s for %s", self._name, bought, token, lock.agreed_price)
        self._notify(Event(EventKind.BOUGHT, lock.kind, lock.locked_quantity, lock.agreed_price))
        return bought

    def sell(self, token: str, offered: Good) -> Good:
        """
        Redeem a sell lock.

        The locked quantity is split out of offered and kept by the market;
        a settlement parcel of exactly agreed_price is returned. Any failure
        after the token is found releases the lock and expires the token;
        offered is left untouched. If the market can no longer pay,
        InsufficientSettlementBalance is raised.

        Raises:
            UnrecognizedToken, ExpiredToken, WrongGoodKind,
            InsufficientGoodQuantity, InsufficientSettlementBalance
        """
        try:
            payment = self._sell(token, offered)
        except (RedeemError, GoodError):
            self.audit.log_sell(token, ok=False)
            raise
        self.audit.log_sell(token, ok=True)
        return payment

    def _sell(self, token: str, offered: Good) -> Good:
        good, meta = self._find_lock(Side.SELL, token)
        lock = meta.get_lock(Side.SELL)
        if offered.kind != lock.kind:
            meta.unlock(Side.SELL)
            raise WrongGoodKind(offered.kind, lock.kind)
        if offered.quantity < lock.locked_quantity:
            meta.unlock(Side.SELL)
            raise InsufficientGoodQuantity(offered.quantity, lock.locked_quantity)

        settlement = self.storage.good(SETTLEMENT_KIND)
        payable = settlement.quantity
        if lock.kind == SETTLEMENT_KIND:
            payable += lock.locked_quantity
        if payable < lock.agreed_price:
            meta.unlock(Side.SELL)
            raise InsufficientSettlementBalance(payable, lock.agreed_price)

        available = good.quantity
        good.merge(offered.split(lock.locked_quantity))
        if available > 0:
            meta.fluctuate_sell_price(sell_fluctuation(available, lock.locked_quantity))
        meta.unlock(Side.SELL)
        payment = settlement.split(lock.agreed_price)

        logger.debug("%s: bought %s %s from token %s for %s", self._name, lock.locked_quantity, lock.kind, token, payment)
        self._notify(Event(EventKind.SOLD, lock.kind, lock.locked_quantity, lock.agreed_price))
        return payment

    # ========================================================================
    # EVENTS
    # ========================================================================

    def subscribe(self, observer: TradeObserver) -> None:
        """Send every future event of this market to observer."""
        self._subscribers.append(observer)

    def _notify(self, event: Event) -> None:
        for observer in list(self._subscribers):
            observer.on_event(event)

    def on_event(self, event: Event) -> None:
        """TradeObserver entry point: WAIT advances a day, anything else is a trade."""
        if event.kind is EventKind.WAIT:
            self.on_day_elapsed()
        else:
            self.on_trade_event(event)

    def on_trade_event(self, event: Event) -> None:
        """
        React to a trade seen on a subscribed market.

        A buy elsewhere raises our sell rate by event_reaction and, if our own
        buy quote for the same quantity is higher than the traded price,
        pulls our buy rate down by event.price / our_price. Sells mirror it.
        Events we cannot quote (e.g. more than we hold) are ignored.
        """
        good, meta = self.storage.get(event.good_kind)
        if event.kind in (EventKind.BOUGHT, EventKind.LOCKED_BUY):
            try:
                our_price = compute_buy_price(good, meta, event.quantity, self.config)
            except QuoteError:
                return
            meta.fluctuate_sell_price(self.config.event_reaction)
            if our_price > event.price:
                meta.fluctuate_buy_price(event.price / our_price)
        elif event.kind in (EventKind.SOLD, EventKind.LOCKED_SELL):
            try:
                our_price = compute_sell_price(good, meta, event.quantity, self.config)
            except QuoteError:
                return
            meta.fluctuate_buy_price(self.config.event_reaction)
            if our_price > event.price:
                meta.fluctuate_sell_price(event.price / our_price)

    def on_day_elapsed(self) -> None:
        """
        Advance one simulated day.

        Non-settlement rates decay (buy by buy_decay, sell by sell_decay),
        then every lock ages by one day; locks already at max_lock_age_days
        are released and their tokens expired.
        """
        for good, meta in self.storage:
            if good.kind != SETTLEMENT_KIND:
                meta.fluctuate_buy_price(self.config.buy_decay)
                meta.fluctuate_sell_price(self.config.sell_decay)
            for token in meta.age_locks(self.config.max_lock_age_days):
                logger.debug("%s: lock %s expired", self._name, token)

    def __repr__(self) -> str:
        return (
            f"SGX({self._name!r}, balance={self.settlement_balance()}, "
            f"buy_locks={self.storage.buy_lock_count}, sell_locks={self.storage.sell_lock_count})"
        )
