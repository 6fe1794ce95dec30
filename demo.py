#!/usr/bin/env python3
"""
demo.py - Interactive Tutorial: Learn the SGX Market Step by Step

A pedagogical walk through the market engine. Each step builds on the
previous one. Press Enter to advance.

WHAT YOU'LL LEARN:
  1-3:  Foundation   - Creating a market, quotes, the buy/sell spread
  4-6:  Reservations - Locking, redeeming, rejected and expired tokens
  7-8:  Time         - Day ticks, lock timeout, cross-market reactions
  9:    Simulation   - A stingy trader running against three markets

Run:
    python demo.py           # Interactive mode (press Enter for each step)
    python demo.py --quick   # Run all steps without pausing
    python demo.py --quick --verbose   # Also show the library's DEBUG logs

Audit files (log_<market>.txt) are written to the working directory.
"""

from dataclasses import dataclass
from decimal import Decimal
import logging
import sys

from sgx import (
    SGX, Good, GoodKind, Side,
    MarketError, ExpiredToken, BidTooLow, MaxLocksReached,
    StingyStrategy, Trader,
    subscribe_each_other,
)


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class DemoConfig:
    """Configuration for the tutorial. Modify these to experiment."""
    # Market inventory
    eur: Decimal = Decimal("1000")
    usd: Decimal = Decimal("1000")
    yen: Decimal = Decimal("1000")
    yuan: Decimal = Decimal("1000")

    # Trade
    trader_name: str = "bob"
    quantity: Decimal = Decimal("100")

    # Simulation
    simulation_markets: int = 3
    simulation_capital: Decimal = Decimal("100000")
    simulation_days: int = 5
    apply_every_minutes: int = 240
    seed: int = 42


CONFIG = DemoConfig()

# Global state for interactive mode
QUICK_MODE = "--quick" in sys.argv
VERBOSE = "--verbose" in sys.argv


def wait_for_enter():
    """Pause for user input unless in quick mode."""
    if not QUICK_MODE:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    """Print a step header with learning objective."""
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def section_header(text: str):
    """Print a section header within a step."""
    print(f"\n--- {text} ---\n")


def show_holdings(market: SGX):
    print(f"{'kind':<6}{'quantity':>20}{'buy rate':>20}{'sell rate':>20}")
    for label in market.current_holdings():
        print(
            f"{str(label.kind):<6}{label.quantity:>20.4f}"
            f"{label.exchange_rate_buy:>20.6f}{label.exchange_rate_sell:>20.6f}"
        )


# ============================================================================
# PHASE 1: FOUNDATION (Steps 1-3)
# ============================================================================

def step_01_create_market() -> SGX:
    step_header(1, "Creating a Market",
        "A market holds one parcel of each good and a rate pair per good.")

    print(f">>> market = SGX.new_with_quantities({CONFIG.eur}, {CONFIG.usd}, {CONFIG.yen}, {CONFIG.yuan})")
    market = SGX.new_with_quantities(CONFIG.eur, CONFIG.usd, CONFIG.yen, CONFIG.yuan)

    section_header("Initial Holdings")
    show_holdings(market)
    print(f"\nSettlement balance: {market.settlement_balance()} EUR")
    print(f"Audit file:         {market.audit.path}")
    return market


def step_02_quotes(market: SGX) -> SGX:
    step_header(2, "Quotes",
        "Quotes are pure: asking for a price never changes the market.")

    for quantity in (Decimal("10"), Decimal("100"), Decimal("500")):
        price = market.quote_buy(GoodKind.USD, quantity)
        print(f"quote_buy(USD, {quantity:>4}) = {price:.4f} EUR")

    section_header("Key Insight")
    print("""
    The price grows faster than the quantity: the demand factor
    available / (available - quantity) punishes draining a good.
    Asking for the whole stock is rejected outright.
    """)
    try:
        market.quote_buy(GoodKind.USD, CONFIG.usd)
    except MarketError as e:
        print(f"quote_buy(USD, {CONFIG.usd}) -> {type(e).__name__}: {e}")
    return market


def step_03_spread(market: SGX) -> SGX:
    step_header(3, "The Spread",
        "For a sizeable quantity, buying costs more than selling pays.")

    q = CONFIG.quantity
    buy = market.quote_buy(GoodKind.USD, q)
    sell = market.quote_sell(GoodKind.USD, q)
    print(f"quote_buy(USD, {q})  = {buy:.4f}")
    print(f"quote_sell(USD, {q}) = {sell:.4f}")
    print(f"Spread               = {buy - sell:.4f}")
    return market


# ============================================================================
# PHASE 2: RESERVATIONS (Steps 4-6)
# ============================================================================

def step_04_lock_and_buy(market: SGX) -> SGX:
    step_header(4, "Lock, then Buy",
        "Trading is two-phase: a lock reserves the price, a token redeems it.")

    q = CONFIG.quantity
    price = market.quote_buy(GoodKind.USD, q)
    print(f">>> token = market.lock_buy(USD, {q}, {price:.4f}, {CONFIG.trader_name!r})")
    token = market.lock_buy(GoodKind.USD, q, price, CONFIG.trader_name)
    print(f"token = {token!r}")
    print(f"Buy lock: {market.get_lock(GoodKind.USD, Side.BUY)}")

    cash = Good(GoodKind.EUR, price)
    print(f"\n>>> usd = market.buy(token, {cash})")
    usd = market.buy(token, cash)
    print(f"Received {usd}, cash left {cash}")

    section_header("Redeeming Twice")
    try:
        market.buy(token, Good(GoodKind.EUR, price))
    except ExpiredToken as e:
        print(f"Second buy -> ExpiredToken: {e}")
    return market


def step_05_rejections(market: SGX) -> SGX:
    step_header(5, "Rejected Locks",
        "Every rejection is a typed error carrying its details.")

    price = market.quote_buy(GoodKind.YEN, 10)
    try:
        market.lock_buy(GoodKind.YEN, 10, price / 2, CONFIG.trader_name)
    except BidTooLow as e:
        print(f"BidTooLow: bid={e.bid:.4f}, lowest acceptable={e.lowest_acceptable_bid:.4f}")
    return market


def step_06_lock_limit(market: SGX) -> SGX:
    step_header(6, "The Lock Limit",
        "At least two goods per side always stay unlocked.")

    for kind in (GoodKind.USD, GoodKind.YEN, GoodKind.YUAN):
        try:
            price = market.quote_buy(kind, 10)
            token = market.lock_buy(kind, 10, price, "carol")
            print(f"Locked {kind}: {token}")
        except MaxLocksReached as e:
            print(f"Locking {kind} -> MaxLocksReached: {e}")
    print(f"Buy locks outstanding: {market.lock_count(Side.BUY)}")
    return market


# ============================================================================
# PHASE 3: TIME (Steps 7-8)
# ============================================================================

def step_07_timeout(market: SGX) -> SGX:
    step_header(7, "Lock Timeout",
        "Locks that are never redeemed are released after 15 day ticks.")

    days = market.config.max_lock_age_days
    for _ in range(days):
        market.on_day_elapsed()
    print(f"After {days} days, buy locks outstanding: {market.lock_count(Side.BUY)}")

    section_header("Rates After Decay")
    show_holdings(market)
    return market


def step_08_reactions():
    step_header(8, "Cross-Market Reactions",
        "Subscribed markets adjust their rates when a peer trades.")

    north = SGX.new_with_quantities(1000, 1000, 1000, 1000, name="NORTH")
    south = SGX.new_with_quantities(1000, 500, 1000, 1000, name="SOUTH")
    subscribe_each_other(north, south)

    price = north.quote_buy(GoodKind.USD, 100)
    print(f"SOUTH USD rates before: {south.storage.metadata(GoodKind.USD)}")
    north.lock_buy(GoodKind.USD, 100, price, CONFIG.trader_name)
    print(f"SOUTH USD rates after:  {south.storage.metadata(GoodKind.USD)}")


# ============================================================================
# PHASE 4: SIMULATION (Step 9)
# ============================================================================

def step_09_simulation():
    step_header(9, "A Stingy Trader",
        "A Trader applies its strategy many times a day across several markets.")

    markets = [
        SGX.new_randomized(seed=CONFIG.seed + i, name=f"SGX{i}")
        for i in range(CONFIG.simulation_markets)
    ]
    trader = Trader(StingyStrategy, CONFIG.simulation_capital, markets, "stingy")
    trader.apply_strategy(CONFIG.simulation_days, CONFIG.apply_every_minutes)

    section_header("History")
    for day, goods in enumerate(trader.history):
        holdings = ", ".join(f"{g.quantity:.2f} {g.kind}" for g in goods)
        print(f"day {day}: {holdings}")


def main():
    """Run the complete tutorial."""
    logging.basicConfig(
        level=logging.DEBUG if VERBOSE else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("=" * 70)
    print("       SGX MARKET - INTERACTIVE TUTORIAL")
    print("=" * 70)

    if QUICK_MODE:
        print("Running in QUICK mode (no pauses)")
    else:
        print("Running in INTERACTIVE mode (press Enter to advance)")

    wait_for_enter()

    market = step_01_create_market()
    wait_for_enter()

    market = step_02_quotes(market)
    wait_for_enter()

    market = step_03_spread(market)
    wait_for_enter()

    market = step_04_lock_and_buy(market)
    wait_for_enter()

    market = step_05_rejections(market)
    wait_for_enter()

    market = step_06_lock_limit(market)
    wait_for_enter()

    step_07_timeout(market)
    wait_for_enter()

    step_08_reactions()
    wait_for_enter()

    step_09_simulation()

    print("\n" + "=" * 70)
    print("       TUTORIAL COMPLETE!")
    print("=" * 70)


if __name__ == "__main__":
    main()
