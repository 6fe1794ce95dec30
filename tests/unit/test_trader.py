"""
test_trader.py - Unit tests for the simulation driver

Tests:
- Construction checks and starting goods
- apply_strategy: calls per day, day ticks, final liquidation, snapshots
- history_as_json
"""

import json
import pytest
from decimal import Decimal

from sgx import Trader, Strategy, GoodKind


class RecordingStrategy(Strategy):
    """Strategy that only counts how it is driven."""

    def __init__(self, markets, trader_name):
        super().__init__(markets, trader_name)
        self.applied = 0
        self.liquidated = 0

    def apply(self, goods):
        self.applied += 1

    def sell_remaining_goods(self, goods):
        self.liquidated += 1


@pytest.fixture
def markets(make_market):
    return [make_market(name="A"), make_market(name="B")]


class TestConstruction:

    def test_starting_goods(self, markets):
        trader = Trader(RecordingStrategy, 1000, markets, "rec")
        assert trader.balance() == Decimal("1000")
        assert [g.kind for g in trader.goods] == list(GoodKind)
        assert all(trader.balance(kind) == 0 for kind in GoodKind if kind != GoodKind.EUR)
        assert trader.days == 0
        assert len(trader.history) == 1

    def test_strategy_bound_to_markets(self, markets):
        trader = Trader(RecordingStrategy, 1000, markets, "rec")
        assert trader.strategy.markets == markets
        assert trader.strategy.trader_name == "rec"

    def test_markets_subscribed_to_each_other(self, markets):
        a, b = markets
        Trader(RecordingStrategy, 1000, markets, "rec")
        assert a.subscribers == [b]
        assert b.subscribers == [a]

    @pytest.mark.parametrize("capital", [0, -10])
    def test_non_positive_capital(self, markets, capital):
        with pytest.raises(ValueError):
            Trader(RecordingStrategy, capital, markets, "rec")

    def test_no_markets(self):
        with pytest.raises(ValueError):
            Trader(RecordingStrategy, 1000, [], "rec")


class TestApplyStrategy:

    def test_calls_per_day(self, markets):
        trader = Trader(RecordingStrategy, 1000, markets, "rec")
        trader.apply_strategy(3, 60)
        assert trader.strategy.applied == 72
        assert trader.strategy.liquidated == 1
        assert trader.days == 3
        assert len(trader.history) == 4

    def test_markets_tick_once_per_day(self, markets):
        trader = Trader(RecordingStrategy, 1000, markets, "rec")
        trader.apply_strategy(3, 60)
        for market in markets:
            assert market.storage.metadata(GoodKind.USD).base_buy_price == Decimal("0.729")

    def test_once_a_day(self, markets):
        trader = Trader(RecordingStrategy, 1000, markets, "rec")
        trader.apply_strategy(2, 1440)
        assert trader.strategy.applied == 2

    def test_resume(self, markets):
        trader = Trader(RecordingStrategy, 1000, markets, "rec")
        trader.apply_strategy(1, 720)
        trader.apply_strategy(3, 720)
        assert trader.days == 3
        assert trader.strategy.applied == 6
        assert trader.strategy.liquidated == 2

    @pytest.mark.parametrize("max_days,minutes", [(0, 60), (1, 0), (1, 1441)])
    def test_invalid_arguments(self, markets, max_days, minutes):
        trader = Trader(RecordingStrategy, 1000, markets, "rec")
        with pytest.raises(ValueError):
            trader.apply_strategy(max_days, minutes)
        assert trader.days == 0


class TestHistory:

    def test_history_is_a_copy(self, markets):
        trader = Trader(RecordingStrategy, 1000, markets, "rec")
        trader.history[0][0].quantity = Decimal("0")
        assert trader.history[0][0].quantity == Decimal("1000")

    def test_snapshots_do_not_follow_goods(self, markets):
        trader = Trader(RecordingStrategy, 1000, markets, "rec")
        trader.goods[0].split(400)
        assert trader.history[0][0].quantity == Decimal("1000")

    def test_json(self, markets):
        trader = Trader(RecordingStrategy, 1000, markets, "rec")
        trader.apply_strategy(1, 1440)
        history = json.loads(trader.history_as_json())
        assert len(history) == 2
        assert history[0] == {"EUR": "1000", "USD": "0", "YEN": "0", "YUAN": "0"}
