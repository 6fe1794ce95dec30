"""
Timeout Conformance Tests

INVARIANT: No lock outlives max_lock_age_days day ticks.

    ∀ locks L taken on day d:
        L held      on days d .. d + max_lock_age_days - 1
        L released  on day  d + max_lock_age_days

This guarantees:
- A trader who never redeems cannot block a good forever
- The lock limit always frees up again, so markets cannot deadlock
"""

import pytest

from hypothesis import given, settings
from hypothesis import strategies as st

from sgx import SGX, GoodKind, Side, MarketConfig, SETTLEMENT_KIND

foreign = [kind for kind in GoodKind if kind != SETTLEMENT_KIND]


@pytest.fixture(scope="module")
def log_dir(tmp_path_factory):
    return tmp_path_factory.mktemp("timeout")


class TestLockTimeout:
    """Property-based lock timeout tests."""

    @given(st.integers(min_value=1, max_value=30), st.integers(min_value=0, max_value=40))
    @settings(max_examples=60, deadline=None)
    def test_lock_held_until_max_age(self, log_dir, max_age, days):
        """
        PROPERTY: A lock survives max_age - 1 ticks and is gone after max_age.
        """
        market = SGX.new_with_quantities(
            1000, 1000, 1000, 1000,
            log_path=log_dir / "age.txt",
            config=MarketConfig(max_lock_age_days=max_age),
        )
        market.lock_buy(GoodKind.USD, 10, market.quote_buy(GoodKind.USD, 10), "bob")

        for _ in range(days):
            market.on_day_elapsed()

        held = market.get_lock(GoodKind.USD, Side.BUY) is not None
        assert held == (days < max_age)

    @given(
        st.lists(st.tuples(st.sampled_from(foreign), st.sampled_from(list(Side))), max_size=6),
        st.integers(min_value=0, max_value=14),
    )
    @settings(max_examples=60, deadline=None)
    def test_all_locks_released_eventually(self, log_dir, reqs, head_start):
        """
        PROPERTY: After max_lock_age_days ticks with no activity, every side is free.
        """
        market = SGX.new_with_quantities(1000, 1000, 1000, 1000, log_path=log_dir / "all.txt")
        for kind, side in reqs:
            for _ in range(head_start):
                market.on_day_elapsed()
            if market.get_lock(kind, side) is not None or market.lock_count(side) >= market.max_locks:
                continue
            if side is Side.BUY:
                market.lock_buy(kind, 10, market.quote_buy(kind, 10), "hoarder")
            else:
                market.lock_sell(kind, 10, market.quote_sell(kind, 10), "hoarder")

        for _ in range(market.config.max_lock_age_days):
            market.on_day_elapsed()

        assert market.lock_count(Side.BUY) == 0
        assert market.lock_count(Side.SELL) == 0
