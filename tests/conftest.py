"""
conftest.py - Shared pytest fixtures for SGX tests

Provides common fixtures used across unit and functional tests:
- Markets with fixed inventories writing their audit file under tmp_path
- A market factory for tests that need custom inventories or names
- Audit file readers
"""

import pytest
from typing import List

from sgx import SGX, MarketConfig


# =============================================================================
# MARKET FIXTURES
# =============================================================================

@pytest.fixture
def make_market(tmp_path):
    """Factory for markets whose audit file lives in tmp_path."""
    def _make(eur=1000, usd=1000, yen=1000, yuan=1000, name="SGX", config=None) -> SGX:
        return SGX.new_with_quantities(
            eur, usd, yen, yuan,
            name=name,
            log_path=tmp_path / f"log_{name}.txt",
            config=config,
        )
    return _make


@pytest.fixture
def market(make_market):
    """Market holding 1000 of every good."""
    return make_market()


@pytest.fixture
def rich_market(make_market):
    """Market with a small settlement balance and deep USD and YUAN stock."""
    return make_market(eur=1000, usd=1_000_000, yen=1000, yuan=1_000_000)


@pytest.fixture
def strict_config():
    """Config allowing a single lock per side."""
    return MarketConfig(min_unlocked_goods=3)


# =============================================================================
# AUDIT FIXTURES
# =============================================================================

@pytest.fixture
def read_audit():
    """Return a reader giving the lines of a market's audit file."""
    def _read(market: SGX) -> List[str]:
        return market.audit.path.read_text(encoding="utf-8").splitlines()
    return _read
