"""
test_goods.py - Unit tests for the inventory bookkeeping

Tests:
- generate_token / GoodLock: token format, aging, validation
- GoodMetadata: lock/unlock per side, expired tokens, '#n' suffixes, aging
- GoodStorage: construction checks, lookups, lock counts
- factory: fixed and randomized construction
"""

import pytest
from decimal import Decimal

from numpy.random import default_rng

from sgx import (
    Good, GoodKind, InvariantViolation,
    GoodLock, Available, Locked, AVAILABLE, generate_token,
    GoodMetadata, Side, GoodStorage,
    all_with_quantities, random_goods, random_quantities,
)


class TestTokens:

    def test_format(self):
        assert generate_token("bob", GoodKind.USD, Decimal("100")) == "bob-USD-100"

    def test_quantity_normalised(self):
        assert generate_token("bob", GoodKind.USD, Decimal("100.00")) == "bob-USD-100"
        assert generate_token("bob", GoodKind.YEN, Decimal("0.50")) == "bob-YEN-0.5"

    def test_deterministic(self):
        a = generate_token("alice", GoodKind.YUAN, Decimal("10"))
        b = generate_token("alice", GoodKind.YUAN, Decimal("10"))
        assert a == b

    def test_distinct_triples_differ(self):
        tokens = {
            generate_token(name, kind, Decimal(q))
            for name in ("alice", "bob")
            for kind in GoodKind
            for q in ("1", "2", "10")
        }
        assert len(tokens) == 2 * 4 * 3


class TestGoodLock:

    def test_starts_at_day_one(self):
        lock = GoodLock(Decimal("1"), GoodKind.USD, Decimal("2"), "t")
        assert lock.age_in_days == 1

    def test_aged_returns_new_lock(self):
        lock = GoodLock(Decimal("1"), GoodKind.USD, Decimal("2"), "t")
        older = lock.aged()
        assert older.age_in_days == 2
        assert lock.age_in_days == 1
        assert older.token == lock.token

    def test_coerces_numbers(self):
        lock = GoodLock(5, GoodKind.USD, "2.5", "t")
        assert lock.locked_quantity == Decimal("5")
        assert lock.agreed_price == Decimal("2.5")

    def test_empty_token_rejected(self):
        with pytest.raises(ValueError):
            GoodLock(Decimal("1"), GoodKind.USD, Decimal("1"), "")

    def test_status_types(self):
        lock = GoodLock(Decimal("1"), GoodKind.USD, Decimal("2"), "t")
        assert isinstance(AVAILABLE, Available)
        assert Locked(lock).lock is lock


class TestGoodMetadata:

    def test_reciprocal_rates(self):
        meta = GoodMetadata(Decimal("4"))
        assert meta.base_buy_price == Decimal("4")
        assert meta.base_sell_price == Decimal("0.25")

    def test_non_positive_rate_rejected(self):
        with pytest.raises(ValueError):
            GoodMetadata(0)

    def test_starts_available(self):
        meta = GoodMetadata(1)
        assert meta.buy_status == AVAILABLE
        assert meta.sell_status == AVAILABLE
        assert meta.get_lock(Side.BUY) is None

    def test_lock_and_unlock(self):
        meta = GoodMetadata(1)
        token = meta.lock(Side.BUY, Decimal("10"), GoodKind.USD, Decimal("12"), "bob")
        assert token == "bob-USD-10"
        assert meta.is_locked(Side.BUY)
        assert not meta.is_locked(Side.SELL)
        assert isinstance(meta.buy_status, Locked)

        assert meta.unlock(Side.BUY) == token
        assert meta.buy_status == AVAILABLE
        assert meta.expired_buy_tokens == [token]
        assert meta.expired_sell_tokens == []

    def test_sides_are_independent(self):
        meta = GoodMetadata(1)
        meta.lock(Side.BUY, Decimal("10"), GoodKind.USD, Decimal("12"), "bob")
        meta.lock(Side.SELL, Decimal("10"), GoodKind.USD, Decimal("8"), "bob")
        assert meta.is_locked(Side.BUY) and meta.is_locked(Side.SELL)

    def test_double_lock_is_invariant_violation(self):
        meta = GoodMetadata(1)
        meta.lock(Side.BUY, Decimal("10"), GoodKind.USD, Decimal("12"), "bob")
        with pytest.raises(InvariantViolation):
            meta.lock(Side.BUY, Decimal("5"), GoodKind.USD, Decimal("6"), "alice")

    def test_unlock_available_is_invariant_violation(self):
        with pytest.raises(InvariantViolation):
            GoodMetadata(1).unlock(Side.SELL)

    def test_relock_after_expiry_gets_suffix(self):
        meta = GoodMetadata(1)
        first = meta.lock(Side.BUY, Decimal("10"), GoodKind.USD, Decimal("12"), "bob")
        meta.unlock(Side.BUY)
        second = meta.lock(Side.BUY, Decimal("10"), GoodKind.USD, Decimal("12"), "bob")
        meta.unlock(Side.BUY)
        third = meta.lock(Side.BUY, Decimal("10"), GoodKind.USD, Decimal("12"), "bob")
        assert (first, second, third) == ("bob-USD-10", "bob-USD-10#2", "bob-USD-10#3")

    def test_many_retired_tokens(self):
        meta = GoodMetadata(1)
        tokens = []
        for _ in range(200):
            tokens.append(meta.lock(Side.BUY, Decimal("10"), GoodKind.USD, Decimal("12"), "bob"))
            meta.unlock(Side.BUY)
        assert len(set(tokens)) == 200
        assert tokens[-1] == "bob-USD-10#200"
        assert meta.expired_buy_tokens == tokens
        assert all(meta.has_expired_token(Side.BUY, token) for token in tokens)
        assert not meta.has_expired_token(Side.BUY, "bob-USD-10#201")
        assert meta.expired_sell_tokens == []

    def test_suffix_is_per_side(self):
        meta = GoodMetadata(1)
        meta.lock(Side.BUY, Decimal("10"), GoodKind.USD, Decimal("12"), "bob")
        meta.unlock(Side.BUY)
        assert meta.lock(Side.SELL, Decimal("10"), GoodKind.USD, Decimal("8"), "bob") == "bob-USD-10"

    def test_age_locks(self):
        meta = GoodMetadata(1)
        token = meta.lock(Side.SELL, Decimal("1"), GoodKind.YEN, Decimal("1"), "bob")
        assert meta.age_locks(3) == []
        assert meta.get_lock(Side.SELL).age_in_days == 2
        assert meta.age_locks(3) == []
        assert meta.get_lock(Side.SELL).age_in_days == 3
        assert meta.age_locks(3) == [token]
        assert meta.sell_status == AVAILABLE
        assert meta.has_expired_token(Side.SELL, token)

    def test_fluctuation(self):
        meta = GoodMetadata(2)
        meta.fluctuate_buy_price(Decimal("1.5"))
        meta.fluctuate_sell_price(Decimal("2"))
        assert meta.base_buy_price == Decimal("3")
        assert meta.base_sell_price == Decimal("1")


class TestGoodStorage:

    def test_requires_every_kind_once(self):
        goods = all_with_quantities(1, 1, 1, 1)
        with pytest.raises(InvariantViolation):
            GoodStorage(goods[:3])
        with pytest.raises(InvariantViolation):
            GoodStorage(goods + goods[:1])

    def test_lookup_by_kind(self):
        storage = GoodStorage(all_with_quantities(1, 2, 3, 4))
        assert len(storage) == 4
        assert storage.quantity(GoodKind.YEN) == Decimal("3")
        assert storage.settlement()[0].kind is GoodKind.EUR
        assert storage.good(GoodKind.YUAN) == Good(GoodKind.YUAN, 4)

    def test_find_by_token(self):
        storage = GoodStorage(all_with_quantities(1, 2, 3, 4))
        token = storage.metadata(GoodKind.USD).lock(
            Side.BUY, Decimal("1"), GoodKind.USD, Decimal("1"), "bob"
        )
        good, _ = storage.find_by_token(Side.BUY, token)
        assert good.kind is GoodKind.USD
        assert storage.find_by_token(Side.SELL, token) is None
        assert storage.find_by_token(Side.BUY, "nope") is None

    def test_lock_counts_and_expired_lookup(self):
        storage = GoodStorage(all_with_quantities(1, 2, 3, 4))
        storage.metadata(GoodKind.USD).lock(Side.BUY, Decimal("1"), GoodKind.USD, Decimal("1"), "a")
        token = storage.metadata(GoodKind.YEN).lock(Side.BUY, Decimal("1"), GoodKind.YEN, Decimal("1"), "a")
        storage.metadata(GoodKind.YEN).lock(Side.SELL, Decimal("1"), GoodKind.YEN, Decimal("1"), "a")
        assert storage.buy_lock_count == 2
        assert storage.sell_lock_count == 1

        storage.metadata(GoodKind.YEN).unlock(Side.BUY)
        assert storage.buy_lock_count == 1
        assert storage.has_expired_token(Side.BUY, token)
        assert not storage.has_expired_token(Side.SELL, token)

    def test_labels(self):
        storage = GoodStorage(all_with_quantities(1, 2, 3, 4))
        labels = storage.labels()
        assert [label.kind for label in labels] == list(GoodKind)
        yen = labels[2]
        assert yen.quantity == Decimal("3")
        assert yen.exchange_rate_buy == Decimal("142.73")
        assert yen.exchange_rate_sell == Decimal("1") / Decimal("142.73")


class TestFactory:

    def test_all_with_quantities(self):
        goods = all_with_quantities(10, 20, 30, 40)
        assert [g.quantity for g, _ in goods] == [10, 20, 30, 40]
        assert [g.kind for g, _ in goods] == list(GoodKind)

    def test_random_quantities_sum_exactly(self):
        quantities = random_quantities(4, Decimal("1000000"), default_rng(7))
        assert len(quantities) == 4
        assert sum(quantities) == Decimal("1000000")
        assert all(q >= 0 for q in quantities)

    def test_random_quantities_reproducible(self):
        a = random_quantities(4, 1000, default_rng(3))
        b = random_quantities(4, 1000, default_rng(3))
        assert a == b

    def test_random_quantities_zero_total(self):
        assert random_quantities(4, 0) == [Decimal("0")] * 4

    @pytest.mark.parametrize("count,total", [(0, 10), (4, -1)])
    def test_random_quantities_invalid(self, count, total):
        with pytest.raises(ValueError):
            random_quantities(count, total)

    def test_random_goods(self):
        goods = random_goods(Decimal("5000"), default_rng(11))
        assert sum(g.quantity for g, _ in goods) == Decimal("5000")
