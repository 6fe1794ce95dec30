"""
factory.py - Construction of market inventories

Builds the four (Good, GoodMetadata) pairs a market starts with, either from
explicit quantities or by partitioning a settlement budget at random.
"""

from __future__ import annotations
from decimal import Decimal
from typing import List, Optional, Tuple, Any

from numpy.random import Generator, default_rng

from ..core import DEFAULT_EXCHANGE_RATES, Good, GoodKind, to_decimal
from .metadata import GoodMetadata

GoodWithMeta = Tuple[Good, GoodMetadata]


def random_quantities(
    count: int,
    total: Any,
    rng: Optional[Generator] = None,
) -> List[Decimal]:
    """
    Split total into count non-negative quantities that sum to exactly total.

    Each step draws u uniformly from [0, remaining) and takes remaining - u;
    the last quantity is whatever is left, so the sum is exact in Decimal.

    Args:
        count: Number of quantities (>= 1)
        total: Amount to partition (>= 0)
        rng: numpy Generator (a fresh unseeded one if omitted)
    """
    if count < 1:
        raise ValueError(f"count must be >= 1, got {count}")
    remaining = to_decimal(total)
    if remaining < 0:
        raise ValueError(f"total cannot be negative, got {remaining}")
    rng = rng or default_rng()

    quantities = []
    for _ in range(count - 1):
        if remaining <= 0:
            quantities.append(Decimal("0"))
            continue
        draw = Decimal(repr(float(rng.uniform(0.0, float(remaining)))))
        quantity = min(remaining, max(Decimal("0"), remaining - draw))
        remaining -= quantity
        quantities.append(quantity)
    quantities.append(remaining)
    return quantities


def all_with_quantities(eur: Any, usd: Any, yen: Any, yuan: Any) -> List[GoodWithMeta]:
    """Return one (Good, GoodMetadata) pair per kind with the default exchange rates."""
    quantities = {
        GoodKind.EUR: eur,
        GoodKind.USD: usd,
        GoodKind.YEN: yen,
        GoodKind.YUAN: yuan,
    }
    return [
        (Good(kind, quantities[kind]), GoodMetadata(DEFAULT_EXCHANGE_RATES[kind]))
        for kind in GoodKind
    ]


def random_goods(total: Any, rng: Optional[Generator] = None) -> List[GoodWithMeta]:
    """Return the four goods with quantities drawn by random_quantities()."""
    eur, usd, yen, yuan = random_quantities(len(GoodKind), total, rng)
    return all_with_quantities(eur, usd, yen, yuan)

