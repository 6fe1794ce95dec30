"""
strategies - Trading strategies driven by a Trader.

Available strategies:
- StingyStrategy: spends and sells a small fraction of its holdings per step
"""

from .strategy import Strategy, find_good
from .stingy import StingyStrategy, Deal

__all__ = [
    'Strategy',
    'find_good',
    'StingyStrategy',
    'Deal',
]
