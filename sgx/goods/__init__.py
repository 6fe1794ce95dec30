"""
goods - Inventory bookkeeping for the SGX market.

Modules:
    status: GoodLock reservation record and the Available / Locked status types
    metadata: GoodMetadata, the per-good ledger entry (rates, locks, retired tokens)
    storage: GoodStorage, the market's ordered (Good, GoodMetadata) collection
    factory: Construction of inventories from quantities or a random budget split
"""

from .status import GoodLock, GoodStatus, Available, Locked, AVAILABLE, generate_token
from .metadata import GoodMetadata, Side
from .storage import GoodStorage
from .factory import GoodWithMeta, all_with_quantities, random_goods, random_quantities

__all__ = [
    'GoodLock', 'GoodStatus', 'Available', 'Locked', 'AVAILABLE', 'generate_token',
    'GoodMetadata', 'Side',
    'GoodStorage',
    'GoodWithMeta', 'all_with_quantities', 'random_goods', 'random_quantities',
]
