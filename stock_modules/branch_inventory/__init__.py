"""
Branch inventory module.

Per-(branch, product) stock ledger with a floor at zero, lazily created
entries and shortfall records for clamped deltas.
"""

from stock_modules.branch_inventory.models import (
    Branch,
    BranchStockLine,
    LedgerDelta,
    LedgerDeltaResult,
    LedgerEntry,
    ShortfallRecord,
)
from stock_modules.branch_inventory.selectors import BranchInventorySelector
from stock_modules.branch_inventory.service import BranchLedgerService, sum_deltas

__all__ = [
    "Branch",
    "BranchInventorySelector",
    "BranchLedgerService",
    "BranchStockLine",
    "LedgerDelta",
    "LedgerDeltaResult",
    "LedgerEntry",
    "ShortfallRecord",
    "sum_deltas",
]
