"""
Module: stock_engines.branch_stock
Responsibility:
    Classify a branch ledger quantity against its informational min/max
    bounds.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Bounds are informational: classification never rejects a quantity.
    - quantity <= min is low; quantity >= max is overstock; otherwise good.
      When min >= max, low wins.
"""

from __future__ import annotations

from enum import Enum


class BranchStockStatus(str, Enum):
    LOW = "low"
    GOOD = "good"
    OVERSTOCK = "overstock"


def classify_branch_stock(
    quantity: int,
    min_stock_level: int,
    max_stock_level: int,
) -> BranchStockStatus:
    if quantity <= min_stock_level:
        return BranchStockStatus.LOW
    if quantity >= max_stock_level:
        return BranchStockStatus.OVERSTOCK
    return BranchStockStatus.GOOD
