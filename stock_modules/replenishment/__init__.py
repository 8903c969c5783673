"""
Replenishment module.

Recalculates reorder points from the trailing sales window and reports
products that have dropped below them.
"""

from stock_modules.replenishment.models import RecalculationResult
from stock_modules.replenishment.selectors import ReplenishmentSelector
from stock_modules.replenishment.service import ReplenishmentService

__all__ = [
    "RecalculationResult",
    "ReplenishmentSelector",
    "ReplenishmentService",
]
