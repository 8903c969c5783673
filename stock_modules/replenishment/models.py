"""
Replenishment Domain Models (``stock_modules.replenishment.models``).

Result objects returned by the recalculation entry point.  The product and
policy value types themselves live in ``stock_kernel.domain.values`` so the
engines can use them.
"""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from stock_engines.reorder import ReorderResult
from stock_engines.replenishment_report import PurchaseSuggestionLine
from stock_kernel.domain.values import InventoryPolicy, ProductProfile, SupplierLink
from stock_kernel.exceptions import PartialComputationError

__all__ = [
    "InventoryPolicy",
    "ProductProfile",
    "RecalculationResult",
    "SupplierLink",
]


@dataclass(frozen=True)
class RecalculationResult:
    """
    Outcome of one recalculation run.

    ``failures`` holds one PartialComputationError per skipped product;
    a run with failures still updated every other product.
    """

    run_id: UUID
    calculated_at: datetime
    policy: InventoryPolicy
    reorder_points: tuple[ReorderResult, ...] = ()
    low_stock_alerts: int = 0
    purchase_order_suggestions: dict[str, tuple[PurchaseSuggestionLine, ...]] = field(
        default_factory=dict
    )
    failures: tuple[PartialComputationError, ...] = ()

    @property
    def products_updated(self) -> int:
        return len(self.reorder_points)

    @property
    def is_partial(self) -> bool:
        return bool(self.failures)

    def to_dict(self) -> dict:
        return {
            "run_id": str(self.run_id),
            "calculated_at": self.calculated_at.isoformat(),
            "policy": self.policy.to_dict(),
            "products_updated": self.products_updated,
            "reorder_points": [r.to_dict() for r in self.reorder_points],
            "low_stock_alerts": self.low_stock_alerts,
            "purchase_order_suggestions": {
                supplier: [line.to_dict() for line in lines]
                for supplier, lines in self.purchase_order_suggestions.items()
            },
            "failures": [f.to_dict() for f in self.failures],
        }
