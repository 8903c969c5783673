"""
Module: stock_engines.reorder
Responsibility:
    Turn per-product demand statistics into a safety stock, a reorder
    point and an EOQ-derived reorder quantity.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import stock_kernel.domain.values and sibling engines.

Invariants enforced:
    - Determinism: identical (stats, lead_time, policy, costs,
      previous_reorder_quantity) always yield an identical ReorderResult.
    - reorder_level and reorder_quantity are non-negative integers.
    - The service level maps to a z-score through a fixed table; values
      not in the table use z = 1.0.  There is no interpolation.

Failure modes:
    - ValueError when lead_time <= 0 or no positive lead time can be
      resolved.  The recalculation service records the error against the
      product and continues with the rest of the batch.

Usage:
    from stock_engines.reorder import ReorderCalculator

    calc = ReorderCalculator(policy, costs)
    result = calc.calculate(stats=stats, lead_time=5,
                            previous_reorder_quantity=None)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from uuid import UUID

from stock_engines.demand import DEMAND_WINDOW_DAYS, DemandStats
from stock_engines.tracer import traced_engine
from stock_kernel.domain.values import CostAssumptions, InventoryPolicy
from stock_kernel.logging_config import get_logger

logger = get_logger("engines.reorder")

DAYS_PER_YEAR = 365

_Z_SCORES: dict[float, float] = {
    0.95: 1.645,
    0.90: 1.28,
}
DEFAULT_Z_SCORE = 1.0


def z_score_for(service_level: float) -> float:
    """z-score for a service level; 1.0 for levels outside the table."""
    return _Z_SCORES.get(float(service_level), DEFAULT_Z_SCORE)


def resolve_lead_time(
    product_lead_time: int | None,
    supplier_lead_time: int | None,
    default_lead_time: int,
) -> int:
    """
    Lead time in days: product override, then linked supplier, then policy.

    Zero and None both mean "not set" and fall through to the next source.
    """
    for candidate in (product_lead_time, supplier_lead_time, default_lead_time):
        if candidate is not None and candidate > 0:
            return int(candidate)
    raise ValueError(
        f"No positive lead time available (product={product_lead_time}, "
        f"supplier={supplier_lead_time}, default={default_lead_time})"
    )


@dataclass(frozen=True)
class ReorderResult:
    """Computed replenishment thresholds for one product."""

    product_id: UUID
    average_daily_sales: float
    safety_stock: int
    reorder_level: int
    reorder_quantity: int
    lead_time: int
    z_score: float
    std_dev: float
    economic_order_quantity: int

    def to_dict(self) -> dict:
        return {
            "id": str(self.product_id),
            "average_daily_sales": self.average_daily_sales,
            "reorder_level": self.reorder_level,
            "reorder_quantity": self.reorder_quantity,
            "lead_time": self.lead_time,
        }


class ReorderCalculator:
    """
    Reorder point and quantity calculator.

    Contract:
        Stateless apart from the immutable policy and cost assumptions it
        is constructed with.  One instance serves a whole recalculation run.
    """

    def __init__(
        self,
        policy: InventoryPolicy,
        costs: CostAssumptions | None = None,
        window_days: int = DEMAND_WINDOW_DAYS,
    ):
        self.policy = policy
        self.costs = costs or CostAssumptions()
        self.window_days = window_days
        self.z_score = z_score_for(policy.service_level)

    @staticmethod
    def demand_std_dev(stats: DemandStats) -> float:
        """Square root of the (total / days) * (1 - 1 / days) variance proxy."""
        if not stats.has_history:
            return 0.0
        days = stats.active_days
        variance = (stats.total_quantity / days) * (1 - 1 / days)
        return math.sqrt(variance)

    def safety_stock(self, std_dev: float, lead_time: int) -> int:
        return math.ceil(
            self.z_score * std_dev * math.sqrt(lead_time + self.policy.safety_stock_days)
        )

    def economic_order_quantity(self, average_daily_sales: float) -> int:
        annual_demand = average_daily_sales * DAYS_PER_YEAR
        ordering_cost = float(self.costs.ordering_cost)
        holding_cost = float(self.costs.holding_cost_rate) * float(self.costs.item_cost)
        return math.ceil(math.sqrt(2 * annual_demand * ordering_cost / holding_cost))

    @traced_engine(
        "reorder",
        "1.0",
        fingerprint_fields=("stats", "lead_time", "previous_reorder_quantity"),
    )
    def calculate(
        self,
        *,
        stats: DemandStats,
        lead_time: int,
        previous_reorder_quantity: int | None = None,
    ) -> ReorderResult:
        """
        Compute thresholds for one product.

        Args:
            stats: Demand over the window (``DemandStats.empty`` when the
                product sold nothing).
            lead_time: Resolved lead time in days, > 0.
            previous_reorder_quantity: The product's current reorder
                quantity.  Acts as a floor; 0 or None use the configured
                fallback.
        """
        if lead_time <= 0:
            raise ValueError(
                f"lead_time must be > 0, got {lead_time} for product {stats.product_id}"
            )

        average = stats.average_daily_sales(self.window_days)
        std_dev = self.demand_std_dev(stats)
        safety_stock = self.safety_stock(std_dev, lead_time)
        reorder_level = math.ceil(average * lead_time + safety_stock)
        eoq = self.economic_order_quantity(average)
        floor_quantity = previous_reorder_quantity or self.costs.fallback_reorder_quantity
        reorder_quantity = max(eoq, floor_quantity)

        return ReorderResult(
            product_id=stats.product_id,
            average_daily_sales=average,
            safety_stock=safety_stock,
            reorder_level=reorder_level,
            reorder_quantity=reorder_quantity,
            lead_time=lead_time,
            z_score=self.z_score,
            std_dev=std_dev,
            economic_order_quantity=eoq,
        )
