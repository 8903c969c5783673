"""
Module: stock_engines.demand
Responsibility:
    Reduce a trailing window of sale lines into per-product demand
    statistics: total quantity sold and the number of distinct calendar
    days with at least one sale.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    The selector decides which lines fall inside the window; this module
    only groups and counts.

Invariants enforced:
    - active_days is clamped to [1, window_days], so an average can always
      be taken.
    - Calendar days are UTC dates.
    - Purity: no clock access.  The window start is computed from an
      explicit ``as_of``.

Failure modes:
    - Lines with a non-positive quantity are skipped and logged at WARNING;
      they never reach the statistics.
    - ValueError from DemandStats on negative totals or window_days < 1.

Usage:
    from stock_engines.demand import SaleLine, aggregate_demand

    stats = aggregate_demand(lines, window_days=30)
    avg = stats[product_id].average_daily_sales()
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from uuid import UUID

from stock_engines.tracer import traced_engine
from stock_kernel.logging_config import get_logger

logger = get_logger("engines.demand")

DEMAND_WINDOW_DAYS = 30


@dataclass(frozen=True)
class SaleLine:
    """One sold quantity of one product.  Read-only input."""

    product_id: UUID
    quantity: int
    occurred_at: datetime

    @property
    def sale_date(self) -> date:
        if self.occurred_at.tzinfo is None:
            return self.occurred_at.date()
        return self.occurred_at.astimezone(UTC).date()


@dataclass(frozen=True)
class DemandStats:
    """
    Demand summary for one product over the window.

    Guarantees:
        - total_quantity >= 0
        - active_days >= 1
    """

    product_id: UUID
    total_quantity: int
    active_days: int

    def __post_init__(self) -> None:
        if self.total_quantity < 0:
            raise ValueError(
                f"total_quantity must be >= 0, got {self.total_quantity}"
            )
        if self.active_days < 1:
            raise ValueError(f"active_days must be >= 1, got {self.active_days}")

    @classmethod
    def empty(cls, product_id: UUID) -> DemandStats:
        """Stats for a product with no sales in the window."""
        return cls(product_id=product_id, total_quantity=0, active_days=1)

    @property
    def has_history(self) -> bool:
        return self.total_quantity > 0

    def average_daily_sales(self, window_days: int = DEMAND_WINDOW_DAYS) -> float:
        return self.total_quantity / min(self.active_days, window_days)


def demand_window_start(as_of: datetime, window_days: int = DEMAND_WINDOW_DAYS) -> datetime:
    """Inclusive lower bound of the trailing demand window."""
    if window_days < 1:
        raise ValueError(f"window_days must be >= 1, got {window_days}")
    return as_of - timedelta(days=window_days)


@traced_engine("demand", "1.0", fingerprint_fields=("window_days",))
def aggregate_demand(
    sale_lines: Iterable[SaleLine],
    window_days: int = DEMAND_WINDOW_DAYS,
) -> dict[UUID, DemandStats]:
    """
    Group sale lines by product.

    Returns:
        product_id -> DemandStats for every product with at least one
        counted line.  Products with no lines are absent; callers use
        ``DemandStats.empty`` for them.
    """
    if window_days < 1:
        raise ValueError(f"window_days must be >= 1, got {window_days}")

    totals: dict[UUID, int] = {}
    days: dict[UUID, set[date]] = {}
    skipped = 0

    for line in sale_lines:
        if line.quantity <= 0:
            skipped += 1
            logger.warning(
                "sale_line_ignored",
                extra={
                    "product_id": str(line.product_id),
                    "quantity": line.quantity,
                    "reason": "non_positive_quantity",
                },
            )
            continue
        totals[line.product_id] = totals.get(line.product_id, 0) + line.quantity
        days.setdefault(line.product_id, set()).add(line.sale_date)

    result = {
        product_id: DemandStats(
            product_id=product_id,
            total_quantity=total,
            active_days=max(1, min(len(days[product_id]), window_days)),
        )
        for product_id, total in totals.items()
    }

    logger.debug(
        "demand_aggregated",
        extra={"product_count": len(result), "skipped_lines": skipped},
    )
    return result
