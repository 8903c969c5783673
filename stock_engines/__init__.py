"""
Module: stock_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    replenishment engines.  This is the canonical import surface for
    stock_modules.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import stock_kernel.domain.values and the kernel logger.
    MUST NOT import stock_config or stock_modules.

Invariants enforced:
    - Purity: engines NEVER read the clock.  Window boundaries are
      computed from an explicit ``as_of`` passed by the service.
    - Determinism: identical inputs always produce identical outputs.
    - Demand rates are float; supplier prices and cost assumptions stay
      Decimal until they enter the EOQ formula.

Usage:
    from stock_engines.demand import aggregate_demand
    from stock_engines.reorder import ReorderCalculator
    from stock_engines.replenishment_report import build_replenishment_report
"""

from stock_engines.branch_stock import BranchStockStatus, classify_branch_stock
from stock_engines.demand import (
    DEMAND_WINDOW_DAYS,
    DemandStats,
    SaleLine,
    aggregate_demand,
    demand_window_start,
)
from stock_engines.reorder import (
    ReorderCalculator,
    ReorderResult,
    resolve_lead_time,
    z_score_for,
)
from stock_engines.replenishment_report import (
    NO_DEMAND_SENTINEL_DAYS,
    UNKNOWN_SUPPLIER_KEY,
    AlertPriority,
    PurchaseSuggestionLine,
    ReplenishmentReport,
    StockAlert,
    SupplierAlertGroup,
    build_replenishment_report,
    classify_priority,
    days_until_stockout,
)
from stock_engines.tracer import traced_engine

__all__ = [
    "AlertPriority",
    "BranchStockStatus",
    "DEMAND_WINDOW_DAYS",
    "DemandStats",
    "NO_DEMAND_SENTINEL_DAYS",
    "PurchaseSuggestionLine",
    "ReorderCalculator",
    "ReorderResult",
    "ReplenishmentReport",
    "SaleLine",
    "StockAlert",
    "SupplierAlertGroup",
    "UNKNOWN_SUPPLIER_KEY",
    "aggregate_demand",
    "build_replenishment_report",
    "classify_branch_stock",
    "classify_priority",
    "days_until_stockout",
    "demand_window_start",
    "resolve_lead_time",
    "traced_engine",
    "z_score_for",
]
