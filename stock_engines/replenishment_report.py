"""
Module: stock_engines.replenishment_report
Responsibility:
    Derive low-stock alerts from recalculated product profiles: days until
    stockout, urgency, and a per-supplier grouping that doubles as the
    purchase-order suggestion list.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Only products with current_stock strictly below reorder_level are
      alerted.  A product sitting exactly on its reorder level is not.
    - A product without measurable demand is reported with
      days_until_stockout = 999.
    - Every alert lands in exactly one supplier bucket; products without a
      linked supplier go to the "unknown" bucket.

Failure modes:
    - ValueError if default_lead_time is not positive.

Usage:
    from stock_engines.replenishment_report import build_replenishment_report

    report = build_replenishment_report(profiles, default_lead_time=3)
    report.critical_alerts
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from uuid import UUID

from stock_engines.tracer import traced_engine
from stock_kernel.domain.values import ProductProfile
from stock_kernel.logging_config import get_logger

logger = get_logger("engines.replenishment_report")

NO_DEMAND_SENTINEL_DAYS = 999
UNKNOWN_SUPPLIER_KEY = "unknown"
UNKNOWN_SUPPLIER_NAME = "Unknown"


class AlertPriority(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"


@dataclass(frozen=True)
class StockAlert:
    """One low-stock product with its urgency and supplier details."""

    product_id: UUID
    sku: str
    name: str
    current_stock: int
    reorder_level: int
    reorder_quantity: int | None
    average_daily_sales: float
    lead_time: int
    days_until_stockout: int
    needs_reorder: bool
    priority: AlertPriority
    supplier_key: str
    supplier_name: str
    supplier_sku: str | None = None
    supplier_price: Decimal | None = None

    @property
    def has_supplier(self) -> bool:
        return self.supplier_key != UNKNOWN_SUPPLIER_KEY

    def to_dict(self) -> dict:
        return {
            "product_id": str(self.product_id),
            "sku": self.sku,
            "name": self.name,
            "current_stock": self.current_stock,
            "reorder_level": self.reorder_level,
            "reorder_quantity": self.reorder_quantity,
            "average_daily_sales": self.average_daily_sales,
            "lead_time": self.lead_time,
            "days_until_stockout": self.days_until_stockout,
            "needs_reorder": self.needs_reorder,
            "priority": self.priority.value,
            "supplier_id": self.supplier_key,
            "supplier_name": self.supplier_name,
            "supplier_sku": self.supplier_sku,
            "supplier_price": (
                str(self.supplier_price) if self.supplier_price is not None else None
            ),
        }


@dataclass(frozen=True)
class PurchaseSuggestionLine:
    """Suggested order line for one product from one supplier."""

    product_id: UUID
    product_name: str
    sku: str
    current_stock: int
    reorder_level: int
    suggested_quantity: int | None
    supplier_sku: str | None = None
    supplier_price: Decimal | None = None

    def to_dict(self) -> dict:
        return {
            "product_id": str(self.product_id),
            "product_name": self.product_name,
            "sku": self.sku,
            "current_stock": self.current_stock,
            "reorder_level": self.reorder_level,
            "suggested_quantity": self.suggested_quantity,
            "supplier_sku": self.supplier_sku,
            "supplier_price": (
                str(self.supplier_price) if self.supplier_price is not None else None
            ),
        }


@dataclass(frozen=True)
class SupplierAlertGroup:
    supplier_key: str
    supplier_name: str
    alerts: tuple[StockAlert, ...] = ()

    def to_dict(self) -> dict:
        return {
            "supplier_name": self.supplier_name,
            "products": [a.to_dict() for a in self.alerts],
        }


@dataclass(frozen=True)
class ReplenishmentReport:
    """
    Low-stock report.

    Contract:
        ``alerts`` keeps input order.  ``alerts_by_supplier`` preserves the
        order in which suppliers were first seen.
    """

    alerts: tuple[StockAlert, ...] = ()
    alerts_by_supplier: dict[str, SupplierAlertGroup] = field(default_factory=dict)

    @property
    def low_stock_count(self) -> int:
        return len(self.alerts)

    @property
    def critical_alerts(self) -> int:
        return sum(1 for a in self.alerts if a.priority is AlertPriority.CRITICAL)

    def purchase_order_suggestions(self) -> dict[str, tuple[PurchaseSuggestionLine, ...]]:
        """Suggested lines per supplier.  The unknown bucket is left out."""
        suggestions: dict[str, tuple[PurchaseSuggestionLine, ...]] = {}
        for key, group in self.alerts_by_supplier.items():
            if key == UNKNOWN_SUPPLIER_KEY:
                continue
            suggestions[key] = tuple(
                PurchaseSuggestionLine(
                    product_id=a.product_id,
                    product_name=a.name,
                    sku=a.sku,
                    current_stock=a.current_stock,
                    reorder_level=a.reorder_level,
                    suggested_quantity=a.reorder_quantity,
                    supplier_sku=a.supplier_sku,
                    supplier_price=a.supplier_price,
                )
                for a in group.alerts
            )
        return suggestions

    def to_dict(self) -> dict:
        return {
            "low_stock_count": self.low_stock_count,
            "critical_alerts": self.critical_alerts,
            "alerts_by_supplier": {
                k: g.to_dict() for k, g in self.alerts_by_supplier.items()
            },
            "alerts": [a.to_dict() for a in self.alerts],
        }


def is_below_reorder_level(current_stock: int, reorder_level: int) -> bool:
    return current_stock < reorder_level


def days_until_stockout(
    current_stock: int,
    average_daily_sales: float,
    no_demand_days: int = NO_DEMAND_SENTINEL_DAYS,
) -> int:
    """Whole days of cover at the current sales rate, 999 with no demand."""
    if average_daily_sales > 0:
        return math.floor(current_stock / average_daily_sales)
    return no_demand_days


def classify_priority(days_left: int, lead_time: int) -> AlertPriority:
    if days_left <= lead_time:
        return AlertPriority.CRITICAL
    if days_left <= 2 * lead_time:
        return AlertPriority.HIGH
    return AlertPriority.MEDIUM


def build_alert(
    profile: ProductProfile,
    default_lead_time: int,
    no_demand_days: int = NO_DEMAND_SENTINEL_DAYS,
) -> StockAlert:
    if profile.lead_time and profile.lead_time > 0:
        lead_time = profile.lead_time
    else:
        lead_time = default_lead_time
    days_left = days_until_stockout(
        profile.current_stock, profile.average_daily_sales, no_demand_days
    )
    supplier = profile.supplier

    return StockAlert(
        product_id=profile.product_id,
        sku=profile.sku,
        name=profile.name,
        current_stock=profile.current_stock,
        reorder_level=profile.reorder_level,
        reorder_quantity=profile.reorder_quantity,
        average_daily_sales=profile.average_daily_sales,
        lead_time=lead_time,
        days_until_stockout=days_left,
        needs_reorder=days_left <= lead_time,
        priority=classify_priority(days_left, lead_time),
        supplier_key=str(supplier.supplier_id) if supplier else UNKNOWN_SUPPLIER_KEY,
        supplier_name=supplier.supplier_name if supplier else UNKNOWN_SUPPLIER_NAME,
        supplier_sku=supplier.supplier_sku if supplier else None,
        supplier_price=supplier.supplier_price if supplier else None,
    )


@traced_engine("replenishment_report", "1.0", fingerprint_fields=("default_lead_time",))
def build_replenishment_report(
    products: Iterable[ProductProfile],
    default_lead_time: int,
    no_demand_days: int = NO_DEMAND_SENTINEL_DAYS,
) -> ReplenishmentReport:
    """
    Build the low-stock report.

    Args:
        products: Candidate profiles.  Usually pre-filtered by the
            selector; the strict below-reorder-level test is applied again
            here.
        default_lead_time: Policy lead time for products without their own.
        no_demand_days: Days-until-stockout reported for products with no
            measurable demand.
    """
    if default_lead_time <= 0:
        raise ValueError(f"default_lead_time must be > 0, got {default_lead_time}")

    alerts: list[StockAlert] = []
    grouped: dict[str, list[StockAlert]] = {}
    names: dict[str, str] = {}

    for profile in products:
        if not is_below_reorder_level(profile.current_stock, profile.reorder_level):
            continue
        alert = build_alert(profile, default_lead_time, no_demand_days)
        alerts.append(alert)
        grouped.setdefault(alert.supplier_key, []).append(alert)
        names.setdefault(alert.supplier_key, alert.supplier_name)

    report = ReplenishmentReport(
        alerts=tuple(alerts),
        alerts_by_supplier={
            key: SupplierAlertGroup(
                supplier_key=key,
                supplier_name=names[key],
                alerts=tuple(group),
            )
            for key, group in grouped.items()
        },
    )
    logger.debug(
        "replenishment_report_built",
        extra={
            "low_stock_count": report.low_stock_count,
            "critical_alerts": report.critical_alerts,
            "supplier_buckets": len(report.alerts_by_supplier),
        },
    )
    return report
