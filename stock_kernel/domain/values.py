"""
Values -- Immutable, self-validating replenishment value objects.

Responsibility:
    Provides the value types every replenishment computation is expressed
    in: the inventory policy resolved for a run, the EOQ cost assumptions,
    a product's replenishment profile and its linked supplier.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by stock_engines (the only kernel module engines may use) and
    by stock_config, which builds its schema on top of these types.

Invariants enforced:
    - A policy is resolved once per recalculation run and passed down as an
      immutable value.  It never overwrites product-level overrides.
    - Stock quantities are non-negative integers.  Costs and prices are
      Decimal.  Demand rates are float.

Failure modes:
    - ValueError on construction with out-of-range values.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID


@dataclass(frozen=True, slots=True)
class InventoryPolicy:
    """
    Global replenishment policy.

    Guarantees:
        - safety_stock_days >= 0
        - default_lead_time_days > 0
        - 0 < service_level < 1
    """

    safety_stock_days: int = 7
    default_lead_time_days: int = 3
    service_level: float = 0.95

    def __post_init__(self) -> None:
        if self.safety_stock_days < 0:
            raise ValueError(
                f"safety_stock_days must be >= 0, got {self.safety_stock_days}"
            )
        if self.default_lead_time_days <= 0:
            raise ValueError(
                f"default_lead_time_days must be > 0, got {self.default_lead_time_days}"
            )
        if not 0 < self.service_level < 1:
            raise ValueError(
                f"service_level must be in (0, 1), got {self.service_level}"
            )

    def to_dict(self) -> dict:
        return {
            "safety_stock_days": self.safety_stock_days,
            "default_lead_time_days": self.default_lead_time_days,
            "service_level": self.service_level,
        }


@dataclass(frozen=True, slots=True)
class CostAssumptions:
    """
    Cost inputs to the economic order quantity.

    These are placeholders until supplier catalog costs are wired in;
    they are configuration, not literals.
    """

    ordering_cost: Decimal = Decimal("25")
    holding_cost_rate: Decimal = Decimal("0.2")
    item_cost: Decimal = Decimal("10")
    fallback_reorder_quantity: int = 10

    def __post_init__(self) -> None:
        if self.ordering_cost < 0:
            raise ValueError(f"ordering_cost must be >= 0, got {self.ordering_cost}")
        if self.holding_cost_rate <= 0:
            raise ValueError(
                f"holding_cost_rate must be > 0, got {self.holding_cost_rate}"
            )
        if self.item_cost <= 0:
            raise ValueError(f"item_cost must be > 0, got {self.item_cost}")
        if self.fallback_reorder_quantity < 0:
            raise ValueError(
                "fallback_reorder_quantity must be >= 0, "
                f"got {self.fallback_reorder_quantity}"
            )


@dataclass(frozen=True, slots=True)
class SupplierLink:
    """A product's linked (preferred or first) supplier."""

    supplier_id: UUID
    supplier_name: str
    supplier_sku: str | None = None
    supplier_price: Decimal | None = None
    lead_time_days: int | None = None
    is_preferred: bool = False


@dataclass(frozen=True, slots=True)
class ProductProfile:
    """
    Replenishment view of one product.

    Contract:
        Snapshot of the fields the recalculation job reads and the report
        derives from.  ``supplier`` is the linked supplier, if any.
    """

    product_id: UUID
    sku: str
    name: str
    current_stock: int
    reorder_level: int
    reorder_quantity: int | None
    lead_time: int | None
    average_daily_sales: float
    last_reorder_calc: datetime | None = None
    supplier: SupplierLink | None = None

    def __post_init__(self) -> None:
        if self.current_stock < 0:
            raise ValueError(
                f"current_stock must be >= 0, got {self.current_stock} "
                f"for product {self.product_id}"
            )
        if self.reorder_level < 0:
            raise ValueError(
                f"reorder_level must be >= 0, got {self.reorder_level} "
                f"for product {self.product_id}"
            )

    @property
    def is_below_reorder_level(self) -> bool:
        # Strict: a product sitting exactly on its reorder level is not low.
        return self.current_stock < self.reorder_level
