"""
Branch Inventory Domain Models (``stock_modules.branch_inventory.models``).

Frozen DTOs for the per-(branch, product) stock ledger: the entry itself,
a signed delta request, the outcome of applying one, shortfall records,
and the branch stock lines shown to operators.

Invariants
----------
- Ledger quantities are non-negative integers.
- A ``LedgerDeltaResult`` with ``quantity_after is None`` means nothing
  was written (non-positive delta against a missing entry).
"""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from stock_engines.branch_stock import BranchStockStatus


@dataclass(frozen=True)
class Branch:
    id: UUID
    code: str
    name: str
    is_active: bool = True


@dataclass(frozen=True)
class LedgerEntry:
    """Authoritative stock quantity for one product at one branch."""

    id: UUID
    branch_id: UUID
    product_id: UUID
    quantity: int
    min_stock_level: int
    max_stock_level: int
    last_updated: datetime


@dataclass(frozen=True)
class LedgerDelta:
    """Signed quantity change requested for one (branch, product) pair."""

    branch_id: UUID
    product_id: UUID
    delta: int

    @property
    def key(self) -> tuple[UUID, UUID]:
        return (self.branch_id, self.product_id)


@dataclass(frozen=True)
class LedgerDeltaResult:
    branch_id: UUID
    product_id: UUID
    delta: int
    quantity_before: int | None
    quantity_after: int | None
    created: bool = False
    shortfall: int = 0

    @property
    def skipped(self) -> bool:
        return self.quantity_after is None

    @property
    def clamped(self) -> bool:
        return self.shortfall > 0


@dataclass(frozen=True)
class ShortfallRecord:
    """A delta that would have driven a ledger entry below zero."""

    id: UUID
    branch_id: UUID
    product_id: UUID
    requested_delta: int
    quantity_before: int
    shortfall: int
    source_ref: str | None
    recorded_at: datetime


@dataclass(frozen=True)
class BranchStockLine:
    """One product's stock at a branch, classified against its bounds."""

    product_id: UUID
    sku: str
    name: str
    quantity: int
    min_stock_level: int
    max_stock_level: int
    status: BranchStockStatus
    last_updated: datetime

    def to_dict(self) -> dict:
        return {
            "product_id": str(self.product_id),
            "sku": self.sku,
            "name": self.name,
            "quantity": self.quantity,
            "min_stock_level": self.min_stock_level,
            "max_stock_level": self.max_stock_level,
            "status": self.status.value,
            "last_updated": self.last_updated.isoformat(),
        }
