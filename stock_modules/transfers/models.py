"""
Stock Transfer Domain Models (``stock_modules.transfers.models``).

Responsibility
--------------
Frozen value objects for inter-branch stock transfers: the transfer and
its items, the request used to create one, the outcome of a transition,
and the summary rows of the transfer list.

Invariants
----------
- ``quantity_requested`` is a positive integer and never changes after
  the transfer exists.  Ship, receive and the compensating cancel all
  move exactly this quantity.
- ``unit_cost`` is informational Decimal, default 0.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from stock_modules.branch_inventory.models import LedgerDeltaResult


class TransferStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    IN_TRANSIT = "in_transit"
    RECEIVED = "received"
    CANCELLED = "cancelled"


class TransferAction(str, Enum):
    APPROVE = "approve"
    SHIP = "ship"
    RECEIVE = "receive"
    CANCEL = "cancel"


@dataclass(frozen=True)
class TransferItemRequest:
    """One requested line of a new transfer."""

    product_id: UUID
    quantity: int
    unit_cost: Decimal = Decimal("0")


@dataclass(frozen=True)
class TransferItem:
    id: UUID
    product_id: UUID
    quantity_requested: int
    unit_cost: Decimal

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "product_id": str(self.product_id),
            "quantity_requested": self.quantity_requested,
            "unit_cost": str(self.unit_cost),
        }


@dataclass(frozen=True)
class StockTransfer:
    id: UUID
    transfer_number: str
    from_branch_id: UUID
    to_branch_id: UUID
    status: TransferStatus
    requested_by: UUID
    approved_by: UUID | None
    notes: str | None
    created_at: datetime
    shipped_at: datetime | None
    received_at: datetime | None
    cancelled_at: datetime | None
    version: int
    items: tuple[TransferItem, ...] = ()

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity_requested for item in self.items)

    def to_dict(self) -> dict:
        def _ts(value: datetime | None) -> str | None:
            return value.isoformat() if value else None

        return {
            "id": str(self.id),
            "transfer_number": self.transfer_number,
            "from_branch_id": str(self.from_branch_id),
            "to_branch_id": str(self.to_branch_id),
            "status": self.status.value,
            "requested_by": str(self.requested_by),
            "approved_by": str(self.approved_by) if self.approved_by else None,
            "notes": self.notes,
            "created_at": _ts(self.created_at),
            "shipped_at": _ts(self.shipped_at),
            "received_at": _ts(self.received_at),
            "cancelled_at": _ts(self.cancelled_at),
            "version": self.version,
            "items": [item.to_dict() for item in self.items],
        }


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of one committed transfer transition."""

    transfer_id: UUID
    transfer_number: str
    action: TransferAction
    previous_status: TransferStatus
    new_status: TransferStatus
    version: int
    ledger_results: tuple[LedgerDeltaResult, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "transfer_id": str(self.transfer_id),
            "transfer_number": self.transfer_number,
            "action": self.action.value,
            "previous_status": self.previous_status.value,
            "new_status": self.new_status.value,
            "version": self.version,
            "ledger": [
                {
                    "branch_id": str(r.branch_id),
                    "product_id": str(r.product_id),
                    "delta": r.delta,
                    "quantity_before": r.quantity_before,
                    "quantity_after": r.quantity_after,
                    "shortfall": r.shortfall,
                }
                for r in self.ledger_results
            ],
        }


@dataclass(frozen=True)
class TransferSummary:
    """Row of the transfer list, with branch names resolved."""

    id: UUID
    transfer_number: str
    status: TransferStatus
    from_branch_id: UUID
    from_branch_name: str
    to_branch_id: UUID
    to_branch_name: str
    requested_by: UUID
    approved_by: UUID | None
    item_count: int
    total_quantity: int
    created_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "transfer_number": self.transfer_number,
            "status": self.status.value,
            "from_branch": {"id": str(self.from_branch_id), "name": self.from_branch_name},
            "to_branch": {"id": str(self.to_branch_id), "name": self.to_branch_name},
            "requested_by": str(self.requested_by),
            "approved_by": str(self.approved_by) if self.approved_by else None,
            "item_count": self.item_count,
            "total_quantity": self.total_quantity,
            "created_at": self.created_at.isoformat(),
        }
