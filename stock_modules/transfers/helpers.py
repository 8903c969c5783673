"""
Stock Transfer Pure Functions (``stock_modules.transfers.helpers``).

Responsibility
--------------
Stateless pieces of the transfer flow: request validation, transfer
numbering and the ledger plan of a transition.

Architecture
------------
Layer: **Modules** -- pure helper functions.  No I/O, no session, no clock.

Invariants
----------
- ``plan_ledger_deltas`` is the only place that decides which branch a
  transition debits or credits, and by how much.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal, InvalidOperation
from uuid import UUID

from stock_kernel.domain.workflow import Transition
from stock_kernel.exceptions import (
    EmptyTransferError,
    InvalidTransferItemError,
    SameBranchTransferError,
    ValidationError,
)
from stock_modules.branch_inventory.models import LedgerDelta
from stock_modules.transfers.models import (
    StockTransfer,
    TransferAction,
    TransferItemRequest,
    TransferStatus,
)

TRANSFER_NUMBER_PREFIX = "ST-"
TRANSFER_NUMBER_WIDTH = 8


def format_transfer_number(sequence_value: int) -> str:
    """``ST-`` followed by the zero-padded sequence value."""
    if sequence_value <= 0:
        raise ValueError(f"sequence_value must be > 0, got {sequence_value}")
    return f"{TRANSFER_NUMBER_PREFIX}{sequence_value:0{TRANSFER_NUMBER_WIDTH}d}"


def validate_transfer_request(
    from_branch_id: UUID | None,
    to_branch_id: UUID | None,
    items: Sequence[TransferItemRequest],
) -> None:
    """
    Structural checks on a new transfer, before any storage access.

    Raises:
        ValidationError: a branch is missing.
        SameBranchTransferError: source and destination are equal.
        EmptyTransferError: no items.
        InvalidTransferItemError: bad product, quantity or unit cost.
    """
    if from_branch_id is None:
        raise ValidationError("from_branch_id", "is required")
    if to_branch_id is None:
        raise ValidationError("to_branch_id", "is required")
    if from_branch_id == to_branch_id:
        raise SameBranchTransferError(str(from_branch_id))
    if not items:
        raise EmptyTransferError()

    for index, item in enumerate(items):
        if item.product_id is None:
            raise InvalidTransferItemError(index, "product_id is required")
        quantity = item.quantity
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise InvalidTransferItemError(
                index, f"quantity must be an integer, got {quantity!r}"
            )
        if quantity <= 0:
            raise InvalidTransferItemError(
                index, f"quantity must be positive, got {quantity}"
            )
        try:
            unit_cost = Decimal(item.unit_cost)
        except (InvalidOperation, TypeError, ValueError):
            raise InvalidTransferItemError(
                index, f"unit_cost is not a number: {item.unit_cost!r}"
            ) from None
        if not unit_cost.is_finite() or unit_cost < 0:
            raise InvalidTransferItemError(
                index, f"unit_cost must be >= 0, got {item.unit_cost}"
            )


def plan_ledger_deltas(
    transfer: StockTransfer,
    transition: Transition,
) -> list[LedgerDelta]:
    """
    Ledger deltas implied by firing ``transition`` on ``transfer``.

    - ship: ``-qty`` on the source branch
    - receive: ``+qty`` on the destination branch
    - cancel from in_transit: ``+qty`` back on the source branch
    - everything else: no deltas
    """
    if not transition.moves_stock:
        return []

    action = TransferAction(transition.action)
    from_state = TransferStatus(transition.from_state)

    if action is TransferAction.SHIP:
        branch_id, sign = transfer.from_branch_id, -1
    elif action is TransferAction.RECEIVE:
        branch_id, sign = transfer.to_branch_id, 1
    elif action is TransferAction.CANCEL and from_state is TransferStatus.IN_TRANSIT:
        branch_id, sign = transfer.from_branch_id, 1
    else:
        raise ValueError(
            f"Transition {transition.action} from {transition.from_state} "
            "is marked as moving stock but has no ledger rule"
        )

    return [
        LedgerDelta(
            branch_id=branch_id,
            product_id=item.product_id,
            delta=sign * item.quantity_requested,
        )
        for item in transfer.items
    ]
