"""
Stock Transfer Service (``stock_modules.transfers.service``).

Responsibility
--------------
Creates inter-branch stock transfers and drives them through
``STOCK_TRANSFER_WORKFLOW``, applying each transition's ledger effect to
the branch inventory ledger.

Architecture
------------
Layer: **Modules** -- stateful orchestration wrapper.

A transition runs as:

1. parse the action name (rejected before any storage access);
2. hold the in-process lock for the transfer id;
3. load the transfer ``FOR UPDATE``;
4. look up the workflow transition for (current status, action);
5. plan the ledger deltas (pure helper);
6. compare-and-set the status on (status, version);
7. apply the summed deltas through ``BranchLedgerService``;
8. commit.  Any failure rolls back status and ledger together.

Invariants
----------
- At most one in-flight transition per transfer id: the keyed lock
  serializes callers in this process, the status/version compare-and-set
  rejects writers in other processes.  Two concurrent ``ship`` calls
  debit the source branch exactly once.
- A rejected action (unknown name, unknown transfer, illegal from the
  current status, lost compare-and-set) leaves status and ledger untouched.
- shipped_at, received_at and cancelled_at are each stamped exactly once,
  by their own transition.

Failure Modes
-------------
- ``ValidationError`` subclasses for malformed requests.
- ``TransferNotFoundError``, ``BranchNotFoundError``, ``ProductNotFoundError``.
- ``InvalidTransitionError`` (carries current_status).
- ``TransferConcurrencyError`` when another writer moved the transfer first.
- ``SQLAlchemyError`` propagates unmodified after rollback.

Usage::

    service = StockTransferService(session, clock=clock)
    transfer = service.create_transfer(branch_a, branch_b,
                                       [TransferItemRequest(product_id, 20)],
                                       requested_by=actor_id)
    service.transition(transfer.id, "approve", actor_id)
    service.transition(transfer.id, "ship", actor_id)
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from stock_config import get_active_config
from stock_config.schema import StockConfig
from stock_kernel.domain.clock import Clock, SystemClock
from stock_kernel.exceptions import (
    BranchNotFoundError,
    InvalidTransitionError,
    ProductNotFoundError,
    StockKernelError,
    TransferConcurrencyError,
    TransferNotFoundError,
    UnknownTransferActionError,
    ValidationError,
)
from stock_kernel.logging_config import LogContext, get_logger
from stock_kernel.services.lock_service import KeyedLockRegistry
from stock_kernel.services.sequence_service import SequenceService
from stock_modules.branch_inventory.orm import BranchModel
from stock_modules.branch_inventory.service import BranchLedgerService
from stock_modules.replenishment.orm import ProductModel
from stock_modules.transfers.helpers import (
    format_transfer_number,
    plan_ledger_deltas,
    validate_transfer_request,
)
from stock_modules.transfers.models import (
    StockTransfer,
    TransferAction,
    TransferItemRequest,
    TransferStatus,
    TransitionResult,
)
from stock_modules.transfers.orm import StockTransferItemModel, StockTransferModel
from stock_modules.transfers.workflows import STOCK_TRANSFER_WORKFLOW

logger = get_logger("modules.transfers.service")

TRANSFER_LOCKS = KeyedLockRegistry("stock_transfer")

_STAMP_FIELDS: dict[TransferAction, str] = {
    TransferAction.SHIP: "shipped_at",
    TransferAction.RECEIVE: "received_at",
    TransferAction.CANCEL: "cancelled_at",
}


def parse_action(action: TransferAction | str) -> TransferAction:
    """
    Raises:
        UnknownTransferActionError: not a workflow action.
    """
    try:
        return TransferAction(action)
    except ValueError:
        raise UnknownTransferActionError(
            str(action), STOCK_TRANSFER_WORKFLOW.actions
        ) from None


class StockTransferService:
    """
    Orchestrates stock transfer creation and transitions.

    Transaction boundary: each public method commits on success and rolls
    back on failure.  ``BranchLedgerService`` and ``SequenceService`` only
    flush, so a transition and its ledger writes share one transaction.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config: StockConfig | None = None,
        locks: KeyedLockRegistry | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or get_active_config()
        self._locks = locks if locks is not None else TRANSFER_LOCKS
        self._ledger = BranchLedgerService(session, self._clock, self._config.ledger)
        self._sequence = SequenceService(session)

    # =========================================================================
    # Creation
    # =========================================================================

    def _require_branches(self, *branch_ids: UUID) -> None:
        for branch_id in branch_ids:
            if self._session.get(BranchModel, branch_id) is None:
                raise BranchNotFoundError(str(branch_id))

    def _require_products(self, product_ids: Sequence[UUID]) -> None:
        wanted = list(dict.fromkeys(product_ids))
        found = set(
            self._session.execute(
                select(ProductModel.id).where(ProductModel.id.in_(wanted))
            ).scalars()
        )
        for product_id in wanted:
            if product_id not in found:
                raise ProductNotFoundError(str(product_id))

    def create_transfer(
        self,
        from_branch_id: UUID,
        to_branch_id: UUID,
        items: Sequence[TransferItemRequest],
        requested_by: UUID,
        notes: str | None = None,
    ) -> StockTransfer:
        """
        Create a pending transfer.

        Preconditions:
            - Branches exist and differ; at least one item; every item has
              a positive integer quantity and a non-negative unit cost;
              every product exists.

        Postconditions:
            - A ``pending`` transfer with a fresh ``ST-`` number and its
              items is committed.  No ledger change.
        """
        if requested_by is None:
            raise ValidationError("requested_by", "is required")
        validate_transfer_request(from_branch_id, to_branch_id, items)

        try:
            self._require_branches(from_branch_id, to_branch_id)
            self._require_products([item.product_id for item in items])

            number = format_transfer_number(
                self._sequence.next_value(SequenceService.STOCK_TRANSFER)
            )
            now = self._clock.now()
            model = StockTransferModel(
                transfer_number=number,
                from_branch_id=from_branch_id,
                to_branch_id=to_branch_id,
                status=STOCK_TRANSFER_WORKFLOW.initial_state,
                requested_by=requested_by,
                notes=notes,
                version=1,
                created_at=now,
                updated_at=now,
                created_by_id=requested_by,
            )
            model.items = [
                StockTransferItemModel(
                    line_number=index + 1,
                    product_id=item.product_id,
                    quantity_requested=item.quantity,
                    unit_cost=Decimal(str(item.unit_cost)),
                )
                for index, item in enumerate(items)
            ]
            self._session.add(model)
            self._session.flush()
            transfer = model.to_dto()
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "transfer_created",
            extra={
                "transfer_id": str(transfer.id),
                "transfer_number": transfer.transfer_number,
                "from_branch_id": str(from_branch_id),
                "to_branch_id": str(to_branch_id),
                "item_count": len(transfer.items),
                "total_quantity": transfer.total_quantity,
                "actor_id": str(requested_by),
            },
        )
        return transfer

    # =========================================================================
    # Transitions
    # =========================================================================

    def _load_for_update(self, transfer_id: UUID) -> StockTransferModel:
        model = self._session.execute(
            select(StockTransferModel)
            .where(StockTransferModel.id == transfer_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if model is None:
            raise TransferNotFoundError(str(transfer_id))
        return model

    def _compare_and_set_status(
        self,
        transfer_id: UUID,
        expected_status: str,
        expected_version: int,
        new_status: str,
        actor_id: UUID,
        now: datetime,
        fields: dict[str, Any] | None = None,
    ) -> int:
        """
        Move the status only if (status, version) are still what we read.

        Returns:
            The new version.

        Raises:
            TransferConcurrencyError: another writer got there first.
        """
        new_version = expected_version + 1
        result = self._session.execute(
            update(StockTransferModel)
            .where(
                StockTransferModel.id == transfer_id,
                StockTransferModel.status == expected_status,
                StockTransferModel.version == expected_version,
            )
            .values(
                status=new_status,
                version=new_version,
                updated_at=now,
                updated_by_id=actor_id,
                **(fields or {}),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise TransferConcurrencyError(
                str(transfer_id), expected_status, expected_version
            )
        return new_version

    def transition(
        self,
        transfer_id: UUID,
        action: TransferAction | str,
        actor_id: UUID,
        approved_by: UUID | None = None,
    ) -> TransitionResult:
        """
        Fire ``action`` on a transfer.

        Args:
            transfer_id: Transfer to move.
            action: approve, ship, receive or cancel.
            actor_id: Caller identity, already authorized.
            approved_by: Approver recorded by ``approve``; defaults to
                ``actor_id``.

        Postconditions:
            - On success the new status, its timestamp and every ledger
              delta are committed together.
            - On any exception nothing is committed.
        """
        parsed = parse_action(action)

        with self._locks.hold(transfer_id), LogContext.bind(
            transfer_id=str(transfer_id), actor_id=str(actor_id)
        ):
            try:
                model = self._load_for_update(transfer_id)
                current = model.status
                transition = STOCK_TRANSFER_WORKFLOW.transition_for(current, parsed.value)
                if transition is None:
                    raise InvalidTransitionError(str(transfer_id), parsed.value, current)

                transfer = model.to_dto()
                deltas = plan_ledger_deltas(transfer, transition)
                now = self._clock.now()

                fields: dict[str, Any] = {}
                if parsed is TransferAction.APPROVE:
                    fields["approved_by"] = approved_by or actor_id
                stamp = _STAMP_FIELDS.get(parsed)
                if stamp is not None:
                    fields[stamp] = now

                new_version = self._compare_and_set_status(
                    transfer_id,
                    expected_status=current,
                    expected_version=model.version,
                    new_status=transition.to_state,
                    actor_id=actor_id,
                    now=now,
                    fields=fields,
                )
                self._session.expire(model)

                ledger_results = self._ledger.apply_deltas(
                    deltas, source_ref=transfer.transfer_number
                )
                self._session.commit()
            except StockKernelError as exc:
                self._session.rollback()
                logger.warning(
                    "transfer_transition_rejected",
                    extra={"action": parsed.value, "error_code": exc.code},
                )
                raise
            except Exception:
                self._session.rollback()
                raise

            logger.info(
                "transfer_transitioned",
                extra={
                    "transfer_number": transfer.transfer_number,
                    "action": parsed.value,
                    "from_status": current,
                    "to_status": transition.to_state,
                    "version": new_version,
                    "ledger_deltas": len(ledger_results),
                },
            )

            return TransitionResult(
                transfer_id=transfer.id,
                transfer_number=transfer.transfer_number,
                action=parsed,
                previous_status=TransferStatus(current),
                new_status=TransferStatus(transition.to_state),
                version=new_version,
                ledger_results=ledger_results,
            )
