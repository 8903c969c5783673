"""
Stock transfer read side (``stock_modules.transfers.selectors``).

Read-only queries over transfers.  Returns DTOs, never ORM rows.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.orm import aliased

from stock_kernel.exceptions import TransferNotFoundError
from stock_kernel.selectors.base import BaseSelector
from stock_modules.branch_inventory.orm import BranchModel
from stock_modules.transfers.models import StockTransfer, TransferStatus, TransferSummary
from stock_modules.transfers.orm import StockTransferItemModel, StockTransferModel


class TransferSelector(BaseSelector):
    """Queries over stock transfers."""

    def get(self, transfer_id: UUID) -> StockTransfer | None:
        model = self.session.get(StockTransferModel, transfer_id)
        return model.to_dto() if model else None

    def get_or_raise(self, transfer_id: UUID) -> StockTransfer:
        transfer = self.get(transfer_id)
        if transfer is None:
            raise TransferNotFoundError(str(transfer_id))
        return transfer

    def get_by_number(self, transfer_number: str) -> StockTransfer | None:
        model = self.session.execute(
            select(StockTransferModel).where(
                StockTransferModel.transfer_number == transfer_number
            )
        ).scalar_one_or_none()
        return model.to_dto() if model else None

    def list_transfers(
        self,
        status: TransferStatus | str | None = None,
        branch_id: UUID | None = None,
        limit: int | None = None,
    ) -> list[TransferSummary]:
        """
        Transfers with branch names, newest first.

        Args:
            status: Only transfers in this status.
            branch_id: Only transfers from or to this branch.
            limit: Maximum number of rows.
        """
        from_branch = aliased(BranchModel)
        to_branch = aliased(BranchModel)
        totals = (
            select(
                StockTransferItemModel.transfer_id.label("transfer_id"),
                func.count(StockTransferItemModel.id).label("item_count"),
                func.sum(StockTransferItemModel.quantity_requested).label("total_quantity"),
            )
            .group_by(StockTransferItemModel.transfer_id)
            .subquery()
        )

        stmt = (
            select(
                StockTransferModel,
                from_branch.name,
                to_branch.name,
                totals.c.item_count,
                totals.c.total_quantity,
            )
            .join(from_branch, from_branch.id == StockTransferModel.from_branch_id)
            .join(to_branch, to_branch.id == StockTransferModel.to_branch_id)
            .outerjoin(totals, totals.c.transfer_id == StockTransferModel.id)
        )
        if status is not None:
            stmt = stmt.where(StockTransferModel.status == TransferStatus(status).value)
        if branch_id is not None:
            stmt = stmt.where(
                or_(
                    StockTransferModel.from_branch_id == branch_id,
                    StockTransferModel.to_branch_id == branch_id,
                )
            )
        stmt = stmt.order_by(
            StockTransferModel.created_at.desc(),
            StockTransferModel.transfer_number.desc(),
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        return [
            TransferSummary(
                id=model.id,
                transfer_number=model.transfer_number,
                status=TransferStatus(model.status),
                from_branch_id=model.from_branch_id,
                from_branch_name=from_name,
                to_branch_id=model.to_branch_id,
                to_branch_name=to_name,
                requested_by=model.requested_by,
                approved_by=model.approved_by,
                item_count=item_count or 0,
                total_quantity=int(total_quantity or 0),
                created_at=model.created_at,
            )
            for model, from_name, to_name, item_count, total_quantity in self.session.execute(stmt)
        ]
