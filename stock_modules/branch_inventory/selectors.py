"""
Branch inventory read side (``stock_modules.branch_inventory.selectors``).

Read-only queries over the branch ledger.  Returns DTOs, never ORM rows.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select

from stock_engines.branch_stock import classify_branch_stock
from stock_kernel.exceptions import BranchNotFoundError
from stock_kernel.selectors.base import BaseSelector
from stock_modules.branch_inventory.models import (
    Branch,
    BranchStockLine,
    LedgerEntry,
    ShortfallRecord,
)
from stock_modules.branch_inventory.orm import (
    BranchInventoryModel,
    BranchInventoryShortfallModel,
    BranchModel,
)
from stock_modules.replenishment.orm import ProductModel


class BranchInventorySelector(BaseSelector):
    """Queries over branches and their ledger entries."""

    def branch(self, branch_id: UUID) -> Branch | None:
        model = self.session.get(BranchModel, branch_id)
        return model.to_dto() if model else None

    def entry(self, branch_id: UUID, product_id: UUID) -> LedgerEntry | None:
        model = self.session.execute(
            select(BranchInventoryModel).where(
                BranchInventoryModel.branch_id == branch_id,
                BranchInventoryModel.product_id == product_id,
            )
        ).scalar_one_or_none()
        return model.to_dto() if model else None

    def quantity(self, branch_id: UUID, product_id: UUID) -> int | None:
        """Ledger quantity, or None when the pair has no entry."""
        entry = self.entry(branch_id, product_id)
        return entry.quantity if entry else None

    def branch_stock(self, branch_id: UUID) -> list[BranchStockLine]:
        """
        Every ledger line of a branch, ordered by product name.

        Raises:
            BranchNotFoundError: unknown branch id.
        """
        if self.session.get(BranchModel, branch_id) is None:
            raise BranchNotFoundError(str(branch_id))

        rows = self.session.execute(
            select(BranchInventoryModel, ProductModel)
            .join(ProductModel, ProductModel.id == BranchInventoryModel.product_id)
            .where(BranchInventoryModel.branch_id == branch_id)
            .order_by(ProductModel.name, ProductModel.sku)
        ).all()

        return [
            BranchStockLine(
                product_id=entry.product_id,
                sku=product.sku,
                name=product.name,
                quantity=entry.quantity,
                min_stock_level=entry.min_stock_level,
                max_stock_level=entry.max_stock_level,
                status=classify_branch_stock(
                    entry.quantity, entry.min_stock_level, entry.max_stock_level
                ),
                last_updated=entry.last_updated,
            )
            for entry, product in rows
        ]

    def shortfalls(
        self,
        branch_id: UUID | None = None,
        product_id: UUID | None = None,
    ) -> list[ShortfallRecord]:
        """Clamped deltas, oldest first."""
        stmt = select(BranchInventoryShortfallModel)
        if branch_id is not None:
            stmt = stmt.where(BranchInventoryShortfallModel.branch_id == branch_id)
        if product_id is not None:
            stmt = stmt.where(BranchInventoryShortfallModel.product_id == product_id)
        stmt = stmt.order_by(BranchInventoryShortfallModel.recorded_at)
        return [m.to_dto() for m in self.session.execute(stmt).scalars()]
