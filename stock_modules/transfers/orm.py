"""
Module: stock_modules.transfers.orm
Responsibility: SQLAlchemy ORM persistence models for stock transfers and
    their items.

Architecture position: Modules > Transfers > ORM.  Inherits from
    TrackedBase (stock_kernel.db.base); ``created_by_id`` is the requester.

Invariants enforced:
    - transfer_number is unique.
    - from_branch_id != to_branch_id (check constraint).
    - ``version`` increments on every status change.  Status writes are
      compare-and-set on (id, status, version).
    - Items cascade with their transfer and are never edited.

Failure modes:
    - IntegrityError on duplicate transfer_number.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stock_kernel.db.base import Base, TrackedBase


class StockTransferModel(TrackedBase):
    """
    ORM model for a stock transfer header.

    Maps to: stock_modules.transfers.models.StockTransfer.
    """

    __tablename__ = "stock_transfers"

    __table_args__ = (
        CheckConstraint(
            "from_branch_id <> to_branch_id", name="ck_stock_transfers_branches"
        ),
        Index("idx_stock_transfers_status", "status"),
        Index("idx_stock_transfers_from", "from_branch_id"),
        Index("idx_stock_transfers_to", "to_branch_id"),
    )

    transfer_number: Mapped[str] = mapped_column(String(50), unique=True)
    from_branch_id: Mapped[UUID] = mapped_column(ForeignKey("branches.id"))
    to_branch_id: Mapped[UUID] = mapped_column(ForeignKey("branches.id"))
    status: Mapped[str] = mapped_column(String(20), default="pending")
    requested_by: Mapped[UUID] = mapped_column()
    approved_by: Mapped[UUID | None] = mapped_column(nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    shipped_at: Mapped[datetime | None] = mapped_column(nullable=True)
    received_at: Mapped[datetime | None] = mapped_column(nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(nullable=True)
    version: Mapped[int] = mapped_column(default=1)

    items: Mapped[list["StockTransferItemModel"]] = relationship(
        back_populates="transfer",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="StockTransferItemModel.line_number",
    )

    def to_dto(self):
        from stock_modules.transfers.models import StockTransfer, TransferStatus

        return StockTransfer(
            id=self.id,
            transfer_number=self.transfer_number,
            from_branch_id=self.from_branch_id,
            to_branch_id=self.to_branch_id,
            status=TransferStatus(self.status),
            requested_by=self.requested_by,
            approved_by=self.approved_by,
            notes=self.notes,
            created_at=self.created_at,
            shipped_at=self.shipped_at,
            received_at=self.received_at,
            cancelled_at=self.cancelled_at,
            version=self.version,
            items=tuple(item.to_dto() for item in self.items),
        )

    def __repr__(self) -> str:
        return f"<StockTransferModel {self.transfer_number} {self.status}>"


class StockTransferItemModel(Base):
    """One product line of a transfer.  Immutable once written."""

    __tablename__ = "stock_transfer_items"

    __table_args__ = (
        CheckConstraint(
            "quantity_requested > 0", name="ck_stock_transfer_items_quantity"
        ),
        Index("idx_stock_transfer_items_transfer", "transfer_id"),
    )

    transfer_id: Mapped[UUID] = mapped_column(ForeignKey("stock_transfers.id"))
    line_number: Mapped[int] = mapped_column()
    product_id: Mapped[UUID] = mapped_column()
    quantity_requested: Mapped[int] = mapped_column()
    unit_cost: Mapped[Decimal] = mapped_column(default=Decimal("0"))

    transfer: Mapped[StockTransferModel] = relationship(back_populates="items")

    def to_dto(self):
        from stock_modules.transfers.models import TransferItem

        return TransferItem(
            id=self.id,
            product_id=self.product_id,
            quantity_requested=self.quantity_requested,
            unit_cost=self.unit_cost,
        )
