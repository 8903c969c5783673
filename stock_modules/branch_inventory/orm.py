"""
Module: stock_modules.branch_inventory.orm
Responsibility: SQLAlchemy ORM persistence models for branches, the branch
    inventory ledger and ledger shortfall records.

Architecture position: Modules > Branch inventory > ORM.  Inherits from
    Base (stock_kernel.db.base).  Products are referenced by id with NO
    foreign key constraint; they belong to the replenishment module.

Invariants enforced:
    - One ledger row per (branch_id, product_id) -- unique constraint.
    - quantity >= 0 -- check constraint backs the service-level clamp.

Failure modes:
    - IntegrityError on a concurrent first insert for the same pair; the
      ledger service resolves it with a savepoint retry.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from stock_kernel.db.base import Base


class BranchModel(Base):
    """ORM model for a store branch."""

    __tablename__ = "branches"

    code: Mapped[str] = mapped_column(String(50), unique=True)
    name: Mapped[str] = mapped_column(String(200))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    def to_dto(self):
        from stock_modules.branch_inventory.models import Branch

        return Branch(
            id=self.id,
            code=self.code,
            name=self.name,
            is_active=self.is_active,
        )

    def __repr__(self) -> str:
        return f"<BranchModel {self.code} {self.name}>"


class BranchInventoryModel(Base):
    """
    ORM model for one branch ledger entry.

    Maps to: stock_modules.branch_inventory.models.LedgerEntry.
    """

    __tablename__ = "branch_inventory"

    __table_args__ = (
        UniqueConstraint(
            "branch_id", "product_id", name="uq_branch_inventory_branch_product"
        ),
        CheckConstraint("quantity >= 0", name="ck_branch_inventory_quantity"),
        Index("idx_branch_inventory_product", "product_id"),
    )

    branch_id: Mapped[UUID] = mapped_column(ForeignKey("branches.id"))
    product_id: Mapped[UUID] = mapped_column()
    quantity: Mapped[int] = mapped_column(default=0)
    min_stock_level: Mapped[int] = mapped_column(default=10)
    max_stock_level: Mapped[int] = mapped_column(default=1000)
    last_updated: Mapped[datetime] = mapped_column()

    def to_dto(self):
        from stock_modules.branch_inventory.models import LedgerEntry

        return LedgerEntry(
            id=self.id,
            branch_id=self.branch_id,
            product_id=self.product_id,
            quantity=self.quantity,
            min_stock_level=self.min_stock_level,
            max_stock_level=self.max_stock_level,
            last_updated=self.last_updated,
        )

    def __repr__(self) -> str:
        return (
            f"<BranchInventoryModel branch={self.branch_id} "
            f"product={self.product_id} qty={self.quantity}>"
        )


class BranchInventoryShortfallModel(Base):
    """
    A ledger delta that was clamped at zero.

    Append-only.  ``shortfall`` is the quantity the clamp discarded.
    """

    __tablename__ = "branch_inventory_shortfalls"

    __table_args__ = (
        Index("idx_branch_shortfall_pair", "branch_id", "product_id"),
    )

    branch_id: Mapped[UUID] = mapped_column(ForeignKey("branches.id"))
    product_id: Mapped[UUID] = mapped_column()
    requested_delta: Mapped[int] = mapped_column()
    quantity_before: Mapped[int] = mapped_column()
    shortfall: Mapped[int] = mapped_column()
    source_ref: Mapped[str | None] = mapped_column(String(100), nullable=True)
    recorded_at: Mapped[datetime] = mapped_column()

    def to_dto(self):
        from stock_modules.branch_inventory.models import ShortfallRecord

        return ShortfallRecord(
            id=self.id,
            branch_id=self.branch_id,
            product_id=self.product_id,
            requested_delta=self.requested_delta,
            quantity_before=self.quantity_before,
            shortfall=self.shortfall,
            source_ref=self.source_ref,
            recorded_at=self.recorded_at,
        )
