"""
Module: stock_modules.replenishment.orm
Responsibility: SQLAlchemy ORM persistence models for the tables the
    replenishment job reads and writes: products, suppliers, supplier
    links, sale lines and the inventory policy.

Architecture position: Modules > Replenishment > ORM.  Inherits from Base
    (stock_kernel.db.base).  Only the columns the replenishment core uses
    are modelled; product and supplier maintenance screens live elsewhere.

Invariants enforced:
    - current_stock, reorder_level, reorder_quantity >= 0 (check constraints).
    - Supplier prices use Decimal (Numeric(38,9)).
    - One supplier link per (supplier, product).

Failure modes:
    - IntegrityError on duplicate SKU or duplicate supplier link.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Float,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stock_kernel.db.base import Base


class ProductModel(Base):
    """
    ORM model for a product's replenishment profile.

    reorder_level, reorder_quantity, average_daily_sales, lead_time and
    last_reorder_calc are written only by the recalculation job.
    current_stock belongs to sale/purchase flows.
    """

    __tablename__ = "products"

    __table_args__ = (
        CheckConstraint("current_stock >= 0", name="ck_products_current_stock"),
        CheckConstraint("reorder_level >= 0", name="ck_products_reorder_level"),
        CheckConstraint(
            "reorder_quantity IS NULL OR reorder_quantity >= 0",
            name="ck_products_reorder_quantity",
        ),
        Index("idx_products_low_stock", "current_stock", "reorder_level"),
    )

    sku: Mapped[str] = mapped_column(String(100), unique=True)
    name: Mapped[str] = mapped_column(String(200))
    current_stock: Mapped[int] = mapped_column(default=0)
    reorder_level: Mapped[int] = mapped_column(default=0)
    reorder_quantity: Mapped[int | None] = mapped_column(nullable=True)
    lead_time: Mapped[int | None] = mapped_column(nullable=True)
    average_daily_sales: Mapped[float] = mapped_column(Float, default=0.0)
    last_reorder_calc: Mapped[datetime | None] = mapped_column(nullable=True)

    supplier_links: Mapped[list["SupplierProductModel"]] = relationship(
        back_populates="product",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<ProductModel {self.sku} stock={self.current_stock}>"


class SupplierModel(Base):
    __tablename__ = "suppliers"

    supplier_name: Mapped[str] = mapped_column(String(200))
    email: Mapped[str | None] = mapped_column(String(200), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)


class SupplierProductModel(Base):
    """Link between a supplier and a product it can deliver."""

    __tablename__ = "supplier_products"

    __table_args__ = (
        UniqueConstraint(
            "supplier_id", "product_id", name="uq_supplier_products_pair"
        ),
        Index("idx_supplier_products_product", "product_id"),
    )

    supplier_id: Mapped[UUID] = mapped_column(ForeignKey("suppliers.id"))
    product_id: Mapped[UUID] = mapped_column(ForeignKey("products.id"))
    lead_time_days: Mapped[int | None] = mapped_column(nullable=True)
    supplier_sku: Mapped[str | None] = mapped_column(String(100), nullable=True)
    supplier_price: Mapped[Decimal | None] = mapped_column(nullable=True)
    is_preferred: Mapped[bool] = mapped_column(Boolean, default=False)

    supplier: Mapped[SupplierModel] = relationship(lazy="joined")
    product: Mapped[ProductModel] = relationship(back_populates="supplier_links")


class SaleLineModel(Base):
    """One sold quantity.  Written by the point-of-sale flow; read-only here."""

    __tablename__ = "sale_lines"

    __table_args__ = (
        Index("idx_sale_lines_occurred_at", "occurred_at"),
        Index("idx_sale_lines_product", "product_id", "occurred_at"),
    )

    product_id: Mapped[UUID] = mapped_column(ForeignKey("products.id"))
    quantity: Mapped[int] = mapped_column()
    occurred_at: Mapped[datetime] = mapped_column()

    def to_dto(self):
        from stock_engines.demand import SaleLine

        return SaleLine(
            product_id=self.product_id,
            quantity=self.quantity,
            occurred_at=self.occurred_at,
        )


class InventoryPolicyModel(Base):
    """
    Stored replenishment policy.

    NULL columns fall back to the configured defaults field by field.
    """

    __tablename__ = "inventory_policies"

    safety_stock_days: Mapped[int | None] = mapped_column(nullable=True)
    default_lead_time_days: Mapped[int | None] = mapped_column(nullable=True)
    service_level: Mapped[float | None] = mapped_column(Float, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
    )
