"""
Replenishment read side (``stock_modules.replenishment.selectors``).

Responsibility
--------------
Reads products with their linked supplier, the demand window's sale lines
and the stored inventory policy, and returns them as kernel value objects.

Invariants
----------
- Read-only: never adds, flushes or commits.
- The linked supplier of a product is its preferred link, otherwise its
  first link by supplier name.  With a supplier filter, the link to that
  supplier is used.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from uuid import UUID

from sqlalchemy import select

from stock_engines.demand import SaleLine
from stock_kernel.domain.values import InventoryPolicy, ProductProfile, SupplierLink
from stock_kernel.selectors.base import BaseSelector
from stock_modules.replenishment.orm import (
    InventoryPolicyModel,
    ProductModel,
    SaleLineModel,
    SupplierModel,
    SupplierProductModel,
)


def _link_sort_key(link: SupplierProductModel) -> tuple:
    return (not link.is_preferred, link.supplier.supplier_name, str(link.supplier_id))


def linked_supplier(
    product: ProductModel,
    supplier_id: UUID | None = None,
) -> SupplierLink | None:
    links = product.supplier_links
    if supplier_id is not None:
        links = [link for link in links if link.supplier_id == supplier_id]
    if not links:
        return None
    link = sorted(links, key=_link_sort_key)[0]
    return SupplierLink(
        supplier_id=link.supplier_id,
        supplier_name=link.supplier.supplier_name,
        supplier_sku=link.supplier_sku,
        supplier_price=link.supplier_price,
        lead_time_days=link.lead_time_days,
        is_preferred=link.is_preferred,
    )


def to_profile(product: ProductModel, supplier_id: UUID | None = None) -> ProductProfile:
    return ProductProfile(
        product_id=product.id,
        sku=product.sku,
        name=product.name,
        current_stock=product.current_stock,
        reorder_level=product.reorder_level,
        reorder_quantity=product.reorder_quantity,
        lead_time=product.lead_time,
        average_daily_sales=product.average_daily_sales or 0.0,
        last_reorder_calc=product.last_reorder_calc,
        supplier=linked_supplier(product, supplier_id),
    )


class ReplenishmentSelector(BaseSelector):
    """Queries feeding the recalculation job and the low-stock report."""

    def product_exists(self, product_id: UUID) -> bool:
        return self.session.get(ProductModel, product_id) is not None

    def supplier_exists(self, supplier_id: UUID) -> bool:
        return self.session.get(SupplierModel, supplier_id) is not None

    def _product_query(self, supplier_id: UUID | None, product_id: UUID | None):
        stmt = select(ProductModel)
        if supplier_id is not None:
            stmt = stmt.where(
                ProductModel.id.in_(
                    select(SupplierProductModel.product_id).where(
                        SupplierProductModel.supplier_id == supplier_id
                    )
                )
            )
        if product_id is not None:
            stmt = stmt.where(ProductModel.id == product_id)
        return stmt.order_by(ProductModel.sku)

    def products(
        self,
        supplier_id: UUID | None = None,
        product_id: UUID | None = None,
    ) -> list[ProductProfile]:
        """Products to recalculate, ordered by SKU."""
        rows = self.session.execute(self._product_query(supplier_id, product_id)).scalars()
        return [to_profile(p, supplier_id) for p in rows]

    def low_stock(self, supplier_id: UUID | None = None) -> list[ProductProfile]:
        """Products with current_stock strictly below reorder_level."""
        stmt = self._product_query(supplier_id, None).where(
            ProductModel.current_stock < ProductModel.reorder_level
        )
        return [to_profile(p, supplier_id) for p in self.session.execute(stmt).scalars()]

    def sales_lines(
        self,
        since: datetime,
        product_ids: Iterable[UUID] | None = None,
    ) -> list[SaleLine]:
        """Sale lines with occurred_at >= since."""
        stmt = select(SaleLineModel).where(SaleLineModel.occurred_at >= since)
        if product_ids is not None:
            ids = list(product_ids)
            if not ids:
                return []
            stmt = stmt.where(SaleLineModel.product_id.in_(ids))
        stmt = stmt.order_by(SaleLineModel.occurred_at)
        return [m.to_dto() for m in self.session.execute(stmt).scalars()]

    def policy(self, defaults: InventoryPolicy) -> InventoryPolicy:
        """
        Stored policy merged over ``defaults``.

        The most recently updated row wins.  NULL columns, or no row at
        all, take the default.
        """
        row = self.session.execute(
            select(InventoryPolicyModel)
            .order_by(InventoryPolicyModel.updated_at.desc())
            .limit(1)
        ).scalar_one_or_none()
        if row is None:
            return defaults

        return InventoryPolicy(
            safety_stock_days=(
                row.safety_stock_days
                if row.safety_stock_days is not None
                else defaults.safety_stock_days
            ),
            default_lead_time_days=(
                row.default_lead_time_days
                if row.default_lead_time_days is not None
                else defaults.default_lead_time_days
            ),
            service_level=(
                float(row.service_level)
                if row.service_level is not None
                else defaults.service_level
            ),
        )
