"""
Replenishment Service (``stock_modules.replenishment.service``).

Responsibility
--------------
Entry point of the recalculation job: resolve the policy once, aggregate
the demand window, compute reorder thresholds for every selected product,
write them back, and report what is now below its reorder level.

Architecture
------------
Layer: **Modules** -- stateful orchestration wrapper.

1. ``ReplenishmentSelector`` reads products, sale lines and the policy.
2. ``aggregate_demand`` and ``ReorderCalculator`` (pure engines) compute.
3. Results are written to ``products`` in one transaction.
4. ``build_replenishment_report`` derives alerts and order suggestions.

Invariants
----------
- The policy is resolved once per run and passed down unchanged.
- A product whose calculation raises anything other than a storage error
  is skipped and reported as a ``PartialComputationError``; the rest of
  the batch still commits.
- Each public write method owns its transaction boundary: commit on
  success, rollback and re-raise on failure.

Failure Modes
-------------
- ``SupplierNotFoundError`` / ``ProductNotFoundError`` for unknown filter ids.
- ``SQLAlchemyError`` propagates unmodified after rollback.

Usage::

    service = ReplenishmentService(session, clock=clock)
    result = service.recalculate(supplier_id=supplier_id)
    result.products_updated, result.failures
"""

from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID, uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stock_config import get_active_config
from stock_config.schema import StockConfig
from stock_engines.demand import DemandStats, aggregate_demand, demand_window_start
from stock_engines.reorder import ReorderCalculator, ReorderResult, resolve_lead_time
from stock_engines.replenishment_report import (
    ReplenishmentReport,
    build_replenishment_report,
)
from stock_kernel.domain.clock import Clock, SystemClock
from stock_kernel.domain.values import InventoryPolicy, ProductProfile
from stock_kernel.exceptions import (
    PartialComputationError,
    ProductNotFoundError,
    SupplierNotFoundError,
)
from stock_kernel.logging_config import LogContext, get_logger
from stock_modules.replenishment.models import RecalculationResult
from stock_modules.replenishment.orm import ProductModel
from stock_modules.replenishment.selectors import ReplenishmentSelector

logger = get_logger("modules.replenishment.service")


class ReplenishmentService:
    """
    Recalculates reorder points and builds the low-stock report.

    Contract
    --------
    ``recalculate`` is a best-effort batch: it returns partial results
    rather than raising when individual products fail.  Filters that name
    a supplier or product that does not exist are rejected up front.

    Non-goals
    ---------
    - Does NOT touch ``current_stock``.
    - Does NOT create purchase orders; it only suggests order lines.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config: StockConfig | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or get_active_config()
        self._selector = ReplenishmentSelector(session)

    def resolve_policy(self) -> InventoryPolicy:
        """Stored policy over the configured defaults."""
        return self._selector.policy(self._config.policy)

    def _check_filters(self, supplier_id: UUID | None, product_id: UUID | None) -> None:
        if supplier_id is not None and not self._selector.supplier_exists(supplier_id):
            raise SupplierNotFoundError(str(supplier_id))
        if product_id is not None and not self._selector.product_exists(product_id):
            raise ProductNotFoundError(str(product_id))

    def _calculate_all(
        self,
        products: Sequence[ProductProfile],
        demand: dict[UUID, DemandStats],
        calculator: ReorderCalculator,
        policy: InventoryPolicy,
    ) -> tuple[list[ReorderResult], list[PartialComputationError]]:
        results: list[ReorderResult] = []
        failures: list[PartialComputationError] = []

        for profile in products:
            pid = profile.product_id
            try:
                lead_time = resolve_lead_time(
                    profile.lead_time,
                    profile.supplier.lead_time_days if profile.supplier else None,
                    policy.default_lead_time_days,
                )
                result = calculator.calculate(
                    stats=demand.get(pid) or DemandStats.empty(pid),
                    lead_time=lead_time,
                    previous_reorder_quantity=profile.reorder_quantity,
                )
            except SQLAlchemyError:
                raise
            except Exception as exc:
                failure = PartialComputationError(str(pid), str(exc))
                failures.append(failure)
                logger.warning(
                    "reorder_product_skipped",
                    extra={"product_id": str(pid), "sku": profile.sku, "reason": str(exc)},
                )
                continue
            results.append(result)

        return results, failures

    def _apply_results(self, results: Sequence[ReorderResult]) -> None:
        now = self._clock.now()
        for result in results:
            product = self._session.get(ProductModel, result.product_id)
            product.average_daily_sales = result.average_daily_sales
            product.reorder_level = result.reorder_level
            product.reorder_quantity = result.reorder_quantity
            product.lead_time = result.lead_time
            product.last_reorder_calc = now
        self._session.flush()

    def recalculate(
        self,
        supplier_id: UUID | None = None,
        product_id: UUID | None = None,
    ) -> RecalculationResult:
        """
        Recalculate reorder thresholds.

        Preconditions:
            - ``supplier_id`` / ``product_id``, when given, exist.

        Postconditions:
            - Every product that computed successfully has its
              average_daily_sales, reorder_level, reorder_quantity,
              lead_time and last_reorder_calc updated and committed.
            - ``result.failures`` lists the products that were skipped.

        Raises:
            SupplierNotFoundError, ProductNotFoundError: unknown filter ids.
        """
        run_id = uuid4()
        with LogContext.bind(run_id=str(run_id)):
            try:
                self._check_filters(supplier_id, product_id)
                policy = self.resolve_policy()
                window = self._config.demand_window_days
                calculator = ReorderCalculator(policy, self._config.costs, window)
                now = self._clock.now()

                products = self._selector.products(supplier_id, product_id)
                filtered = supplier_id is not None or product_id is not None
                lines = self._selector.sales_lines(
                    demand_window_start(now, window),
                    product_ids=[p.product_id for p in products] if filtered else None,
                )
                demand = aggregate_demand(lines, window_days=window)

                results, failures = self._calculate_all(products, demand, calculator, policy)
                self._apply_results(results)
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

            report = self.report(supplier_id, policy=policy)

            logger.info(
                "reorder_recalculation_completed",
                extra={
                    "products_evaluated": len(products),
                    "products_updated": len(results),
                    "products_failed": len(failures),
                    "low_stock_alerts": report.low_stock_count,
                    "supplier_id": str(supplier_id) if supplier_id else None,
                    "product_id": str(product_id) if product_id else None,
                },
            )

            return RecalculationResult(
                run_id=run_id,
                calculated_at=now,
                policy=policy,
                reorder_points=tuple(results),
                low_stock_alerts=report.low_stock_count,
                purchase_order_suggestions=report.purchase_order_suggestions(),
                failures=tuple(failures),
            )

    def report(
        self,
        supplier_id: UUID | None = None,
        policy: InventoryPolicy | None = None,
    ) -> ReplenishmentReport:
        """
        Low-stock report from the stored thresholds.  Read-only.

        Raises:
            SupplierNotFoundError: unknown supplier filter.
        """
        if supplier_id is not None and not self._selector.supplier_exists(supplier_id):
            raise SupplierNotFoundError(str(supplier_id))
        policy = policy or self.resolve_policy()
        return build_replenishment_report(
            self._selector.low_stock(supplier_id),
            default_lead_time=policy.default_lead_time_days,
            no_demand_days=self._config.report.no_demand_sentinel_days,
        )
