"""
Branch Ledger Service (``stock_modules.branch_inventory.service``).

Responsibility
--------------
The single write path for branch stock quantities: apply a signed delta
to one (branch, product) ledger entry with a floor at zero, creating the
entry lazily on its first positive delta.

Architecture
------------
Layer: **Modules** -- flush-only service (``BaseService``).  It never
commits.  The transfer service calls it inside the transaction that also
moves the transfer status, so a transition and all of its ledger effects
commit or roll back together.

Invariants
----------
- quantity >= 0 after every delta.  A delta that would go below zero is
  clamped, and the discarded amount is written to
  ``branch_inventory_shortfalls`` and logged at WARNING.
- A missing entry is only created by a positive delta.  A non-positive
  delta against a missing entry writes no entry; a negative one still
  records its full amount as a shortfall.
- ``apply_deltas`` sums deltas per pair and applies pairs in sorted order,
  so the clamp never depends on the order items were listed in and row
  locks are always taken in the same order.

Failure Modes
-------------
- ``IntegrityError`` on a concurrent first insert is absorbed with a
  savepoint rollback, after which the delta is applied to the row the
  other writer created.
- Any other ``SQLAlchemyError`` propagates; the caller rolls back.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from stock_config.schema import LedgerDefaults
from stock_kernel.domain.clock import Clock, SystemClock
from stock_kernel.logging_config import get_logger
from stock_kernel.services.base import BaseService
from stock_modules.branch_inventory.models import LedgerDelta, LedgerDeltaResult
from stock_modules.branch_inventory.orm import (
    BranchInventoryModel,
    BranchInventoryShortfallModel,
)

logger = get_logger("modules.branch_inventory.service")


def sum_deltas(deltas: Iterable[LedgerDelta]) -> list[LedgerDelta]:
    """Net delta per (branch, product), sorted by pair."""
    totals: dict[tuple[UUID, UUID], int] = {}
    for d in deltas:
        totals[d.key] = totals.get(d.key, 0) + d.delta
    return [
        LedgerDelta(branch_id=branch_id, product_id=product_id, delta=total)
        for (branch_id, product_id), total in sorted(
            totals.items(), key=lambda kv: (str(kv[0][0]), str(kv[0][1]))
        )
    ]


class BranchLedgerService(BaseService):
    """
    Upsert-with-floor writer for the branch inventory ledger.

    Non-goals
    ---------
    - Does NOT commit or roll back.
    - Does NOT enforce min/max stock levels; they are informational.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        defaults: LedgerDefaults | None = None,
    ):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._defaults = defaults or LedgerDefaults()

    def _locked_entry(self, branch_id: UUID, product_id: UUID) -> BranchInventoryModel | None:
        return self.session.execute(
            select(BranchInventoryModel)
            .where(
                BranchInventoryModel.branch_id == branch_id,
                BranchInventoryModel.product_id == product_id,
            )
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def _try_create(
        self, branch_id: UUID, product_id: UUID, quantity: int
    ) -> BranchInventoryModel | None:
        savepoint = self.session.begin_nested()
        try:
            entry = BranchInventoryModel(
                branch_id=branch_id,
                product_id=product_id,
                quantity=quantity,
                min_stock_level=self._defaults.min_stock_level,
                max_stock_level=self._defaults.max_stock_level,
                last_updated=self._clock.now(),
            )
            self.session.add(entry)
            self.session.flush()
            savepoint.commit()
            return entry
        except IntegrityError:
            savepoint.rollback()
            logger.debug(
                "ledger_entry_create_race",
                extra={"branch_id": str(branch_id), "product_id": str(product_id)},
            )
            return None

    def _record_shortfall(
        self,
        branch_id: UUID,
        product_id: UUID,
        delta: int,
        before: int,
        shortfall: int,
        source_ref: str | None,
        now: datetime,
    ) -> None:
        self.session.add(
            BranchInventoryShortfallModel(
                branch_id=branch_id,
                product_id=product_id,
                requested_delta=delta,
                quantity_before=before,
                shortfall=shortfall,
                source_ref=source_ref,
                recorded_at=now,
            )
        )
        logger.warning(
            "ledger_delta_clamped",
            extra={
                "branch_id": str(branch_id),
                "product_id": str(product_id),
                "delta": delta,
                "quantity_before": before,
                "shortfall": shortfall,
                "source_ref": source_ref,
            },
        )

    def apply_delta(
        self,
        branch_id: UUID,
        product_id: UUID,
        delta: int,
        source_ref: str | None = None,
    ) -> LedgerDeltaResult:
        """
        Apply one signed delta.

        Postconditions:
            - Existing entry: quantity = max(0, old + delta), last_updated
              refreshed.
            - Missing entry and delta > 0: entry created with quantity =
              delta and the configured default bounds.
            - Missing entry and delta <= 0: no entry written; a negative
              delta is recorded as a shortfall against a quantity of 0.
        """
        entry = self._locked_entry(branch_id, product_id)

        if entry is None:
            if delta <= 0:
                # A missing entry holds 0, so a debit is discarded in full.
                shortfall = -delta
                if shortfall:
                    self._record_shortfall(
                        branch_id, product_id, delta, 0, shortfall, source_ref,
                        self._clock.now(),
                    )
                    self.session.flush()
                else:
                    logger.debug(
                        "ledger_delta_skipped",
                        extra={
                            "branch_id": str(branch_id),
                            "product_id": str(product_id),
                            "delta": delta,
                            "reason": "no_entry",
                        },
                    )
                return LedgerDeltaResult(
                    branch_id=branch_id,
                    product_id=product_id,
                    delta=delta,
                    quantity_before=None,
                    quantity_after=None,
                    shortfall=shortfall,
                )
            created = self._try_create(branch_id, product_id, delta)
            if created is not None:
                logger.info(
                    "ledger_entry_created",
                    extra={
                        "branch_id": str(branch_id),
                        "product_id": str(product_id),
                        "quantity": delta,
                        "source_ref": source_ref,
                    },
                )
                return LedgerDeltaResult(
                    branch_id=branch_id,
                    product_id=product_id,
                    delta=delta,
                    quantity_before=0,
                    quantity_after=delta,
                    created=True,
                )
            entry = self._locked_entry(branch_id, product_id)
            if entry is None:
                raise RuntimeError(
                    f"Ledger entry for branch {branch_id} product {product_id} "
                    "vanished after a unique-constraint conflict"
                )

        before = entry.quantity
        raw = before + delta
        after = max(0, raw)
        shortfall = -raw if raw < 0 else 0
        now = self._clock.now()

        entry.quantity = after
        entry.last_updated = now

        if shortfall:
            self._record_shortfall(
                branch_id, product_id, delta, before, shortfall, source_ref, now
            )

        self.session.flush()
        logger.debug(
            "ledger_delta_applied",
            extra={
                "branch_id": str(branch_id),
                "product_id": str(product_id),
                "delta": delta,
                "quantity_before": before,
                "quantity_after": after,
            },
        )
        return LedgerDeltaResult(
            branch_id=branch_id,
            product_id=product_id,
            delta=delta,
            quantity_before=before,
            quantity_after=after,
            shortfall=shortfall,
        )

    def apply_deltas(
        self,
        deltas: Iterable[LedgerDelta],
        source_ref: str | None = None,
    ) -> tuple[LedgerDeltaResult, ...]:
        """Sum deltas per pair, then apply each net delta in sorted pair order."""
        return tuple(
            self.apply_delta(d.branch_id, d.product_id, d.delta, source_ref=source_ref)
            for d in sum_deltas(deltas)
        )
