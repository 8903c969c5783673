"""
Tests for the branch ledger write path.

Covers:
- Lazy creation on the first positive delta
- Non-positive delta against a missing entry creates nothing; a negative
  one is recorded as a shortfall
- Clamp at zero with a recorded shortfall
- Net deltas per pair
- Flush-only semantics (the caller owns the transaction)
- Non-negativity under arbitrary delta sequences
"""

from uuid import uuid4

import hypothesis.strategies as st
from hypothesis import HealthCheck, given, settings

from stock_config.schema import LedgerDefaults
from stock_modules.branch_inventory.models import LedgerDelta
from stock_modules.branch_inventory.selectors import BranchInventorySelector
from stock_modules.branch_inventory.service import BranchLedgerService, sum_deltas


class TestApplyDelta:
    def test_positive_delta_creates_entry(self, session, ledger_service, two_branches, product_x):
        branch_a, _ = two_branches

        result = ledger_service.apply_delta(branch_a.id, product_x.id, 20)

        assert result.created
        assert result.quantity_before == 0
        assert result.quantity_after == 20
        entry = BranchInventorySelector(session).entry(branch_a.id, product_x.id)
        assert entry.quantity == 20
        assert entry.min_stock_level == 10
        assert entry.max_stock_level == 1000

    def test_new_entry_uses_configured_bounds(
        self, session, deterministic_clock, two_branches, product_x
    ):
        service = BranchLedgerService(
            session, deterministic_clock, LedgerDefaults(min_stock_level=2, max_stock_level=40)
        )

        service.apply_delta(two_branches[0].id, product_x.id, 5)

        entry = BranchInventorySelector(session).entry(two_branches[0].id, product_x.id)
        assert (entry.min_stock_level, entry.max_stock_level) == (2, 40)
        assert entry.last_updated == deterministic_clock.now()

    def test_negative_delta_on_missing_entry_creates_nothing(
        self, session, ledger_service, two_branches, product_x
    ):
        branch_a, _ = two_branches

        result = ledger_service.apply_delta(branch_a.id, product_x.id, -5)

        assert result.skipped
        assert BranchInventorySelector(session).entry(branch_a.id, product_x.id) is None

    def test_negative_delta_on_missing_entry_records_shortfall(
        self, session, ledger_service, two_branches, product_x, captured_logs
    ):
        branch_a, _ = two_branches

        result = ledger_service.apply_delta(
            branch_a.id, product_x.id, -20, source_ref="ST-00000007"
        )

        assert result.clamped
        assert result.shortfall == 20

        shortfalls = BranchInventorySelector(session).shortfalls(branch_id=branch_a.id)
        assert [(s.quantity_before, s.shortfall, s.requested_delta) for s in shortfalls] == [
            (0, 20, -20)
        ]
        assert shortfalls[0].source_ref == "ST-00000007"

        warnings = [r for r in captured_logs() if r["message"] == "ledger_delta_clamped"]
        assert len(warnings) == 1
        assert warnings[0]["level"] == "WARNING"
        assert warnings[0]["shortfall"] == 20

    def test_zero_delta_on_missing_entry_is_noop(
        self, session, ledger_service, two_branches, product_x
    ):
        result = ledger_service.apply_delta(two_branches[0].id, product_x.id, 0)

        assert result.skipped
        assert not result.clamped
        assert BranchInventorySelector(session).shortfalls(branch_id=two_branches[0].id) == []

    def test_existing_entry_adjusted(self, ledger_service, set_ledger, ledger_quantity, two_branches, product_x):
        branch_a, _ = two_branches
        set_ledger(branch_a.id, product_x.id, 50)

        result = ledger_service.apply_delta(branch_a.id, product_x.id, -20)

        assert result.quantity_before == 50
        assert result.quantity_after == 30
        assert not result.created
        assert ledger_quantity(branch_a.id, product_x.id) == 30

    def test_clamped_at_zero(
        self, session, ledger_service, set_ledger, two_branches, product_x, captured_logs
    ):
        branch_a, _ = two_branches
        set_ledger(branch_a.id, product_x.id, 5)

        result = ledger_service.apply_delta(
            branch_a.id, product_x.id, -8, source_ref="ST-00000001"
        )

        assert result.quantity_after == 0
        assert result.clamped
        assert result.shortfall == 3

        shortfalls = BranchInventorySelector(session).shortfalls(branch_id=branch_a.id)
        assert len(shortfalls) == 1
        assert shortfalls[0].shortfall == 3
        assert shortfalls[0].requested_delta == -8
        assert shortfalls[0].source_ref == "ST-00000001"

        warnings = [r for r in captured_logs() if r["message"] == "ledger_delta_clamped"]
        assert warnings and warnings[0]["level"] == "WARNING"

    def test_does_not_commit(self, session, ledger_service, ledger_quantity, two_branches, product_x):
        branch_a, _ = two_branches
        ledger_service.apply_delta(branch_a.id, product_x.id, 7)

        session.rollback()

        assert ledger_quantity(branch_a.id, product_x.id) is None


class TestApplyDeltas:
    def test_sum_deltas_nets_per_pair(self):
        branch, product = uuid4(), uuid4()

        net = sum_deltas([
            LedgerDelta(branch, product, -4),
            LedgerDelta(branch, product, 10),
        ])

        assert net == [LedgerDelta(branch, product, 6)]

    def test_order_does_not_change_outcome(
        self, ledger_service, set_ledger, ledger_quantity, two_branches, product_x
    ):
        """-8 then +5 on a balance of 5 nets to 2, not to a clamped 5."""
        branch_a, _ = two_branches
        set_ledger(branch_a.id, product_x.id, 5)

        results = ledger_service.apply_deltas([
            LedgerDelta(branch_a.id, product_x.id, -8),
            LedgerDelta(branch_a.id, product_x.id, 5),
        ])

        assert len(results) == 1
        assert ledger_quantity(branch_a.id, product_x.id) == 2

    def test_multiple_pairs(
        self, ledger_service, set_ledger, ledger_quantity, two_branches, create_product
    ):
        branch_a, branch_b = two_branches
        p1, p2 = create_product("P-1"), create_product("P-2")
        set_ledger(branch_a.id, p1.id, 10)

        ledger_service.apply_deltas([
            LedgerDelta(branch_a.id, p1.id, -3),
            LedgerDelta(branch_b.id, p2.id, 4),
        ])

        assert ledger_quantity(branch_a.id, p1.id) == 7
        assert ledger_quantity(branch_b.id, p2.id) == 4


class TestNonNegativity:
    @given(deltas=st.lists(st.integers(min_value=-50, max_value=50), max_size=12))
    @settings(
        max_examples=30,
        deadline=None,
        suppress_health_check=[HealthCheck.function_scoped_fixture, HealthCheck.too_slow],
    )
    def test_quantity_never_negative(self, session, ledger_service, two_branches, deltas):
        """Any delta sequence leaves a non-negative quantity."""
        branch_a, _ = two_branches
        product_id = uuid4()
        expected = None

        for delta in deltas:
            result = ledger_service.apply_delta(branch_a.id, product_id, delta)
            if expected is None:
                expected = delta if delta > 0 else None
            else:
                expected = max(0, expected + delta)
            assert result.quantity_after == expected

        quantity = BranchInventorySelector(session).quantity(branch_a.id, product_id)
        assert quantity == expected
        assert quantity is None or quantity >= 0
        session.rollback()
