"""Tests for branch stock lines and shortfall queries."""

from uuid import uuid4

import pytest

from stock_engines.branch_stock import BranchStockStatus
from stock_kernel.exceptions import BranchNotFoundError
from stock_modules.branch_inventory.selectors import BranchInventorySelector


class TestBranchStock:
    def test_lines_classified_and_ordered(
        self, session, two_branches, create_product, set_ledger
    ):
        branch_a, _ = two_branches
        zed = create_product("Z-1", "Zed")
        alpha = create_product("A-1", "Alpha")
        mid = create_product("M-1", "Middle")
        set_ledger(branch_a.id, zed.id, 1500)
        set_ledger(branch_a.id, alpha.id, 3)
        set_ledger(branch_a.id, mid.id, 200)

        lines = BranchInventorySelector(session).branch_stock(branch_a.id)

        assert [line.name for line in lines] == ["Alpha", "Middle", "Zed"]
        assert [line.status for line in lines] == [
            BranchStockStatus.LOW, BranchStockStatus.GOOD, BranchStockStatus.OVERSTOCK,
        ]
        assert lines[0].to_dict()["status"] == "low"

    def test_other_branches_excluded(self, session, two_branches, product_x, set_ledger):
        branch_a, branch_b = two_branches
        set_ledger(branch_b.id, product_x.id, 20)

        assert BranchInventorySelector(session).branch_stock(branch_a.id) == []

    def test_unknown_branch(self, session, db_engine):
        with pytest.raises(BranchNotFoundError):
            BranchInventorySelector(session).branch_stock(uuid4())


class TestLookups:
    def test_branch(self, session, two_branches):
        branch_a, _ = two_branches

        branch = BranchInventorySelector(session).branch(branch_a.id)

        assert branch.code == "A"
        assert branch.name == "Downtown"

    def test_quantity_missing_pair(self, session, two_branches, product_x):
        assert BranchInventorySelector(session).quantity(two_branches[0].id, product_x.id) is None

    def test_shortfalls_filtered_by_product(
        self, session, ledger_service, two_branches, create_product, set_ledger
    ):
        branch_a, _ = two_branches
        p1, p2 = create_product("P-1"), create_product("P-2")
        set_ledger(branch_a.id, p1.id, 1)
        set_ledger(branch_a.id, p2.id, 1)
        ledger_service.apply_delta(branch_a.id, p1.id, -4)
        ledger_service.apply_delta(branch_a.id, p2.id, -2)

        records = BranchInventorySelector(session).shortfalls(product_id=p2.id)

        assert [(r.product_id, r.shortfall) for r in records] == [(p2.id, 1)]
