"""
End-to-end tests for the operator CLI against a SQLite file.
"""

import json
from datetime import UTC, datetime
from uuid import uuid4

import pytest

from scripts.cli.main import build_parser, main
from scripts.cli.util import EXIT_CODES, item_arg
from stock_kernel.db.engine import get_session, reset_engine
from stock_kernel.exceptions import ErrorKind
from stock_modules.branch_inventory.orm import BranchInventoryModel, BranchModel
from stock_modules.replenishment.orm import ProductModel


@pytest.fixture
def db_url(tmp_path):
    url = f"sqlite:///{tmp_path / 'cli.db'}"
    yield url
    reset_engine()


@pytest.fixture
def cli(db_url, capsys):
    """Run the CLI; returns (exit_code, parsed stdout or None)."""

    def _run(*argv):
        code = main(["--database-url", db_url, *argv])
        out = capsys.readouterr().out
        return code, (json.loads(out) if out.strip() else None)

    return _run


@pytest.fixture
def seeded(cli):
    """Tables created; branches A and B; A holds 50 of X."""
    code, _ = cli("init-db")
    assert code == 0
    session = get_session()
    try:
        a = BranchModel(code="A", name="Downtown")
        b = BranchModel(code="B", name="Airport")
        x = ProductModel(sku="X-001", name="Product X", current_stock=1, reorder_level=5)
        session.add_all([a, b, x])
        session.flush()
        session.add(BranchInventoryModel(
            branch_id=a.id, product_id=x.id, quantity=50,
            last_updated=datetime(2024, 1, 31, tzinfo=UTC),
        ))
        session.commit()
        return a.id, b.id, x.id
    finally:
        session.close()


class TestArgumentParsing:
    def test_item_arg(self):
        product = uuid4()

        item = item_arg(f"{product}:20:1.5")

        assert item.product_id == product
        assert item.quantity == 20
        assert str(item.unit_cost) == "1.5"

    @pytest.mark.parametrize("value", ["nope", "x:1", f"{uuid4()}:two"])
    def test_item_arg_rejects(self, value):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["transfers", "create", "--from", str(uuid4()),
                                       "--to", str(uuid4()), "--item", value])


class TestTransferCommands:
    def test_full_lifecycle(self, cli, seeded):
        a, b, x = seeded

        code, created = cli(
            "transfers", "create", "--from", str(a), "--to", str(b), "--item", f"{x}:20"
        )
        assert code == 0
        transfer_id = created["transfer"]["id"]
        assert created["transfer"]["transfer_number"] == "ST-00000001"

        for action in ("approve", "ship", "receive"):
            code, result = cli("transfers", action, transfer_id)
            assert code == 0
        assert result["new_status"] == "received"

        code, stock = cli("branch-stock", str(b))
        assert stock[0]["quantity"] == 20

        code, listing = cli("transfers", "list", "--status", "received")
        assert [t["id"] for t in listing] == [transfer_id]

    def test_illegal_transition_exit_code(self, cli, seeded):
        a, b, x = seeded
        _, created = cli(
            "transfers", "create", "--from", str(a), "--to", str(b), "--item", f"{x}:5"
        )

        code, _ = cli("transfers", "ship", created["transfer"]["id"])

        assert code == EXIT_CODES[ErrorKind.CONFLICT]

    def test_unknown_transfer_exit_code(self, cli, seeded):
        code, _ = cli("transfers", "approve", str(uuid4()))

        assert code == EXIT_CODES[ErrorKind.NOT_FOUND]

    def test_same_branch_exit_code(self, cli, seeded):
        a, _, x = seeded

        code, _ = cli("transfers", "create", "--from", str(a), "--to", str(a), "--item", f"{x}:1")

        assert code == EXIT_CODES[ErrorKind.BAD_REQUEST]


class TestReplenishmentCommands:
    def test_report(self, cli, seeded):
        _, _, x = seeded

        code, report = cli("report")

        assert code == 0
        assert report["settings"]["service_level"] == 0.95
        assert report["low_stock_count"] == 1
        assert report["alerts"][0]["product_id"] == str(x)

    def test_recalculate(self, cli, seeded):
        code, result = cli("recalculate")

        assert code == 0
        assert result["products_updated"] == 1
        assert result["failures"] == []
