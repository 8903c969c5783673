"""CLI main: argument parsing and command dispatch."""

import argparse
import sys

from scripts.cli import config as cli_config
from scripts.cli.util import (
    emit,
    emit_error,
    enable_quiet_logging,
    item_arg,
    restore_logging,
    uuid_arg,
)
from stock_kernel.exceptions import StockKernelError

TRANSITION_COMMANDS = ("approve", "ship", "receive", "cancel")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m scripts.cli.main",
        description="Branch stock replenishment and transfer operations.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "examples:\n"
            "  python -m scripts.cli.main init-db\n"
            "  python -m scripts.cli.main recalculate --supplier 3f2a...\n"
            "  python -m scripts.cli.main transfers create --from A --to B --item P:20\n"
            "  python -m scripts.cli.main transfers ship 9c1d...\n"
        ),
    )
    parser.add_argument(
        "--database-url", type=str, default=cli_config.DB_URL,
        help=f"Database URL (default: $DATABASE_URL or {cli_config.DEFAULT_DB_URL})",
    )
    parser.add_argument(
        "--actor", type=uuid_arg, default=cli_config.SYSTEM_ACTOR_ID,
        help="Acting user id recorded on writes",
    )
    parser.add_argument(
        "--verbose", action="store_true",
        help="Keep structured logs on stderr",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("init-db", help="Create all tables")

    recalc = commands.add_parser("recalculate", help="Recalculate reorder points")
    recalc.add_argument("--supplier", type=uuid_arg, help="Only this supplier's products")
    recalc.add_argument("--product", type=uuid_arg, help="Only this product")

    report = commands.add_parser("report", help="Low-stock report")
    report.add_argument("--supplier", type=uuid_arg, help="Only this supplier's products")

    stock = commands.add_parser("branch-stock", help="Ledger lines of one branch")
    stock.add_argument("branch_id", type=uuid_arg)

    transfers = commands.add_parser("transfers", help="Stock transfers")
    transfer_commands = transfers.add_subparsers(dest="transfer_command", required=True)

    listing = transfer_commands.add_parser("list", help="List transfers, newest first")
    listing.add_argument("--status", choices=("pending", "approved", "in_transit", "received", "cancelled"))
    listing.add_argument("--branch", type=uuid_arg, help="From or to this branch")
    listing.add_argument("--limit", type=int)

    create = transfer_commands.add_parser("create", help="Create a pending transfer")
    create.add_argument("--from", dest="from_branch", type=uuid_arg, required=True)
    create.add_argument("--to", dest="to_branch", type=uuid_arg, required=True)
    create.add_argument(
        "--item", dest="items", type=item_arg, action="append", default=[],
        metavar="PRODUCT_ID:QTY[:UNIT_COST]",
    )
    create.add_argument("--notes", type=str)

    for action in TRANSITION_COMMANDS:
        sub = transfer_commands.add_parser(action, help=f"{action.capitalize()} a transfer")
        sub.add_argument("transfer_id", type=uuid_arg)
        if action == "approve":
            sub.add_argument("--approved-by", type=uuid_arg)

    return parser


def dispatch(args: argparse.Namespace, session) -> object:
    """Run one command and return its JSON-able result."""
    from stock_engines.replenishment_report import ReplenishmentReport
    from stock_modules.branch_inventory.selectors import BranchInventorySelector
    from stock_modules.replenishment.service import ReplenishmentService
    from stock_modules.transfers.selectors import TransferSelector
    from stock_modules.transfers.service import StockTransferService

    if args.command == "recalculate":
        service = ReplenishmentService(session)
        return service.recalculate(supplier_id=args.supplier, product_id=args.product).to_dict()

    if args.command == "report":
        service = ReplenishmentService(session)
        policy = service.resolve_policy()
        report: ReplenishmentReport = service.report(args.supplier, policy=policy)
        return {"settings": policy.to_dict(), **report.to_dict()}

    if args.command == "branch-stock":
        lines = BranchInventorySelector(session).branch_stock(args.branch_id)
        return [line.to_dict() for line in lines]

    if args.transfer_command == "list":
        rows = TransferSelector(session).list_transfers(
            status=args.status, branch_id=args.branch, limit=args.limit
        )
        return [row.to_dict() for row in rows]

    service = StockTransferService(session)
    if args.transfer_command == "create":
        transfer = service.create_transfer(
            args.from_branch, args.to_branch, args.items,
            requested_by=args.actor, notes=args.notes,
        )
        return {"transfer": transfer.to_dict()}

    result = service.transition(
        args.transfer_id,
        args.transfer_command,
        args.actor,
        approved_by=getattr(args, "approved_by", None),
    )
    return result.to_dict()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    from stock_kernel.db.engine import create_tables, init_engine_from_url, session_scope

    try:
        init_engine_from_url(args.database_url, echo=False)
    except Exception as exc:
        print(f"  ERROR: Cannot connect to database: {exc}", file=sys.stderr)
        return 1

    muted = [] if args.verbose else enable_quiet_logging()
    try:
        if args.command == "init-db":
            create_tables()
            emit({"tables_created": True})
            return 0

        try:
            with session_scope() as session:
                payload = dispatch(args, session)
        except StockKernelError as exc:
            return emit_error(exc)
        emit(payload)
        return 0
    finally:
        restore_logging(muted)


if __name__ == "__main__":
    sys.exit(main())
