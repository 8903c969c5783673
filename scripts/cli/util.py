"""CLI utilities: argument parsing helpers, JSON output, logging mute/restore."""

import argparse
import json
import logging
import sys
from decimal import Decimal, InvalidOperation
from uuid import UUID

from stock_kernel.exceptions import ErrorKind, StockKernelError
from stock_modules.transfers.models import TransferItemRequest

EXIT_CODES: dict[ErrorKind, int] = {
    ErrorKind.BAD_REQUEST: 2,
    ErrorKind.NOT_FOUND: 3,
    ErrorKind.CONFLICT: 4,
    ErrorKind.PARTIAL: 5,
}


def uuid_arg(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a UUID: {value!r}") from None


def item_arg(value: str) -> TransferItemRequest:
    """Parse PRODUCT_ID:QTY[:UNIT_COST]."""
    parts = value.split(":")
    if len(parts) not in (2, 3):
        raise argparse.ArgumentTypeError(
            f"expected PRODUCT_ID:QTY[:UNIT_COST], got {value!r}"
        )
    product_id = uuid_arg(parts[0])
    try:
        quantity = int(parts[1])
    except ValueError:
        raise argparse.ArgumentTypeError(f"quantity is not an integer: {parts[1]!r}") from None
    unit_cost = Decimal("0")
    if len(parts) == 3:
        try:
            unit_cost = Decimal(parts[2])
        except InvalidOperation:
            raise argparse.ArgumentTypeError(f"unit cost is not a number: {parts[2]!r}") from None
    return TransferItemRequest(product_id=product_id, quantity=quantity, unit_cost=unit_cost)


def emit(payload, stream=None) -> None:
    """Print a JSON document."""
    print(json.dumps(payload, indent=2, default=str), file=stream or sys.stdout)


def emit_error(exc: StockKernelError) -> int:
    """Print a typed rejection to stderr and return its exit code."""
    emit(exc.to_dict(), stream=sys.stderr)
    return EXIT_CODES.get(exc.kind, 1)


def enable_quiet_logging():
    """Mute console handlers so CLI output stays clean. Returns list to pass to restore_logging."""
    sk_logger = logging.getLogger("stock_kernel")
    muted = []
    for h in sk_logger.handlers:
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler):
            muted.append((h, h.level))
            h.setLevel(logging.CRITICAL + 1)
    return muted


def restore_logging(muted):
    """Restore muted handlers after a quiet-logging section."""
    for h, orig_level in muted:
        h.setLevel(orig_level)
