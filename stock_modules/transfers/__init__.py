"""
Stock transfers module.

Inter-branch transfer state machine (pending, approved, in_transit,
received, cancelled) whose ship / receive / cancel transitions move stock
through the branch inventory ledger.
"""

from stock_modules.transfers.models import (
    StockTransfer,
    TransferAction,
    TransferItem,
    TransferItemRequest,
    TransferStatus,
    TransferSummary,
    TransitionResult,
)
from stock_modules.transfers.selectors import TransferSelector
from stock_modules.transfers.service import TRANSFER_LOCKS, StockTransferService
from stock_modules.transfers.workflows import STOCK_TRANSFER_WORKFLOW

__all__ = [
    "STOCK_TRANSFER_WORKFLOW",
    "StockTransfer",
    "StockTransferService",
    "TRANSFER_LOCKS",
    "TransferAction",
    "TransferItem",
    "TransferItemRequest",
    "TransferSelector",
    "TransferStatus",
    "TransferSummary",
    "TransitionResult",
]
