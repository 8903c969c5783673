"""
Stock Transfer Workflows.

State machine for inter-branch stock transfers.  The ledger effect of each
stock-moving transition is planned in ``helpers.plan_ledger_deltas``.
"""

from stock_kernel.domain.workflow import Transition, Workflow
from stock_kernel.logging_config import get_logger
from stock_modules.transfers.models import TransferAction, TransferStatus

logger = get_logger("modules.transfers.workflows")

_PENDING = TransferStatus.PENDING.value
_APPROVED = TransferStatus.APPROVED.value
_IN_TRANSIT = TransferStatus.IN_TRANSIT.value
_RECEIVED = TransferStatus.RECEIVED.value
_CANCELLED = TransferStatus.CANCELLED.value


STOCK_TRANSFER_WORKFLOW = Workflow(
    name="stock_transfer",
    description="Inter-branch stock transfer",
    initial_state=_PENDING,
    states=(_PENDING, _APPROVED, _IN_TRANSIT, _RECEIVED, _CANCELLED),
    transitions=(
        Transition(_PENDING, _APPROVED, action=TransferAction.APPROVE.value),
        Transition(
            _APPROVED, _IN_TRANSIT, action=TransferAction.SHIP.value, moves_stock=True
        ),
        Transition(
            _IN_TRANSIT, _RECEIVED, action=TransferAction.RECEIVE.value, moves_stock=True
        ),
        Transition(_PENDING, _CANCELLED, action=TransferAction.CANCEL.value),
        Transition(_APPROVED, _CANCELLED, action=TransferAction.CANCEL.value),
        # Stock already left the source branch; cancelling puts it back.
        Transition(
            _IN_TRANSIT, _CANCELLED, action=TransferAction.CANCEL.value, moves_stock=True
        ),
    ),
    terminal_states=(_RECEIVED, _CANCELLED),
)

logger.info(
    "transfer_workflow_defined",
    extra={
        "workflow": STOCK_TRANSFER_WORKFLOW.name,
        "actions": list(STOCK_TRANSFER_WORKFLOW.actions),
    },
)
