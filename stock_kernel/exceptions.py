"""
Typed Exception Hierarchy for the Stock Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Stock movements touch several ledger rows per request.  Callers (an HTTP
handler, the operator CLI, a scheduled job) must decide what to do with a
rejection without parsing message strings:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Every exception has a KIND attribute (bad_request / not_found /
     conflict / partial) that the calling layer maps onto its own
     transport status
  4. Exceptions carry structured DATA (not just a message string)

Example - WRONG way:
    try:
        service.transition(transfer_id, "ship", actor_id)
    except Exception as e:
        if "Can only ship" in str(e):
            ...

Example - RIGHT way:
    try:
        service.transition(transfer_id, "ship", actor_id)
    except StateConflictError as e:
        return {"error": e.code, "current_status": e.current_status}, 409

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    StockKernelError (base)
    |
    +-- ValidationError                      kind=bad_request
    |   +-- SameBranchTransferError
    |   +-- EmptyTransferError
    |   +-- InvalidTransferItemError
    |   +-- UnknownTransferActionError
    |
    +-- NotFoundError                        kind=not_found
    |   +-- TransferNotFoundError
    |   +-- ProductNotFoundError
    |   +-- BranchNotFoundError
    |   +-- SupplierNotFoundError
    |
    +-- StateConflictError                   kind=conflict
    |   +-- InvalidTransitionError
    |   +-- TransferConcurrencyError
    |
    +-- PartialComputationError              kind=partial

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                         | When Raised
-------------|------------------------------|--------------------------------------
Validation   | VALIDATION_ERROR             | Missing / malformed input field
             | SAME_BRANCH_TRANSFER         | from_branch == to_branch
             | EMPTY_TRANSFER               | Transfer request without items
             | INVALID_TRANSFER_ITEM        | Non-positive quantity, bad cost, ...
             | UNKNOWN_TRANSFER_ACTION      | Action name not in the workflow
-------------|------------------------------|--------------------------------------
Not found    | TRANSFER_NOT_FOUND           | Transfer id does not exist
             | PRODUCT_NOT_FOUND            | Product id does not exist
             | BRANCH_NOT_FOUND             | Branch id does not exist
             | SUPPLIER_NOT_FOUND           | Supplier id does not exist
-------------|------------------------------|--------------------------------------
Conflict     | INVALID_TRANSITION           | Action not allowed from current status
             | TRANSFER_CONCURRENCY_CONFLICT| Status changed under us (lost CAS)
-------------|------------------------------|--------------------------------------
Partial      | PARTIAL_COMPUTATION          | One product failed in a batch recalc

Storage failures are NOT wrapped: ``sqlalchemy.exc.SQLAlchemyError`` and
subclasses propagate unmodified after the owning service rolls back.
There are no implicit retries in this kernel.

===============================================================================
HANDLING PATTERNS
===============================================================================

1. MAP BY KIND AT THE EDGE:

    except StockKernelError as e:
        status = {"bad_request": 400, "not_found": 404,
                  "conflict": 409}.get(e.kind, 500)
        return {"error": e.code, "message": str(e)}, status

2. PARTIAL COMPUTATION IS DATA, NOT CONTROL FLOW:

    result = replenishment.recalculate()
    for failure in result.failures:
        log.warning(failure.code, extra={"product_id": failure.product_id})
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Transport-agnostic classification of a rejection."""

    BAD_REQUEST = "bad_request"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    PARTIAL = "partial"


class StockKernelError(Exception):
    """
    Base exception for all stock kernel errors.

    All subclasses must have a ``code`` class attribute for machine-readable
    error identification and a ``kind`` class attribute for classification.
    """

    code: str = "STOCK_KERNEL_ERROR"
    kind: ErrorKind = ErrorKind.BAD_REQUEST

    def to_dict(self) -> dict:
        """Structured representation for API responses and logs."""
        payload = {"error": self.code, "kind": self.kind.value, "message": str(self)}
        for key, value in vars(self).items():
            if not key.startswith("_"):
                payload[key] = value if isinstance(value, (int, float, str, type(None))) else str(value)
        return payload


# Validation exceptions


class ValidationError(StockKernelError):
    """Input rejected before any write was issued."""

    code: str = "VALIDATION_ERROR"
    kind: ErrorKind = ErrorKind.BAD_REQUEST

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


class SameBranchTransferError(ValidationError):
    """Source and destination branch are identical."""

    code: str = "SAME_BRANCH_TRANSFER"

    def __init__(self, branch_id: str):
        self.branch_id = branch_id
        super().__init__("to_branch_id", f"cannot transfer to the same branch ({branch_id})")


class EmptyTransferError(ValidationError):
    """Transfer request carries no items."""

    code: str = "EMPTY_TRANSFER"

    def __init__(self):
        super().__init__("items", "at least one item is required")


class InvalidTransferItemError(ValidationError):
    """A transfer line is malformed."""

    code: str = "INVALID_TRANSFER_ITEM"

    def __init__(self, index: int, reason: str):
        self.index = index
        super().__init__(f"items[{index}]", reason)


class UnknownTransferActionError(ValidationError):
    """Action name is not part of the transfer workflow."""

    code: str = "UNKNOWN_TRANSFER_ACTION"

    def __init__(self, action: str, valid_actions: tuple[str, ...]):
        self.action = action
        self.valid_actions = ", ".join(valid_actions)
        super().__init__(
            "action", f"'{action}' is not one of: {self.valid_actions}"
        )


# Not-found exceptions


class NotFoundError(StockKernelError):
    """Referenced entity does not exist."""

    code: str = "NOT_FOUND"
    kind: ErrorKind = ErrorKind.NOT_FOUND

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = str(entity_id)
        super().__init__(f"{entity_type} not found: {entity_id}")


class TransferNotFoundError(NotFoundError):
    code: str = "TRANSFER_NOT_FOUND"

    def __init__(self, transfer_id: str):
        super().__init__("Stock transfer", transfer_id)


class ProductNotFoundError(NotFoundError):
    code: str = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: str):
        super().__init__("Product", product_id)


class BranchNotFoundError(NotFoundError):
    code: str = "BRANCH_NOT_FOUND"

    def __init__(self, branch_id: str):
        super().__init__("Branch", branch_id)


class SupplierNotFoundError(NotFoundError):
    code: str = "SUPPLIER_NOT_FOUND"

    def __init__(self, supplier_id: str):
        super().__init__("Supplier", supplier_id)


# State conflict exceptions


class StateConflictError(StockKernelError):
    """
    Requested change is incompatible with the entity's current state.

    Always carries ``current_status`` so the caller can reconcile.
    """

    code: str = "STATE_CONFLICT"
    kind: ErrorKind = ErrorKind.CONFLICT

    def __init__(self, message: str, current_status: str):
        self.current_status = current_status
        super().__init__(message)


class InvalidTransitionError(StateConflictError):
    """Workflow has no transition for (current status, action)."""

    code: str = "INVALID_TRANSITION"

    def __init__(self, transfer_id: str, action: str, current_status: str):
        self.transfer_id = str(transfer_id)
        self.action = action
        super().__init__(
            f"Cannot {action} transfer {transfer_id} in status '{current_status}'",
            current_status,
        )


class TransferConcurrencyError(StateConflictError):
    """
    Compare-and-set on the transfer status failed.

    Another transition committed between our read and our write.
    """

    code: str = "TRANSFER_CONCURRENCY_CONFLICT"

    def __init__(self, transfer_id: str, expected_status: str, expected_version: int):
        self.transfer_id = str(transfer_id)
        self.expected_version = expected_version
        super().__init__(
            f"Transfer {transfer_id} was modified concurrently "
            f"(expected status '{expected_status}' at version {expected_version})",
            expected_status,
        )


# Batch computation


class PartialComputationError(StockKernelError):
    """
    One product's recalculation failed inside a batch.

    Collected into the batch result; the batch itself continues.
    """

    code: str = "PARTIAL_COMPUTATION"
    kind: ErrorKind = ErrorKind.PARTIAL

    def __init__(self, product_id: str, reason: str):
        self.product_id = str(product_id)
        self.reason = reason
        super().__init__(f"Recalculation skipped for product {product_id}: {reason}")
