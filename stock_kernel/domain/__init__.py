"""Pure domain types shared by every stock module."""

from stock_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from stock_kernel.domain.values import (
    CostAssumptions,
    InventoryPolicy,
    ProductProfile,
    SupplierLink,
)
from stock_kernel.domain.workflow import Transition, Workflow

__all__ = [
    "Clock",
    "CostAssumptions",
    "DeterministicClock",
    "InventoryPolicy",
    "ProductProfile",
    "SupplierLink",
    "SystemClock",
    "Transition",
    "Workflow",
]
