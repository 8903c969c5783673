"""Kernel services (write side)."""

from stock_kernel.services.base import BaseService
from stock_kernel.services.lock_service import KeyedLockRegistry
from stock_kernel.services.sequence_service import SequenceCounter, SequenceService

__all__ = [
    "BaseService",
    "KeyedLockRegistry",
    "SequenceCounter",
    "SequenceService",
]
