"""Selectors for read-only queries."""

from stock_kernel.selectors.base import BaseSelector

__all__ = ["BaseSelector"]
