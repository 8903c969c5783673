"""
Stock operator CLI.

Recalculate reorder points, print the low-stock report, create and move
stock transfers, and inspect branch stock from the command line.

Entry point: python -m scripts.cli.main
"""

from scripts.cli.main import main

__all__ = ["main"]
