"""
StockConfig schema.

Frozen dataclasses that YAML configuration is parsed into.  The policy and
cost types are the kernel's own value objects, so a parsed configuration
can be handed straight to the engines.

Every class validates in ``__post_init__`` and raises ``ValueError``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from stock_kernel.domain.values import CostAssumptions, InventoryPolicy

__all__ = [
    "CostAssumptions",
    "InventoryPolicy",
    "LedgerDefaults",
    "ReportSettings",
    "StockConfig",
]


@dataclass(frozen=True)
class LedgerDefaults:
    """Bounds stamped on a branch ledger entry when it is first created."""

    min_stock_level: int = 10
    max_stock_level: int = 1000

    def __post_init__(self) -> None:
        if self.min_stock_level < 0:
            raise ValueError(
                f"min_stock_level must be >= 0, got {self.min_stock_level}"
            )
        if self.max_stock_level < self.min_stock_level:
            raise ValueError(
                f"max_stock_level ({self.max_stock_level}) must be >= "
                f"min_stock_level ({self.min_stock_level})"
            )


@dataclass(frozen=True)
class ReportSettings:
    no_demand_sentinel_days: int = 999

    def __post_init__(self) -> None:
        if self.no_demand_sentinel_days <= 0:
            raise ValueError(
                "no_demand_sentinel_days must be > 0, "
                f"got {self.no_demand_sentinel_days}"
            )


@dataclass(frozen=True)
class StockConfig:
    """
    Root configuration object.

    ``policy`` is only the fallback: an inventory policy row in the
    database takes precedence at recalculation time.
    """

    policy: InventoryPolicy = field(default_factory=InventoryPolicy)
    costs: CostAssumptions = field(default_factory=CostAssumptions)
    ledger: LedgerDefaults = field(default_factory=LedgerDefaults)
    report: ReportSettings = field(default_factory=ReportSettings)
    demand_window_days: int = 30
    checksum: str = ""

    def __post_init__(self) -> None:
        if self.demand_window_days < 1:
            raise ValueError(
                f"demand_window_days must be >= 1, got {self.demand_window_days}"
            )
