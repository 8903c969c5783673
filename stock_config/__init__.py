"""
stock_config -- single public entrypoint for replenishment configuration.

Responsibility:
    Provides ``get_active_config()``, the one place runtime code obtains
    policy fallbacks, EOQ cost assumptions and ledger defaults.  The file
    is ``$STOCK_CONFIG_PATH`` when set, otherwise the packaged
    ``defaults.yaml``.

Architecture position:
    Configuration -- sits above ``stock_kernel`` and ``stock_engines`` and
    below ``stock_modules``.  The kernel and engines MUST NEVER import
    from ``stock_config``.

Failure modes:
    - ``FileNotFoundError`` -- STOCK_CONFIG_PATH points nowhere.
    - ``ValueError`` -- schema validation failures.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path

from stock_config.loader import compute_checksum, load_config, parse_config
from stock_config.schema import (
    CostAssumptions,
    InventoryPolicy,
    LedgerDefaults,
    ReportSettings,
    StockConfig,
)

_logger = logging.getLogger("stock_kernel.config")

CONFIG_PATH_ENV = "STOCK_CONFIG_PATH"
DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"


@lru_cache(maxsize=None)
def _load_cached(path: str) -> StockConfig:
    config = load_config(path)
    _logger.info(
        "STOCK_CONFIG_TRACE",
        extra={
            "trace_type": "STOCK_CONFIG_TRACE",
            "config_path": path,
            "checksum": config.checksum,
            "demand_window_days": config.demand_window_days,
        },
    )
    return config


def get_active_config(path: Path | str | None = None) -> StockConfig:
    """
    The runtime configuration entrypoint.

    Args:
        path: Explicit file, mostly for tests.  Defaults to
            ``$STOCK_CONFIG_PATH`` or the packaged defaults.
    """
    resolved = path or os.environ.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH
    return _load_cached(str(resolved))


def clear_config_cache() -> None:
    """Drop cached configurations. FOR TESTING ONLY."""
    _load_cached.cache_clear()


__all__ = [
    "CONFIG_PATH_ENV",
    "CostAssumptions",
    "DEFAULT_CONFIG_PATH",
    "InventoryPolicy",
    "LedgerDefaults",
    "ReportSettings",
    "StockConfig",
    "clear_config_cache",
    "compute_checksum",
    "get_active_config",
    "load_config",
    "parse_config",
]
