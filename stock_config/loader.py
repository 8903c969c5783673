"""
Configuration Loader (``stock_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into the typed
``stock_config.schema`` dataclasses.  Runtime callers go through
``stock_config.get_active_config()``; tests call ``load_config`` and
``parse_config`` directly.

Invariants enforced
-------------------
* Missing sections fall back to schema defaults.  Unknown sections or
  keys raise ``ValueError`` so a typo never silently becomes a default.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Out-of-range values  -> ``ValueError`` from the schema.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import fields
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from stock_config.schema import (
    CostAssumptions,
    InventoryPolicy,
    LedgerDefaults,
    ReportSettings,
    StockConfig,
)

_SECTIONS: dict[str, type] = {
    "policy": InventoryPolicy,
    "costs": CostAssumptions,
    "ledger": LedgerDefaults,
    "report": ReportSettings,
}
_TOP_LEVEL_SCALARS = frozenset({"demand_window_days"})

_DECIMAL_FIELDS = frozenset({"ordering_cost", "holding_cost_rate", "item_cost"})
_FLOAT_FIELDS = frozenset({"service_level"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _coerce(name: str, value: Any) -> Any:
    if name in _DECIMAL_FIELDS:
        return Decimal(str(value))
    if name in _FLOAT_FIELDS:
        return float(value)
    return int(value)


def _parse_section(section: str, cls: type, data: dict[str, Any] | None) -> Any:
    if data is None:
        return cls()
    if not isinstance(data, dict):
        raise ValueError(f"Section '{section}' must be a mapping, got {type(data).__name__}")
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(
            f"Unknown keys in section '{section}': {', '.join(sorted(unknown))}"
        )
    return cls(**{k: _coerce(k, v) for k, v in data.items()})


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_config(data: dict[str, Any]) -> StockConfig:
    """
    Parse a configuration mapping into a ``StockConfig``.

    Raises:
        ValueError: unknown sections/keys or out-of-range values.
    """
    unknown = set(data) - set(_SECTIONS) - _TOP_LEVEL_SCALARS
    if unknown:
        raise ValueError(f"Unknown configuration sections: {', '.join(sorted(unknown))}")

    sections = {
        name: _parse_section(name, cls, data.get(name))
        for name, cls in _SECTIONS.items()
    }
    window = data.get("demand_window_days")

    return StockConfig(
        **sections,
        demand_window_days=int(window) if window is not None else 30,
        checksum=compute_checksum(data),
    )


def load_config(path: Path | str) -> StockConfig:
    """Load and parse a YAML configuration file."""
    return parse_config(load_yaml_file(Path(path)))
