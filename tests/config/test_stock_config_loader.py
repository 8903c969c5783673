"""
Tests for configuration loading.

Covers:
- Packaged defaults
- Partial overrides fall back to schema defaults
- Unknown sections and keys are rejected
- Checksum determinism
- STOCK_CONFIG_PATH selection and caching
"""

from decimal import Decimal

import pytest
import yaml

from stock_config import (
    CONFIG_PATH_ENV,
    DEFAULT_CONFIG_PATH,
    clear_config_cache,
    compute_checksum,
    get_active_config,
    load_config,
    parse_config,
)
from stock_config.schema import LedgerDefaults, StockConfig


@pytest.fixture(autouse=True)
def _fresh_cache():
    clear_config_cache()
    yield
    clear_config_cache()


def _write(tmp_path, data, name="stock.yaml"):
    path = tmp_path / name
    path.write_text(yaml.safe_dump(data))
    return path


class TestDefaults:
    def test_packaged_defaults_match_schema(self):
        config = load_config(DEFAULT_CONFIG_PATH)
        schema = StockConfig()

        assert config.policy == schema.policy
        assert config.costs == schema.costs
        assert config.ledger == schema.ledger
        assert config.report == schema.report
        assert config.demand_window_days == 30

    def test_costs_are_decimal(self):
        config = load_config(DEFAULT_CONFIG_PATH)

        assert config.costs.ordering_cost == Decimal("25")
        assert config.costs.holding_cost_rate == Decimal("0.2")
        assert isinstance(config.costs.item_cost, Decimal)

    def test_empty_file_is_all_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        config = load_config(path)

        assert config.policy.safety_stock_days == 7
        assert config.ledger.max_stock_level == 1000


class TestOverrides:
    def test_partial_section(self, tmp_path):
        path = _write(tmp_path, {"policy": {"service_level": 0.9}})

        config = load_config(path)

        assert config.policy.service_level == 0.9
        assert config.policy.default_lead_time_days == 3

    def test_window_override(self):
        config = parse_config({"demand_window_days": 14})

        assert config.demand_window_days == 14

    def test_ledger_override(self):
        config = parse_config({"ledger": {"min_stock_level": 0, "max_stock_level": 50}})

        assert config.ledger == LedgerDefaults(min_stock_level=0, max_stock_level=50)


class TestValidation:
    def test_unknown_section(self):
        with pytest.raises(ValueError, match="Unknown configuration sections"):
            parse_config({"polcy": {}})

    def test_unknown_key(self):
        with pytest.raises(ValueError, match="safety_days"):
            parse_config({"policy": {"safety_days": 3}})

    def test_section_must_be_mapping(self):
        with pytest.raises(ValueError, match="must be a mapping"):
            parse_config({"costs": [1, 2]})

    def test_out_of_range_value(self):
        with pytest.raises(ValueError, match="service_level"):
            parse_config({"policy": {"service_level": 1.5}})

    def test_crossed_ledger_bounds(self):
        with pytest.raises(ValueError, match="max_stock_level"):
            parse_config({"ledger": {"min_stock_level": 20, "max_stock_level": 10}})

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")


class TestChecksum:
    def test_deterministic_and_order_independent(self):
        a = compute_checksum({"policy": {"safety_stock_days": 5}, "demand_window_days": 30})
        b = compute_checksum({"demand_window_days": 30, "policy": {"safety_stock_days": 5}})

        assert a == b

    def test_changes_with_content(self):
        assert parse_config({}).checksum != parse_config({"demand_window_days": 7}).checksum


class TestActiveConfig:
    def test_default_path(self, monkeypatch):
        monkeypatch.delenv(CONFIG_PATH_ENV, raising=False)

        config = get_active_config()

        assert config == load_config(DEFAULT_CONFIG_PATH)

    def test_env_path(self, tmp_path, monkeypatch):
        path = _write(tmp_path, {"demand_window_days": 10})
        monkeypatch.setenv(CONFIG_PATH_ENV, str(path))

        assert get_active_config().demand_window_days == 10

    def test_cached_until_cleared(self, tmp_path, captured_logs):
        path = _write(tmp_path, {"demand_window_days": 10})

        first = get_active_config(path)
        second = get_active_config(path)

        assert first is second
        traces = [r for r in captured_logs() if r["message"] == "STOCK_CONFIG_TRACE"]
        assert len(traces) == 1
        assert traces[0]["checksum"] == first.checksum
